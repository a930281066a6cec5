from __future__ import annotations

from datetime import datetime, timedelta

from models import TriageDraft


def start_session(client, handler_id: str = "handler-1") -> str:
    resp = client.post("/api/v1/triage/sessions", json={"handler_id": handler_id})
    assert resp.status_code == 201
    return resp.json()["token"]


def test_catalog_lists_every_table(client):
    data = client.get("/api/v1/triage/catalog").json()

    assert len(data["block_conditions"]) == 9
    assert "KICC" in data["vans"]["compatible"]
    assert "KSNET" in data["vans"]["incompatible"]
    assert data["terminals"]["KICC"] == ["TS-114A"]
    assert {r["key"] for r in data["recommendations"]} == {
        "new_delivery", "new_no_delivery", "existing_windows",
        "existing_android", "blocked_contract", "need_compatibility_check",
    }
    assert data["total_steps"] == 6


def test_evaluate_android_scenario(client):
    resp = client.post("/api/v1/triage/evaluate", json={
        "answers": {
            "business_type": "food",
            "store_type": "existing",
            "contract_obligation_cleared": "yes",
            "will_replace_device": "yes",
            "current_pos_platform": "android",
            "selected_van": "KICC",
            "selected_terminal": "TS-114A",
        },
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["verdict"]["kind"] == "recommendation"
    assert data["verdict"]["recommendation"] == "existing_android"
    assert data["is_complete"] is True
    assert data["compatibility"]["status"] == "compatible"
    assert data["compatibility"]["compatible"] is True


def test_evaluate_blocked(client):
    resp = client.post("/api/v1/triage/evaluate", json={
        "blocked_condition_ids": ["qr_order"],
        "answers": {"business_type": "food", "store_type": "new", "uses_delivery": True},
    })
    data = resp.json()
    assert data["verdict"]["kind"] == "blocked"
    assert data["verdict"]["blocked_condition_ids"] == ["qr_order"]
    assert data["is_complete"] is False
    assert data["current_step"] == "block_check"


def test_evaluate_rejects_out_of_branch_answer(client):
    resp = client.post("/api/v1/triage/evaluate", json={
        "answers": {"business_type": "food", "store_type": "new", "current_pos_platform": "android"},
    })
    assert resp.status_code == 400
    assert "current_pos_platform" in resp.json()["detail"]


def test_evaluate_rejects_unknown_answer_field(client):
    resp = client.post("/api/v1/triage/evaluate", json={"answers": {"favourite_colour": "red"}})
    assert resp.status_code == 422


def test_session_walkthrough_with_cascade(client):
    token = start_session(client)

    resp = client.put(f"/api/v1/triage/sessions/{token}/answers", json={
        "business_type": "food",
        "store_type": "existing",
        "contract_obligation_cleared": "yes",
        "will_replace_device": "yes",
        "current_pos_platform": "android",
        "selected_van": "KICC",
    })
    assert resp.status_code == 200
    assert resp.json()["current_step"] == "complete"

    resp = client.put(f"/api/v1/triage/sessions/{token}/answers", json={"store_type": "new"})
    answers = resp.json()["answers"]
    assert answers["store_type"] == "new"
    assert answers["contract_obligation_cleared"] is None
    assert answers["selected_van"] is None

    resp = client.get(f"/api/v1/triage/sessions/{token}")
    assert resp.json()["current_step"] == "new_store"


def test_session_block_toggle(client):
    token = start_session(client)

    resp = client.post(f"/api/v1/triage/sessions/{token}/blocks/mac_ipad")
    assert resp.json()["verdict"]["kind"] == "blocked"

    resp = client.post(f"/api/v1/triage/sessions/{token}/blocks/mac_ipad")
    assert resp.json()["verdict"]["kind"] == "incomplete"

    resp = client.post(f"/api/v1/triage/sessions/{token}/blocks/fax_machine")
    assert resp.status_code == 400


def test_unknown_session_is_404(client):
    assert client.get("/api/v1/triage/sessions/nope").status_code == 404
    assert client.put("/api/v1/triage/sessions/nope/answers", json={}).status_code == 404
    assert client.delete("/api/v1/triage/sessions/nope").status_code == 404


def test_delete_session(client, db_session):
    token = start_session(client)
    assert client.delete(f"/api/v1/triage/sessions/{token}").status_code == 200
    assert db_session.query(TriageDraft).count() == 0


def test_expired_session_is_discarded(client, db_session):
    token = start_session(client)
    draft = db_session.query(TriageDraft).filter(TriageDraft.token == token).first()
    draft.updated_at = datetime.utcnow() - timedelta(days=2)
    db_session.commit()

    assert client.get(f"/api/v1/triage/sessions/{token}").status_code == 404
    assert db_session.query(TriageDraft).count() == 0


def test_sessions_are_independent(client):
    first = start_session(client, "handler-1")
    second = start_session(client, "handler-2")

    client.put(f"/api/v1/triage/sessions/{first}/answers", json={"business_type": "non_food"})

    assert client.get(f"/api/v1/triage/sessions/{first}").json()["verdict"]["kind"] == "manual_review"
    assert client.get(f"/api/v1/triage/sessions/{second}").json()["answers"]["business_type"] is None
