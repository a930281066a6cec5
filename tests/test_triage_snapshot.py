from __future__ import annotations

import json

import pytest

from domain.enums import BusinessType, PosPlatform, StoreType
from domain.triage_snapshot import SNAPSHOT_SCHEMA_VERSION, restore, snapshot
from domain.triage_state import TriageState


def mk_android_state(**overrides) -> TriageState:
    values = dict(
        business_type=BusinessType.FOOD,
        store_type=StoreType.EXISTING,
        contract_obligation_cleared=True,
        will_replace_device=True,
        current_pos_platform=PosPlatform.ANDROID,
        selected_van="KICC",
        selected_terminal="TS-114A",
    )
    values.update(overrides)
    return TriageState(**values)


VALID_STATES = [
    TriageState(),
    TriageState(blocked_condition_ids={"mac_ipad", "qr_order"}),
    TriageState(business_type=BusinessType.NON_FOOD),
    TriageState(business_type=BusinessType.FOOD, store_type=StoreType.NEW, uses_delivery=False),
    TriageState(
        business_type=BusinessType.FOOD,
        store_type=StoreType.EXISTING,
        contract_obligation_cleared=False,
    ),
    mk_android_state(),
    mk_android_state(selected_van="KSNET", selected_terminal=None),
    mk_android_state(blocked_condition_ids={"reservation"}),
]


@pytest.mark.parametrize("state", VALID_STATES)
def test_restore_inverts_snapshot(state):
    assert restore(snapshot(state)) == state


def test_snapshot_survives_json_storage():
    state = mk_android_state()
    stored = json.dumps(snapshot(state), ensure_ascii=False)
    assert restore(json.loads(stored)) == state
    assert restore(stored) == state


def test_snapshot_carries_outcome_and_version():
    data = snapshot(mk_android_state())
    assert data["schema_version"] == SNAPSHOT_SCHEMA_VERSION
    assert data["recommendation"] == "existing_android"
    assert data["compatible"] is True
    assert data["current_pos_platform"] == "android"


def test_snapshot_is_order_independent():
    a = snapshot(TriageState(blocked_condition_ids={"qr_order", "mac_ipad", "dual_kds"}))
    b = snapshot(TriageState(blocked_condition_ids={"dual_kds", "mac_ipad", "qr_order"}))
    assert a == b
    assert a["blocked_condition_ids"] == ["dual_kds", "mac_ipad", "qr_order"]
    assert a["recommendation"] is None


def test_snapshot_compatible_is_none_without_terminal():
    assert snapshot(mk_android_state(selected_terminal=None))["compatible"] is None


DEEPLY_NESTED = "[" * 200_000 + "]" * 200_000


@pytest.mark.parametrize("payload", [{}, None, [], "not json", 42, {"unrelated": 1}, DEEPLY_NESTED])
def test_restore_degrades_to_empty_state(payload):
    assert restore(payload) == TriageState()


def test_restore_ignores_ill_typed_fields():
    state = restore({
        "blocked_condition_ids": "mac_ipad",
        "business_type": "food",
        "store_type": 7,
        "uses_delivery": "maybe",
    })
    assert state == TriageState(business_type=BusinessType.FOOD)


def test_restore_drops_answers_whose_guard_fails():
    state = restore({
        "business_type": "food",
        "store_type": "new",
        "uses_delivery": True,
        "contract_obligation_cleared": True,  # belongs to the existing-store branch
        "selected_terminal": "TS-114A",
    })
    assert state.uses_delivery is True
    assert state.contract_obligation_cleared is None
    assert state.selected_terminal is None


def test_restore_reads_legacy_payload():
    legacy = {
        "blocked": [],
        "businessType": "food",
        "storeType": "existing",
        "useDelivery": None,
        "contractOk": True,
        "replaceDevice": True,
        "currentPos": "android",
        "van": "KICC",
        "terminal": "TS-114A",
        "compatible": True,
        "recommendation": "existing_android",
    }
    assert restore(legacy) == mk_android_state()


def test_restore_tolerates_newer_schema_with_extra_fields():
    data = snapshot(mk_android_state())
    data["schema_version"] = SNAPSHOT_SCHEMA_VERSION + 1
    data["store_photo_count"] = 3
    assert restore(data) == mk_android_state()
