"""
Triage routes — expose the eligibility checklist as a stateful wizard
(per-session drafts) and as a one-shot evaluation.
"""

from dataclasses import asdict
from typing import Optional, Tuple
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from domain.enums import RecommendationKey
from domain.recommendation import TriageVerdict
from domain.triage_snapshot import snapshot
from domain.triage_state import TriageInputError
from domain.triage_tables import (
    DEFAULT_TABLES,
    CompatibilityResult,
    RecommendationTemplate,
)
from domain.triage_wizard import STEP_NUMBERS, TOTAL_STEPS, TriageWizard
from schemas import TriageAnswers, TriageEvaluateRequest, TriageSessionCreate
from services.triage_session_service import (
    StaleSessionError,
    create_session,
    discard_session,
    load_session,
    save_wizard,
)

router = APIRouter(prefix="/triage", tags=["Triage"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _serialize_template(template: RecommendationTemplate) -> dict:
    return {
        "key": template.key.value,
        "title": template.title,
        "title_en": template.title_en,
        "items": list(template.items),
        "severity": template.severity.value,
    }


def _serialize_verdict(verdict: TriageVerdict) -> dict:
    return {
        "kind": verdict.kind.value,
        "recommendation": verdict.recommendation.value if verdict.recommendation else None,
        "template": _serialize_template(verdict.template) if verdict.template else None,
        "blocked_condition_ids": list(verdict.blocked_condition_ids),
        "message": verdict.message,
    }


def _serialize_compatibility(result: Optional[CompatibilityResult]) -> Optional[dict]:
    if result is None:
        return None
    data = asdict(result)
    data["status"] = result.status.value
    data["terminals"] = list(result.terminals)
    return data


def serialize_wizard(wizard: TriageWizard) -> dict:
    """Everything a client needs to render the checklist."""
    steps = wizard.visible_steps()
    return {
        "answers": snapshot(wizard.state),
        "steps": [{"step": s.value, "number": STEP_NUMBERS[s]} for s in steps],
        "total_steps": TOTAL_STEPS,
        "current_step": steps[-1].value,
        "is_complete": wizard.is_complete(),
        "verdict": _serialize_verdict(wizard.verdict()),
        "compatibility": _serialize_compatibility(wizard.compatibility()),
    }


def _answers_dict(answers: TriageAnswers) -> dict:
    return answers.model_dump(exclude_unset=True)


def _get_session_or_404(db: Session, token: str) -> Tuple[TriageWizard, int]:
    loaded = load_session(db, token)
    if loaded is None:
        raise HTTPException(status_code=404, detail="Triage session not found or expired")
    return loaded


def _save_or_409(db: Session, token: str, wizard: TriageWizard, version: int) -> None:
    try:
        save_wizard(db, token, wizard, expected_version=version)
    except StaleSessionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError:
        raise HTTPException(status_code=404, detail="Triage session not found or expired")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/catalog")
def get_catalog():
    """Block conditions, VAN lists, terminal models and recommendation cards."""
    tables = DEFAULT_TABLES
    return {
        "block_conditions": [
            {"id": c.id, "label": c.label, "label_en": c.label_en, "group": c.group.value}
            for c in tables.block_conditions
        ],
        "vans": tables.list_vans(),
        "terminals": {van: list(models) for van, models in tables.terminals.items()},
        "recommendations": [
            _serialize_template(tables.template_for(key)) for key in RecommendationKey
        ],
        "total_steps": TOTAL_STEPS,
    }


@router.post("/evaluate")
def evaluate(data: TriageEvaluateRequest):
    """Run a full set of answers through the wizard without storing anything."""
    wizard = TriageWizard()
    try:
        wizard.apply_answers(_answers_dict(data.answers))
        wizard.set_blocked(data.blocked_condition_ids)
    except TriageInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return serialize_wizard(wizard)


@router.post("/sessions", status_code=201)
def start_session(data: Optional[TriageSessionCreate] = None, db: Session = Depends(get_db)):
    """Start a fresh checklist for one handler."""
    token, wizard = create_session(db, data.handler_id if data else None)
    return {"token": token, **serialize_wizard(wizard)}


@router.get("/sessions/{token}")
def get_session(token: str, db: Session = Depends(get_db)):
    wizard, _ = _get_session_or_404(db, token)
    return {"token": token, **serialize_wizard(wizard)}


@router.post("/sessions/{token}/blocks/{condition_id}")
def toggle_block_condition(token: str, condition_id: str, db: Session = Depends(get_db)):
    """Check or uncheck one block condition."""
    wizard, version = _get_session_or_404(db, token)
    try:
        wizard.toggle_block(condition_id)
    except TriageInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _save_or_409(db, token, wizard, version)
    return {"token": token, **serialize_wizard(wizard)}


@router.put("/sessions/{token}/answers")
def update_answers(token: str, answers: TriageAnswers, db: Session = Depends(get_db)):
    """Apply one or more answers; downstream answers reset automatically."""
    wizard, version = _get_session_or_404(db, token)
    try:
        wizard.apply_answers(_answers_dict(answers))
    except TriageInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    _save_or_409(db, token, wizard, version)
    return {"token": token, **serialize_wizard(wizard)}


@router.delete("/sessions/{token}")
def delete_session(token: str, db: Session = Depends(get_db)):
    """Discard the checklist (clear)."""
    if not discard_session(db, token):
        raise HTTPException(status_code=404, detail="Triage session not found")
    return {"message": "Triage session discarded", "token": token}
