"""
Consultation filing and triage snapshot retrieval.

The consultation store keeps the triage snapshot verbatim; this module never
interprets it beyond JSON encoding. Reading it back for display goes through
domain.triage_snapshot.restore().
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from config import settings
from domain.enums import ConsultationStatus
from domain.triage_snapshot import snapshot
from models import Consultation
from services.triage_session_service import discard_session, load_wizard

logger = logging.getLogger(__name__)

CONSULTATION_STATUSES = [s.value for s in ConsultationStatus]


def file_consultation(
    db: Session,
    fields: dict[str, Any],
    triage_snapshot: Optional[dict] = None,
    triage_session: Optional[str] = None,
) -> Consultation:
    """Persist a consultation together with its triage result.

    When ``triage_session`` is given the snapshot is taken from that wizard,
    which must be complete, and the session is discarded in the same
    transaction. Otherwise ``triage_snapshot`` (possibly None, when the
    handler skipped the wizard) is stored as-is.
    """
    if triage_session:
        wizard = load_wizard(db, triage_session)
        if wizard is None:
            raise LookupError(f"Triage session {triage_session} not found or expired")
        if not wizard.is_complete():
            raise ValueError("Triage is not complete; finish the checklist before filing")
        triage_snapshot = snapshot(wizard.state)

    if triage_snapshot is None and settings.REQUIRE_TRIAGE_FOR_CONSULTATION:
        raise ValueError("A completed triage checklist is required to file a consultation")

    region = fields.get("region") or ""
    sub_region = fields.get("sub_region") or ""

    consultation = Consultation(
        **fields,
        address=f"{region} {sub_region}".strip() or None,
        triage_data=json.dumps(triage_snapshot, ensure_ascii=False) if triage_snapshot is not None else None,
        status=ConsultationStatus.PENDING.value,
    )
    db.add(consultation)

    if triage_session:
        discard_session(db, triage_session, commit=False)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(consultation)

    triage_note = "skipped"
    if triage_snapshot is not None:
        triage_note = triage_snapshot.get("recommendation") or "no recommendation"
    logger.info(
        "Consultation %s filed by %s for %s (triage: %s)",
        consultation.id, consultation.handler_id, consultation.store_name, triage_note,
    )
    return consultation


def load_triage_snapshot(db: Session, consultation_id: int) -> Optional[dict]:
    """Return the stored snapshot for a consultation.

    Raises LookupError if the consultation does not exist; returns None when
    it was filed without triage or the stored text is unreadable.
    """
    consultation = db.query(Consultation).filter(Consultation.id == consultation_id).first()
    if not consultation:
        raise LookupError(f"Consultation {consultation_id} not found")

    if not consultation.triage_data:
        return None
    try:
        payload = json.loads(consultation.triage_data)
    except (ValueError, RecursionError):
        logger.warning("Consultation %s has unreadable triage data", consultation_id)
        return None
    return payload if isinstance(payload, dict) else None


def update_status(db: Session, consultation_id: int, new_status: str) -> Consultation:
    """Move a consultation through pending -> consulting -> contracted | failed."""
    if new_status not in CONSULTATION_STATUSES:
        raise ValueError(f"Invalid status. Must be one of: {CONSULTATION_STATUSES}")

    consultation = db.query(Consultation).filter(Consultation.id == consultation_id).first()
    if not consultation:
        raise LookupError(f"Consultation {consultation_id} not found")

    old_status = consultation.status
    consultation.status = new_status
    db.commit()
    db.refresh(consultation)
    logger.info("Consultation %s: %s -> %s", consultation_id, old_status, new_status)
    return consultation
