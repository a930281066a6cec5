"""
Transient storage for in-progress triage wizards.

Each session gets a random token and its own TriageDraft row, so two
handlers never share a TriageState. The row holds a triage snapshot and is
deleted once the consultation is filed or the session expires.
"""

import json
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from config import settings
from domain.triage_snapshot import restore, snapshot
from domain.triage_wizard import TriageWizard
from models import TriageDraft

logger = logging.getLogger(__name__)


def _is_expired(draft: TriageDraft, now: datetime) -> bool:
    last_touched = draft.updated_at or draft.created_at
    if last_touched is None:
        return False
    return now - last_touched > timedelta(minutes=settings.TRIAGE_SESSION_TTL_MINUTES)


def create_session(db: Session, handler_id: Optional[str] = None) -> Tuple[str, TriageWizard]:
    """Start an empty wizard and persist it under a fresh token."""
    wizard = TriageWizard()
    token = secrets.token_urlsafe(24)
    db.add(TriageDraft(
        token=token,
        handler_id=handler_id,
        data=json.dumps(snapshot(wizard.state), ensure_ascii=False),
    ))
    db.commit()
    logger.info("Triage session started for handler %s", handler_id or "-")
    return token, wizard


class StaleSessionError(RuntimeError):
    """The draft changed between load and save; the caller should reload."""


def load_session(db: Session, token: str) -> Optional[Tuple[TriageWizard, int]]:
    """Rebuild the wizard for ``token`` with the draft version it came from.

    None if the token is unknown or the draft has expired.
    """
    draft = db.query(TriageDraft).filter(TriageDraft.token == token).first()
    if not draft:
        return None

    if _is_expired(draft, datetime.utcnow()):
        logger.info("Triage session %s… expired; discarding", token[:8])
        db.delete(draft)
        db.commit()
        return None

    return TriageWizard(restore(draft.data)), draft.version


def load_wizard(db: Session, token: str) -> Optional[TriageWizard]:
    """Rebuild the wizard for ``token``; None if unknown or expired."""
    loaded = load_session(db, token)
    return loaded[0] if loaded else None


def save_wizard(
    db: Session,
    token: str,
    wizard: TriageWizard,
    expected_version: Optional[int] = None,
) -> int:
    """Write the wizard's current answers back to its draft.

    With ``expected_version`` the write only lands if nobody saved the draft
    since it was loaded; otherwise StaleSessionError is raised and nothing
    changes. Returns the new version.
    """
    query = db.query(TriageDraft).filter(TriageDraft.token == token)
    if expected_version is not None:
        query = query.filter(TriageDraft.version == expected_version)

    updated = query.update(
        {
            TriageDraft.data: json.dumps(snapshot(wizard.state), ensure_ascii=False),
            TriageDraft.version: TriageDraft.version + 1,
            TriageDraft.updated_at: datetime.utcnow(),
        },
        synchronize_session=False,
    )
    if not updated:
        db.rollback()
        if expected_version is not None and db.query(TriageDraft).filter(TriageDraft.token == token).count():
            raise StaleSessionError(f"Triage session {token[:8]}… was changed by another request")
        raise ValueError(f"Triage session {token} not found")
    db.commit()

    return db.query(TriageDraft.version).filter(TriageDraft.token == token).scalar()


def discard_session(db: Session, token: str, commit: bool = True) -> bool:
    """Delete a draft. Returns False if there was nothing to delete."""
    deleted = db.query(TriageDraft).filter(TriageDraft.token == token).delete()
    if commit:
        db.commit()
    if deleted:
        logger.info("Triage session %s… discarded", token[:8])
    return bool(deleted)


def purge_expired_sessions(db: Session, now: Optional[datetime] = None) -> int:
    """Delete every draft past its TTL. Returns the number removed."""
    now = now or datetime.utcnow()
    cutoff = now - timedelta(minutes=settings.TRIAGE_SESSION_TTL_MINUTES)
    removed = db.query(TriageDraft).filter(TriageDraft.updated_at < cutoff).delete()
    db.commit()
    if removed:
        logger.info("Purged %d expired triage sessions", removed)
    return removed
