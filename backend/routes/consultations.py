"""
Consultation routes — file a consultation with its triage result, list and
inspect consultations, and re-display the triage that led to one.
"""

from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from domain.triage_snapshot import restore
from domain.triage_wizard import TriageWizard
from models import Consultation
from routes.triage import serialize_wizard
from schemas import ConsultationCreate, ConsultationResponse, ConsultationStatusUpdate
from services.consultation_service import (
    file_consultation,
    load_triage_snapshot,
    update_status,
)

router = APIRouter(prefix="/consultations", tags=["Consultations"])


@router.post("/", response_model=ConsultationResponse, status_code=201)
def create_consultation(data: ConsultationCreate, db: Session = Depends(get_db)):
    """File a consultation.

    Pass ``triage_session`` to attach a live checklist (it is discarded
    afterwards) or ``triage_data`` to attach an existing snapshot.
    """
    if not data.privacy_agreed:
        raise HTTPException(status_code=400, detail="Privacy consent is required")
    if data.triage_session and data.triage_data is not None:
        raise HTTPException(status_code=400, detail="Send either triage_session or triage_data, not both")

    fields = data.model_dump(exclude={"triage_session", "triage_data"})
    if not fields["needs_hardware"]:
        for key in ("hardware_type", "hardware_qty", "install_date", "hardware_memo"):
            fields[key] = None

    try:
        return file_consultation(
            db,
            fields,
            triage_snapshot=data.triage_data,
            triage_session=data.triage_session,
        )
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=List[ConsultationResponse])
def list_consultations(
    handler_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="pending|consulting|contracted|failed"),
    region: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """List consultations with optional filters."""
    query = db.query(Consultation)

    if handler_id:
        query = query.filter(Consultation.handler_id == handler_id)
    if status:
        query = query.filter(Consultation.status == status)
    if region:
        query = query.filter(Consultation.region == region)

    return query.order_by(Consultation.created_at.desc(), Consultation.id.desc()).offset(skip).limit(limit).all()


@router.get("/{consultation_id}", response_model=ConsultationResponse)
def get_consultation(consultation_id: int, db: Session = Depends(get_db)):
    consultation = db.query(Consultation).filter(Consultation.id == consultation_id).first()
    if not consultation:
        raise HTTPException(status_code=404, detail="Consultation not found")
    return consultation


@router.get("/{consultation_id}/triage")
def get_consultation_triage(consultation_id: int, db: Session = Depends(get_db)):
    """Show why a recommendation was given, read-only.

    ``recorded_recommendation`` is what was stored at filing time; the rest is
    re-derived from the restored answers.
    """
    try:
        payload = load_triage_snapshot(db, consultation_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if payload is None:
        return {
            "consultation_id": consultation_id,
            "has_triage": False,
            "recorded_recommendation": None,
            "triage": None,
        }

    wizard = TriageWizard(restore(payload))
    return {
        "consultation_id": consultation_id,
        "has_triage": True,
        "schema_version": payload.get("schema_version"),
        "recorded_recommendation": payload.get("recommendation"),
        "triage": serialize_wizard(wizard),
    }


@router.put("/{consultation_id}/status", response_model=ConsultationResponse)
def change_status(consultation_id: int, data: ConsultationStatusUpdate, db: Session = Depends(get_db)):
    """Move a consultation through its pipeline."""
    try:
        return update_status(db, consultation_id, data.status)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
