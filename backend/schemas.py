"""
Pydantic schemas for request/response validation.
"""

import json
from datetime import datetime, date
from typing import Optional, List, Any, Union
from pydantic import BaseModel, Field, field_validator


# ============================= Triage Schemas =============================

YesNo = Union[bool, str]


class TriageAnswers(BaseModel):
    """Raw wizard answers; "yes"/"no" and booleans are both accepted.

    Only fields present in the request are applied (explicit null clears).
    """
    business_type: Optional[str] = None    # food | non_food
    store_type: Optional[str] = None       # new | existing
    uses_delivery: Optional[YesNo] = None
    contract_obligation_cleared: Optional[YesNo] = None
    will_replace_device: Optional[YesNo] = None
    current_pos_platform: Optional[str] = None  # windows | android
    selected_van: Optional[str] = None
    selected_terminal: Optional[str] = None

    model_config = {"extra": "forbid"}


class TriageEvaluateRequest(BaseModel):
    blocked_condition_ids: List[str] = []
    answers: TriageAnswers = Field(default_factory=TriageAnswers)


class TriageSessionCreate(BaseModel):
    handler_id: Optional[str] = None


# ============================= Consultation Schemas =============================

class ConsultationCreate(BaseModel):
    handler_id: str = Field(..., min_length=1, max_length=64)
    handler_name: Optional[str] = None
    store_name: str = Field(..., min_length=1, max_length=200)
    owner_phone: str = Field(..., min_length=9, max_length=20)
    region: str = Field(..., min_length=1)
    sub_region: Optional[str] = None
    business_type: str = Field(..., min_length=1)
    privacy_agreed: bool = False

    store_size: Optional[str] = None
    table_count: Optional[int] = Field(None, ge=0)
    memo: Optional[str] = None

    needs_hardware: bool = False
    hardware_type: Optional[str] = None
    hardware_qty: Optional[int] = Field(None, ge=1)
    install_date: Optional[date] = None
    hardware_memo: Optional[str] = None

    # Either a live wizard session or an already-built snapshot
    triage_session: Optional[str] = None
    triage_data: Optional[dict] = None


class ConsultationStatusUpdate(BaseModel):
    status: str  # pending | consulting | contracted | failed


class ConsultationResponse(BaseModel):
    id: int
    handler_id: str
    handler_name: Optional[str] = None
    store_name: str
    owner_phone: str
    region: str
    sub_region: Optional[str] = None
    address: Optional[str] = None
    business_type: str
    privacy_agreed: bool
    store_size: Optional[str] = None
    table_count: Optional[int] = None
    memo: Optional[str] = None
    needs_hardware: bool
    hardware_type: Optional[str] = None
    hardware_qty: Optional[int] = None
    install_date: Optional[date] = None
    hardware_memo: Optional[str] = None
    triage_data: Optional[Any] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("triage_data", mode="before")
    @classmethod
    def _decode_triage_data(cls, v):
        # Stored verbatim as JSON text; hand it back as it was submitted
        if isinstance(v, str):
            try:
                return json.loads(v)
            except (ValueError, RecursionError):
                return None
        return v
