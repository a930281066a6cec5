"""
SQLAlchemy ORM models for the triage backend.
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Boolean, Text, Date, DateTime,
)
from database import Base


# ---------------------------------------------------------------------------
# Consultation
# ---------------------------------------------------------------------------
class Consultation(Base):
    """A store consultation filed by a handler.

    ``triage_data`` holds the triage snapshot verbatim (JSON text). Only
    domain.triage_snapshot.restore() interprets it.
    """
    __tablename__ = "consultations"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    handler_id = Column(String(64), nullable=False, index=True)
    handler_name = Column(String(200), nullable=True)

    store_name = Column(String(200), nullable=False)
    owner_phone = Column(String(20), nullable=False)
    region = Column(String(100), nullable=False)
    sub_region = Column(String(100), nullable=True)
    address = Column(String(300), nullable=True)
    business_type = Column(String(50), nullable=False)  # store category, e.g. korean | cafe | retail
    privacy_agreed = Column(Boolean, default=False)

    store_size = Column(String(30), nullable=True)
    table_count = Column(Integer, nullable=True)
    memo = Column(Text, nullable=True)

    needs_hardware = Column(Boolean, default=False)
    hardware_type = Column(String(30), nullable=True)  # new | replace | additional
    hardware_qty = Column(Integer, nullable=True)
    install_date = Column(Date, nullable=True)
    hardware_memo = Column(Text, nullable=True)

    triage_data = Column(Text, nullable=True)  # JSON triage snapshot

    status = Column(String(30), default="pending", index=True)
    # pending | consulting | contracted | failed

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ---------------------------------------------------------------------------
# Triage draft (transient wizard state between requests)
# ---------------------------------------------------------------------------
class TriageDraft(Base):
    """One in-progress triage wizard, keyed by a random session token.

    Deleted once the consultation it feeds is filed, or when it expires.
    """
    __tablename__ = "triage_drafts"

    token = Column(String(64), primary_key=True)
    handler_id = Column(String(64), nullable=True, index=True)
    data = Column(Text, nullable=False)  # JSON triage snapshot
    version = Column(Integer, nullable=False, default=1)  # bumped on every save
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
