"""
domain/ — Sales-eligibility triage engine.

Pure decision logic over in-memory data: no database, no HTTP. Each
module is usable from the API layer or directly from tests.

Modules:
    enums              — Closed vocabularies (answers, outcomes, steps)
    triage_tables      — Block conditions, VAN / terminal tables, templates
    triage_state       — The mutable answer record + boundary parsing
    recommendation     — Resolver and caller-facing verdicts
    triage_wizard      — Step machine with cascading reset
    triage_snapshot    — Snapshot / restore for the consultation record
"""

from domain.enums import (
    BusinessType,
    StoreType,
    PosPlatform,
    RecommendationKey,
    Severity,
    TriageStep,
    VerdictKind,
)
from domain.recommendation import classify, resolve
from domain.triage_snapshot import restore, snapshot
from domain.triage_state import TriageInputError, TriageState
from domain.triage_wizard import TriageWizard

__all__ = [
    "BusinessType",
    "StoreType",
    "PosPlatform",
    "RecommendationKey",
    "Severity",
    "TriageStep",
    "VerdictKind",
    "TriageInputError",
    "TriageState",
    "TriageWizard",
    "classify",
    "resolve",
    "restore",
    "snapshot",
]
