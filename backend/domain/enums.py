"""
domain/enums.py — Closed vocabularies for the sales-eligibility triage engine.

Uses StrEnum so values serialize cleanly to JSON and can be stored directly
inside the consultation's triage snapshot.
"""
from __future__ import annotations

import sys
if sys.version_info >= (3, 11):
    from enum import StrEnum
else:
    from enum import Enum
    class StrEnum(str, Enum):
        """Backport of StrEnum for Python < 3.11."""
        pass


# ---------------------------------------------------------------------------
# Block conditions
# ---------------------------------------------------------------------------
class BlockGroup(StrEnum):
    """Which side of the store setup a disqualifying fact belongs to."""
    DEVICE = "device"
    SERVICE = "service"


# ---------------------------------------------------------------------------
# Triage answers
# ---------------------------------------------------------------------------
class BusinessType(StrEnum):
    """Only food businesses are in scope for an automatic recommendation."""
    FOOD = "food"
    NON_FOOD = "non_food"


class StoreType(StrEnum):
    NEW = "new"
    EXISTING = "existing"


class PosPlatform(StrEnum):
    """POS platform the existing store runs today."""
    WINDOWS = "windows"
    ANDROID = "android"


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------
class RecommendationKey(StrEnum):
    """Every outcome label the resolver can produce.

    Each member MUST have a template in domain.triage_tables.
    """
    NEW_DELIVERY = "new_delivery"
    NEW_NO_DELIVERY = "new_no_delivery"
    EXISTING_WINDOWS = "existing_windows"
    EXISTING_ANDROID = "existing_android"
    BLOCKED_CONTRACT = "blocked_contract"
    NEED_COMPATIBILITY_CHECK = "need_compatibility_check"


class Severity(StrEnum):
    """How a recommendation card should be presented."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    BLOCKED = "blocked"


class VerdictKind(StrEnum):
    """Caller-facing triage states that must be rendered distinctly.

    BLOCKED        -> at least one block condition checked
    MANUAL_REVIEW  -> non-food business, routed to manual handling
    INCOMPLETE     -> not enough answers yet
    RECOMMENDATION -> a RecommendationKey was derived
    """
    BLOCKED = "blocked"
    MANUAL_REVIEW = "manual_review"
    INCOMPLETE = "incomplete"
    RECOMMENDATION = "recommendation"


class CompatibilityStatus(StrEnum):
    """Advisory VAN / terminal check shown on the compatibility step."""
    VAN_NOT_SELECTED = "van_not_selected"
    INCOMPATIBLE_VAN = "incompatible_van"
    TERMINAL_NOT_SELECTED = "terminal_not_selected"
    COMPATIBLE = "compatible"
    INCOMPATIBLE_TERMINAL = "incompatible_terminal"


# ---------------------------------------------------------------------------
# Wizard steps
# ---------------------------------------------------------------------------
class TriageStep(StrEnum):
    """The wizard's steps, in display order.

    NEW_STORE and EXISTING_STORE are alternative branches of step 4.
    COMPLETE is not a question; it marks that the agent may file.
    """
    BLOCK_CHECK = "block_check"
    BUSINESS_TYPE = "business_type"
    STORE_TYPE = "store_type"
    NEW_STORE = "new_store"
    EXISTING_STORE = "existing_store"
    COMPATIBILITY_CHECK = "compatibility_check"
    COMPLETE = "complete"


# ---------------------------------------------------------------------------
# Consultation
# ---------------------------------------------------------------------------
class ConsultationStatus(StrEnum):
    """Consultation pipeline: pending -> consulting -> contracted | failed."""
    PENDING = "pending"
    CONSULTING = "consulting"
    CONTRACTED = "contracted"
    FAILED = "failed"
