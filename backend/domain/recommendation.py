"""
domain/recommendation.py — Maps a TriageState to a recommendation.

resolve() is the pure decision tree. classify() wraps it into the
caller-facing verdict so that "blocked", "manual review" and "incomplete"
are never collapsed into one generic "no recommendation".

VAN / terminal compatibility is deliberately NOT part of the outcome: it is
advisory feedback layered on top of EXISTING_ANDROID.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from domain.enums import (
    BusinessType,
    PosPlatform,
    RecommendationKey,
    StoreType,
    VerdictKind,
)
from domain.triage_state import TriageState
from domain.triage_tables import (
    DEFAULT_TABLES,
    CompatibilityTables,
    RecommendationTemplate,
)


def resolve(state: TriageState) -> RecommendationKey | None:
    """Return the recommendation for ``state``, or None.

    None covers three cases the caller tells apart with classify():
    blocked, non-food, and not enough answers yet. Never raises.
    """
    if state.blocked_condition_ids:
        return None
    if state.business_type != BusinessType.FOOD:
        return None

    if state.store_type == StoreType.NEW:
        if state.uses_delivery is True:
            return RecommendationKey.NEW_DELIVERY
        if state.uses_delivery is False:
            return RecommendationKey.NEW_NO_DELIVERY
        return None

    if state.store_type == StoreType.EXISTING:
        if state.contract_obligation_cleared is False:
            return RecommendationKey.BLOCKED_CONTRACT
        if state.contract_obligation_cleared is not True:
            return None
        if state.will_replace_device is False:
            return RecommendationKey.NEED_COMPATIBILITY_CHECK
        if state.will_replace_device is not True:
            return None
        if state.current_pos_platform == PosPlatform.WINDOWS:
            return RecommendationKey.EXISTING_WINDOWS
        if state.current_pos_platform == PosPlatform.ANDROID:
            return RecommendationKey.EXISTING_ANDROID
        return None

    return None


@dataclass(frozen=True)
class TriageVerdict:
    kind: VerdictKind
    recommendation: Optional[RecommendationKey] = None
    template: Optional[RecommendationTemplate] = None
    blocked_condition_ids: tuple[str, ...] = field(default_factory=tuple)
    message: str = ""


def classify(
    state: TriageState,
    tables: CompatibilityTables = DEFAULT_TABLES,
) -> TriageVerdict:
    """Resolve ``state`` and label the result for display."""
    if state.blocked_condition_ids:
        return TriageVerdict(
            kind=VerdictKind.BLOCKED,
            blocked_condition_ids=tuple(sorted(state.blocked_condition_ids)),
            message="Store matches a block condition; sales cannot proceed.",
        )

    if state.business_type == BusinessType.NON_FOOD:
        return TriageVerdict(
            kind=VerdictKind.MANUAL_REVIEW,
            message="Non-food businesses need a separate inquiry.",
        )

    key = resolve(state)
    if key is None:
        return TriageVerdict(
            kind=VerdictKind.INCOMPLETE,
            message="More answers are needed before a recommendation can be made.",
        )

    template = tables.template_for(key)
    return TriageVerdict(
        kind=VerdictKind.RECOMMENDATION,
        recommendation=key,
        template=template,
        message=template.title_en,
    )
