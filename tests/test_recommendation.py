from __future__ import annotations

import itertools

import pytest

from domain.enums import (
    BusinessType,
    PosPlatform,
    RecommendationKey,
    StoreType,
    VerdictKind,
)
from domain.recommendation import classify, resolve
from domain.triage_state import TriageState


def mk_state(**kwargs) -> TriageState:
    return TriageState(**kwargs)


def mk_existing(**kwargs) -> TriageState:
    return TriageState(business_type=BusinessType.FOOD, store_type=StoreType.EXISTING, **kwargs)


def test_empty_state_resolves_to_none():
    assert resolve(TriageState()) is None


@pytest.mark.parametrize("uses_delivery, expected", [
    (True, RecommendationKey.NEW_DELIVERY),
    (False, RecommendationKey.NEW_NO_DELIVERY),
    (None, None),
])
def test_new_store_path(uses_delivery, expected):
    state = mk_state(
        business_type=BusinessType.FOOD,
        store_type=StoreType.NEW,
        uses_delivery=uses_delivery,
    )
    assert resolve(state) == expected


def test_contract_not_cleared_is_blocked_contract():
    assert resolve(mk_existing(contract_obligation_cleared=False)) == RecommendationKey.BLOCKED_CONTRACT


def test_existing_store_incomplete_steps():
    assert resolve(mk_existing()) is None
    assert resolve(mk_existing(contract_obligation_cleared=True)) is None
    assert resolve(mk_existing(contract_obligation_cleared=True, will_replace_device=True)) is None


def test_no_device_replacement_needs_compatibility_check():
    state = mk_existing(contract_obligation_cleared=True, will_replace_device=False)
    assert resolve(state) == RecommendationKey.NEED_COMPATIBILITY_CHECK


@pytest.mark.parametrize("platform, expected", [
    (PosPlatform.WINDOWS, RecommendationKey.EXISTING_WINDOWS),
    (PosPlatform.ANDROID, RecommendationKey.EXISTING_ANDROID),
])
def test_existing_store_platform(platform, expected):
    state = mk_existing(
        contract_obligation_cleared=True,
        will_replace_device=True,
        current_pos_platform=platform,
    )
    assert resolve(state) == expected


def test_incompatible_terminal_does_not_change_android_outcome():
    # VAN / terminal verdict is advisory only
    state = mk_existing(
        contract_obligation_cleared=True,
        will_replace_device=True,
        current_pos_platform=PosPlatform.ANDROID,
        selected_van="KSNET",
    )
    assert resolve(state) == RecommendationKey.EXISTING_ANDROID


def test_non_food_resolves_to_none():
    state = mk_state(business_type=BusinessType.NON_FOOD, store_type=StoreType.NEW, uses_delivery=True)
    assert resolve(state) is None


def test_missing_store_type_resolves_to_none():
    assert resolve(mk_state(business_type=BusinessType.FOOD)) is None


def test_blocked_dominates_every_combination():
    values = {
        "business_type": [None, *BusinessType],
        "store_type": [None, *StoreType],
        "uses_delivery": [None, True, False],
        "contract_obligation_cleared": [None, True, False],
        "will_replace_device": [None, True, False],
        "current_pos_platform": [None, *PosPlatform],
    }
    names = list(values)
    for combo in itertools.product(*values.values()):
        state = TriageState(blocked_condition_ids={"qr_order"}, **dict(zip(names, combo)))
        assert resolve(state) is None


def test_resolve_is_total_over_answer_combinations():
    values = {
        "business_type": [None, *BusinessType],
        "store_type": [None, *StoreType],
        "uses_delivery": [None, True, False],
        "contract_obligation_cleared": [None, True, False],
        "will_replace_device": [None, True, False],
        "current_pos_platform": [None, *PosPlatform],
    }
    names = list(values)
    for combo in itertools.product(*values.values()):
        result = resolve(TriageState(**dict(zip(names, combo))))
        assert result is None or result in set(RecommendationKey)


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------

def test_classify_distinguishes_blocked_manual_and_incomplete():
    blocked = classify(TriageState(blocked_condition_ids={"mac_ipad", "brand_app"}))
    assert blocked.kind == VerdictKind.BLOCKED
    assert blocked.blocked_condition_ids == ("brand_app", "mac_ipad")

    manual = classify(mk_state(business_type=BusinessType.NON_FOOD))
    assert manual.kind == VerdictKind.MANUAL_REVIEW
    assert manual.recommendation is None

    incomplete = classify(mk_state(business_type=BusinessType.FOOD))
    assert incomplete.kind == VerdictKind.INCOMPLETE


def test_classify_recommendation_carries_template():
    verdict = classify(mk_existing(contract_obligation_cleared=False))
    assert verdict.kind == VerdictKind.RECOMMENDATION
    assert verdict.recommendation == RecommendationKey.BLOCKED_CONTRACT
    assert verdict.template.title == "영업 불가 - 약정 잔여"
