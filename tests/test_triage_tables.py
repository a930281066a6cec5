from __future__ import annotations

import pytest

from domain.enums import BlockGroup, CompatibilityStatus, RecommendationKey, Severity
from domain.triage_tables import (
    BLOCK_CONDITIONS,
    COMPATIBLE_VANS,
    DEFAULT_TABLES,
    INCOMPATIBLE_VANS,
    RECOMMENDATION_TEMPLATES,
    CompatibilityTables,
    check_compatibility,
    get_block_condition,
    get_block_conditions,
    is_compatible_terminal,
    is_compatible_van,
    template_for,
    terminals_for,
)


def test_van_compatibility_examples():
    assert is_compatible_van("KSNET") is False
    assert is_compatible_van("KICC") is True
    assert "TS-114A" in terminals_for("KICC")
    assert is_compatible_terminal("KICC", "TS-114A") is True
    assert is_compatible_terminal("KICC", "unknown-model") is False


def test_terminals_for_incompatible_or_unknown_van_is_empty():
    assert terminals_for("KSNET") == ()
    assert terminals_for("NOT-A-VAN") == ()
    assert terminals_for(None) == ()
    assert is_compatible_terminal("KSNET", "TS-114A") is False


def test_terminals_keep_picker_order():
    assert terminals_for("NICE정보통신") == ("NC-7000", "NC-8000", "NC-8000(P)", "NC-6000")


def test_every_compatible_van_has_terminals():
    for van in COMPATIBLE_VANS:
        assert terminals_for(van), van


def test_compatible_and_incompatible_vans_do_not_overlap():
    assert not set(COMPATIBLE_VANS) & set(INCOMPATIBLE_VANS)


@pytest.mark.parametrize("key", list(RecommendationKey))
def test_every_recommendation_key_has_a_template(key):
    template = template_for(key)
    assert template.key == key
    assert template.title
    assert template.items
    assert template.severity in set(Severity)


def test_contract_template_is_blocked_severity():
    assert template_for(RecommendationKey.BLOCKED_CONTRACT).severity == Severity.BLOCKED
    assert template_for(RecommendationKey.NEED_COMPATIBILITY_CHECK).severity == Severity.WARNING


def test_block_condition_catalog():
    ids = [c.id for c in BLOCK_CONDITIONS]
    assert len(ids) == len(set(ids))
    assert [c.id for c in get_block_conditions(BlockGroup.DEVICE)] == [
        "mac_ipad", "mobile_pos", "terminal", "dual_kds",
    ]
    assert len(get_block_conditions(BlockGroup.SERVICE)) == 5
    assert get_block_condition("qr_order").group == BlockGroup.SERVICE
    assert get_block_condition("nope") is None


def test_list_vans_keeps_display_order():
    vans = DEFAULT_TABLES.list_vans()
    assert vans["compatible"] == list(COMPATIBLE_VANS)
    assert vans["incompatible"] == list(INCOMPATIBLE_VANS)


def test_tables_reject_overlapping_van_sets():
    with pytest.raises(ValueError):
        CompatibilityTables(
            compatible_vans=frozenset({"KICC"}),
            incompatible_vans=frozenset({"KICC"}),
        )


def test_alternative_tables_are_isolated_from_defaults():
    tables = CompatibilityTables(
        compatible_vans=frozenset({"TESTVAN"}),
        incompatible_vans=frozenset(),
        terminals={"TESTVAN": ("T-1",)},
    )
    assert tables.is_compatible_van("TESTVAN")
    assert not tables.is_compatible_van("KICC")
    assert not is_compatible_van("TESTVAN")


# ---------------------------------------------------------------------------
# Compatibility sub-check
# ---------------------------------------------------------------------------

def test_check_compatibility_compatible_terminal():
    result = check_compatibility("KICC", "TS-114A")
    assert result.status == CompatibilityStatus.COMPATIBLE
    assert result.compatible is True
    assert result.message == "compatible, no terminal swap needed"


def test_check_compatibility_unlisted_terminal():
    result = check_compatibility("KICC", "unknown-model")
    assert result.status == CompatibilityStatus.INCOMPATIBLE_TERMINAL
    assert result.compatible is False


def test_check_compatibility_incompatible_van():
    result = check_compatibility("KSNET", None)
    assert result.status == CompatibilityStatus.INCOMPATIBLE_VAN
    assert result.compatible is False
    assert result.terminals == ()


def test_check_compatibility_pending_selection():
    assert check_compatibility(None, None).status == CompatibilityStatus.VAN_NOT_SELECTED
    pending = check_compatibility("KOCES", None)
    assert pending.status == CompatibilityStatus.TERMINAL_NOT_SELECTED
    assert pending.compatible is None
    assert pending.terminals == ("KTC-K501", "KTC-SC500", "KTC-K400")


def test_template_table_covers_recommendation_keys_exactly():
    assert set(RECOMMENDATION_TEMPLATES) == set(RecommendationKey)
    assert set(DEFAULT_TABLES.templates) == set(RecommendationKey)
