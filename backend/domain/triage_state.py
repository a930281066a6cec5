"""
domain/triage_state.py — The mutable record a triage wizard accumulates.

TriageState is strongly typed. UI proxies ("yes"/"no", raw strings) are
converted at the boundary by parse_answer(); nothing downstream sees them.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Optional

from domain.enums import BusinessType, PosPlatform, StoreType


class TriageInputError(ValueError):
    """An answer that cannot be applied to the current wizard state."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        super().__init__(f"{field_name}: {message}")


@dataclass
class TriageState:
    """Answers collected so far.

    Every field after ``business_type`` is only meaningful while its guard
    holds (see domain.triage_wizard.FIELD_GUARDS); the wizard keeps them
    None otherwise.
    """
    blocked_condition_ids: set[str] = field(default_factory=set)
    business_type: Optional[BusinessType] = None
    store_type: Optional[StoreType] = None
    uses_delivery: Optional[bool] = None
    contract_obligation_cleared: Optional[bool] = None
    will_replace_device: Optional[bool] = None
    current_pos_platform: Optional[PosPlatform] = None
    selected_van: Optional[str] = None
    selected_terminal: Optional[str] = None

    @property
    def is_blocked(self) -> bool:
        return bool(self.blocked_condition_ids)

    def copy(self) -> "TriageState":
        return replace(self, blocked_condition_ids=set(self.blocked_condition_ids))


ANSWER_FIELDS: tuple[str, ...] = tuple(
    f.name for f in fields(TriageState) if f.name != "blocked_condition_ids"
)


# ---------------------------------------------------------------------------
# Boundary parsing
# ---------------------------------------------------------------------------

_YES = {"yes", "y", "true", "1", "예"}
_NO = {"no", "n", "false", "0", "아니오"}


def parse_yes_no(field_name: str, raw: Any) -> Optional[bool]:
    """Map a UI yes/no proxy onto a bool. None and "" mean "unanswered"."""
    if raw is None or isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        if raw in (0, 1):
            return bool(raw)
        raise TriageInputError(field_name, f"expected yes/no, got {raw!r}")
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value == "":
            return None
        if value in _YES:
            return True
        if value in _NO:
            return False
    raise TriageInputError(field_name, f"expected yes/no, got {raw!r}")


def _parse_enum(enum_cls, field_name: str, raw: Any):
    if raw is None or raw == "":
        return None
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise TriageInputError(field_name, f"expected one of [{allowed}], got {raw!r}") from None


def _parse_text(field_name: str, raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise TriageInputError(field_name, f"expected text, got {raw!r}")
    return raw.strip() or None


_PARSERS = {
    "business_type": lambda raw: _parse_enum(BusinessType, "business_type", raw),
    "store_type": lambda raw: _parse_enum(StoreType, "store_type", raw),
    "uses_delivery": lambda raw: parse_yes_no("uses_delivery", raw),
    "contract_obligation_cleared": lambda raw: parse_yes_no("contract_obligation_cleared", raw),
    "will_replace_device": lambda raw: parse_yes_no("will_replace_device", raw),
    "current_pos_platform": lambda raw: _parse_enum(PosPlatform, "current_pos_platform", raw),
    "selected_van": lambda raw: _parse_text("selected_van", raw),
    "selected_terminal": lambda raw: _parse_text("selected_terminal", raw),
}


def parse_answer(field_name: str, raw: Any) -> Any:
    """Convert a raw UI value for ``field_name`` into its TriageState type."""
    parser = _PARSERS.get(field_name)
    if parser is None:
        raise TriageInputError(field_name, "unknown triage field")
    return parser(raw)


_FIELD_TYPES = {
    "business_type": BusinessType,
    "store_type": StoreType,
    "uses_delivery": bool,
    "contract_obligation_cleared": bool,
    "will_replace_device": bool,
    "current_pos_platform": PosPlatform,
    "selected_van": str,
    "selected_terminal": str,
}


def check_typed(field_name: str, value: Any) -> Any:
    """Validate an already-typed value for ``field_name``.

    Enum fields also take their exact member value ("food", not "FOOD").
    Everything else must already be the field's type; raw UI proxies go
    through parse_answer() instead.
    """
    expected = _FIELD_TYPES.get(field_name)
    if expected is None:
        raise TriageInputError(field_name, "unknown triage field")
    if value is None:
        return None

    if expected is bool or expected is str:
        if isinstance(value, expected):
            return value
        raise TriageInputError(field_name, f"expected {expected.__name__}, got {value!r}")

    if isinstance(value, expected):
        return value
    if isinstance(value, str):
        try:
            return expected(value)
        except ValueError:
            pass
    allowed = ", ".join(m.value for m in expected)
    raise TriageInputError(field_name, f"expected one of [{allowed}], got {value!r}")
