"""
domain/triage_wizard.py — Triage wizard controller.

The wizard is an explicit step machine. Each step has a handler that looks
at the current TriageState and either names the next step (this step is
answered) or returns None (this step is waiting for input):

    BLOCK_CHECK --> BUSINESS_TYPE          (no block condition checked)
    BUSINESS_TYPE --> STORE_TYPE           (food)
    BUSINESS_TYPE --> COMPLETE             (non-food, manual review)
    STORE_TYPE --> NEW_STORE | EXISTING_STORE
    NEW_STORE --> COMPLETE                 (delivery answered)
    EXISTING_STORE --> COMPLETE            (contract not cleared, no device
                                            swap, or Windows POS)
    EXISTING_STORE --> COMPATIBILITY_CHECK (Android POS)
    COMPATIBILITY_CHECK --> COMPLETE       (advisory, never gates completion)

Any checked block condition pins the wizard on BLOCK_CHECK. Answers are
kept, so unchecking every condition resumes where the agent left off.

Cascading reset: FIELD_DEPENDENTS names the answers that only make sense
given a field's value. Changing a field clears the transitive closure of
its dependents, so a stale downstream answer can never survive an upstream
change.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from domain.enums import (
    BusinessType,
    PosPlatform,
    RecommendationKey,
    StoreType,
    TriageStep,
)
from domain.recommendation import TriageVerdict, classify, resolve
from domain.triage_state import (
    ANSWER_FIELDS,
    TriageInputError,
    TriageState,
    check_typed,
    parse_answer,
)
from domain.triage_tables import (
    DEFAULT_TABLES,
    CompatibilityResult,
    CompatibilityTables,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Field dependencies
# ---------------------------------------------------------------------------

FIELD_DEPENDENTS: dict[str, tuple[str, ...]] = {
    "business_type": ("store_type",),
    "store_type": ("uses_delivery", "contract_obligation_cleared"),
    "uses_delivery": (),
    "contract_obligation_cleared": ("will_replace_device",),
    "will_replace_device": ("current_pos_platform",),
    "current_pos_platform": ("selected_van",),
    "selected_van": ("selected_terminal",),
    "selected_terminal": (),
}


def _closure(field_name: str) -> tuple[str, ...]:
    ordered: list[str] = []
    pending = list(FIELD_DEPENDENTS[field_name])
    while pending:
        name = pending.pop(0)
        if name not in ordered:
            ordered.append(name)
            pending.extend(FIELD_DEPENDENTS[name])
    return tuple(ordered)


# Everything a change to the key field invalidates
RESET_CASCADE: dict[str, tuple[str, ...]] = {
    name: _closure(name) for name in FIELD_DEPENDENTS
}

# When an answer is allowed to be non-null
FIELD_GUARDS: dict[str, Callable[[TriageState, CompatibilityTables], bool]] = {
    "business_type": lambda s, t: True,
    "store_type": lambda s, t: s.business_type == BusinessType.FOOD,
    "uses_delivery": lambda s, t: s.store_type == StoreType.NEW,
    "contract_obligation_cleared": lambda s, t: s.store_type == StoreType.EXISTING,
    "will_replace_device": lambda s, t: s.contract_obligation_cleared is True,
    "current_pos_platform": lambda s, t: s.will_replace_device is True,
    "selected_van": lambda s, t: s.current_pos_platform == PosPlatform.ANDROID,
    "selected_terminal": lambda s, t: t.is_compatible_van(s.selected_van),
}


# ---------------------------------------------------------------------------
# Step handlers
# ---------------------------------------------------------------------------

def _from_block_check(state: TriageState) -> TriageStep | None:
    if state.blocked_condition_ids:
        return None
    return TriageStep.BUSINESS_TYPE


def _from_business_type(state: TriageState) -> TriageStep | None:
    if state.business_type == BusinessType.NON_FOOD:
        return TriageStep.COMPLETE
    if state.business_type == BusinessType.FOOD:
        return TriageStep.STORE_TYPE
    return None


def _from_store_type(state: TriageState) -> TriageStep | None:
    if state.store_type == StoreType.NEW:
        return TriageStep.NEW_STORE
    if state.store_type == StoreType.EXISTING:
        return TriageStep.EXISTING_STORE
    return None


def _from_new_store(state: TriageState) -> TriageStep | None:
    if state.uses_delivery is None:
        return None
    return TriageStep.COMPLETE


def _from_existing_store(state: TriageState) -> TriageStep | None:
    """Contract -> device replacement -> current POS, all on one card."""
    if state.contract_obligation_cleared is None:
        return None
    if state.contract_obligation_cleared is False:
        return TriageStep.COMPLETE
    if state.will_replace_device is None:
        return None
    if state.will_replace_device is False:
        return TriageStep.COMPLETE
    if state.current_pos_platform is None:
        return None
    if state.current_pos_platform == PosPlatform.ANDROID:
        return TriageStep.COMPATIBILITY_CHECK
    return TriageStep.COMPLETE


def _from_compatibility_check(state: TriageState) -> TriageStep | None:
    return TriageStep.COMPLETE


def _from_complete(state: TriageState) -> TriageStep | None:
    """COMPLETE is terminal."""
    return None


_STEP_HANDLERS: dict[TriageStep, Callable[[TriageState], TriageStep | None]] = {
    TriageStep.BLOCK_CHECK: _from_block_check,
    TriageStep.BUSINESS_TYPE: _from_business_type,
    TriageStep.STORE_TYPE: _from_store_type,
    TriageStep.NEW_STORE: _from_new_store,
    TriageStep.EXISTING_STORE: _from_existing_store,
    TriageStep.COMPATIBILITY_CHECK: _from_compatibility_check,
    TriageStep.COMPLETE: _from_complete,
}

# Numbering shown on the step cards ("3/6")
STEP_NUMBERS: dict[TriageStep, int] = {
    TriageStep.BLOCK_CHECK: 1,
    TriageStep.BUSINESS_TYPE: 2,
    TriageStep.STORE_TYPE: 3,
    TriageStep.NEW_STORE: 4,
    TriageStep.EXISTING_STORE: 4,
    TriageStep.COMPATIBILITY_CHECK: 5,
    TriageStep.COMPLETE: 6,
}
TOTAL_STEPS = 6


def walk_steps(state: TriageState) -> list[TriageStep]:
    """Return the visible steps for ``state``, in order.

    The last element is the step awaiting input, or COMPLETE.
    """
    path = [TriageStep.BLOCK_CHECK]
    while True:
        nxt = _STEP_HANDLERS[path[-1]](state)
        if nxt is None:
            return path
        path.append(nxt)


def is_triage_complete(state: TriageState) -> bool:
    """True once the agent may proceed to file a consultation.

    Blocked-by-contract, compatibility-check-needed and non-food all count
    as complete; they are finished wizards with a non-standard outcome.
    """
    return walk_steps(state)[-1] == TriageStep.COMPLETE


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------

class TriageWizard:
    """One agent's triage session. Not shared between sessions."""

    def __init__(
        self,
        state: TriageState | None = None,
        tables: CompatibilityTables = DEFAULT_TABLES,
    ):
        self._tables = tables
        self._state = state.copy() if state is not None else TriageState()

    @property
    def state(self) -> TriageState:
        """A copy; mutate through the wizard so the cascade applies."""
        return self._state.copy()

    @property
    def tables(self) -> CompatibilityTables:
        return self._tables

    # -- block conditions ------------------------------------------------------

    def toggle_block(self, condition_id: str) -> bool:
        """Flip one block condition. Returns whether it is now checked."""
        if self._tables.get_block_condition(condition_id) is None:
            raise TriageInputError("blocked_condition_ids", f"unknown block condition {condition_id!r}")

        blocked = self._state.blocked_condition_ids
        if condition_id in blocked:
            blocked.discard(condition_id)
            checked = False
        else:
            blocked.add(condition_id)
            checked = True
        logger.debug("Block condition %s -> %s (%d checked)", condition_id, checked, len(blocked))
        return checked

    def set_blocked(self, condition_ids: Iterable[str]) -> None:
        ids = set(condition_ids)
        unknown = sorted(i for i in ids if self._tables.get_block_condition(i) is None)
        if unknown:
            raise TriageInputError("blocked_condition_ids", f"unknown block conditions {unknown}")
        self._state.blocked_condition_ids = ids

    # -- answers ---------------------------------------------------------------

    def answer(self, field_name: str, raw_value: Any) -> None:
        """Apply a raw UI answer ("yes", "food", "KICC", ...) to one field."""
        self._set(field_name, parse_answer(field_name, raw_value))

    def apply_answers(self, answers: dict[str, Any]) -> None:
        """Apply several answers upstream-first."""
        unknown = sorted(set(answers) - set(ANSWER_FIELDS))
        if unknown:
            raise TriageInputError(unknown[0], "unknown triage field")
        for field_name in ANSWER_FIELDS:
            if field_name in answers:
                self.answer(field_name, answers[field_name])

    def set_business_type(self, value: BusinessType | None) -> None:
        self._set("business_type", value)

    def set_store_type(self, value: StoreType | None) -> None:
        self._set("store_type", value)

    def set_uses_delivery(self, value: bool | None) -> None:
        self._set("uses_delivery", value)

    def set_contract_obligation_cleared(self, value: bool | None) -> None:
        self._set("contract_obligation_cleared", value)

    def set_will_replace_device(self, value: bool | None) -> None:
        self._set("will_replace_device", value)

    def set_current_pos_platform(self, value: PosPlatform | None) -> None:
        self._set("current_pos_platform", value)

    def set_selected_van(self, value: str | None) -> None:
        self._set("selected_van", value)

    def set_selected_terminal(self, value: str | None) -> None:
        self._set("selected_terminal", value)

    def _set(self, field_name: str, value: Any) -> None:
        if field_name not in FIELD_GUARDS:
            raise TriageInputError(field_name, "unknown triage field")
        value = check_typed(field_name, value)

        if value is not None:
            if self._state.blocked_condition_ids:
                raise TriageInputError(field_name, "wizard is blocked; uncheck block conditions first")
            if not FIELD_GUARDS[field_name](self._state, self._tables):
                raise TriageInputError(field_name, "not applicable to the current answers")
            if field_name == "selected_van" and not self._tables.is_known_van(value):
                raise TriageInputError(field_name, f"unknown VAN {value!r}")

        if getattr(self._state, field_name) == value:
            return

        setattr(self._state, field_name, value)
        cleared = [name for name in RESET_CASCADE[field_name] if getattr(self._state, name) is not None]
        for name in RESET_CASCADE[field_name]:
            setattr(self._state, name, None)

        if cleared:
            logger.debug("%s changed to %r; cleared %s", field_name, value, ", ".join(cleared))

    def clear(self) -> None:
        """Reset to the empty state (after the consultation is filed)."""
        self._state = TriageState()

    # -- derived views -----------------------------------------------------------

    def visible_steps(self) -> list[TriageStep]:
        return walk_steps(self._state)

    def current_step(self) -> TriageStep:
        return walk_steps(self._state)[-1]

    def is_complete(self) -> bool:
        return is_triage_complete(self._state)

    def outcome(self) -> RecommendationKey | None:
        return resolve(self._state)

    def verdict(self) -> TriageVerdict:
        return classify(self._state, self._tables)

    def compatibility(self) -> CompatibilityResult | None:
        """Advisory VAN / terminal verdict; None while that step is hidden."""
        if TriageStep.COMPATIBILITY_CHECK not in self.visible_steps():
            return None
        return self._tables.check_compatibility(
            self._state.selected_van, self._state.selected_terminal
        )
