"""
domain/triage_snapshot.py — Serialize triage results for a consultation.

snapshot() produces a plain JSON-safe dict that the consultation store keeps
verbatim. restore() turns such a dict back into a TriageState for read-only
display. restore() never raises: the payload crosses storage this module
does not own, so anything missing, unknown or ill-typed becomes None.

Payloads written before schema versioning used camelCase keys
(blocked, useDelivery, contractOk, replaceDevice, currentPos, van,
terminal); those are still understood.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from domain.recommendation import resolve
from domain.triage_state import TriageInputError, TriageState, parse_answer
from domain.triage_tables import DEFAULT_TABLES, CompatibilityTables
from domain.triage_wizard import FIELD_GUARDS

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA_VERSION = 1

# Accepted spellings per field, current name first
_KEY_ALIASES: dict[str, tuple[str, ...]] = {
    "blocked_condition_ids": ("blocked_condition_ids", "blockedConditionIds", "blocked"),
    "business_type": ("business_type", "businessType"),
    "store_type": ("store_type", "storeType"),
    "uses_delivery": ("uses_delivery", "usesDelivery", "useDelivery"),
    "contract_obligation_cleared": (
        "contract_obligation_cleared", "contractObligationCleared", "contractOk",
    ),
    "will_replace_device": ("will_replace_device", "willReplaceDevice", "replaceDevice"),
    "current_pos_platform": ("current_pos_platform", "currentPosPlatform", "currentPos"),
    "selected_van": ("selected_van", "selectedVan", "van"),
    "selected_terminal": ("selected_terminal", "selectedTerminal", "terminal"),
}


def snapshot(
    state: TriageState,
    tables: CompatibilityTables = DEFAULT_TABLES,
) -> dict:
    """Project ``state`` into a storable dict, with its current outcome.

    ``compatible`` carries the advisory terminal verdict (None until a
    terminal is picked), matching what earlier consultations recorded.
    """
    recommendation = resolve(state)

    compatible = None
    if state.selected_terminal is not None:
        compatible = tables.is_compatible_terminal(state.selected_van, state.selected_terminal)

    return {
        "schema_version": SNAPSHOT_SCHEMA_VERSION,
        "blocked_condition_ids": sorted(state.blocked_condition_ids),
        "business_type": _plain(state.business_type),
        "store_type": _plain(state.store_type),
        "uses_delivery": state.uses_delivery,
        "contract_obligation_cleared": state.contract_obligation_cleared,
        "will_replace_device": state.will_replace_device,
        "current_pos_platform": _plain(state.current_pos_platform),
        "selected_van": state.selected_van,
        "selected_terminal": state.selected_terminal,
        "compatible": compatible,
        "recommendation": _plain(recommendation),
    }


def _plain(value):
    return value.value if value is not None else None


def _lookup(payload: dict, field_name: str) -> Any:
    for key in _KEY_ALIASES[field_name]:
        if key in payload:
            return payload[key]
    return None


def _restore_blocked(raw: Any) -> set[str]:
    if not isinstance(raw, (list, tuple, set)):
        if raw is not None:
            logger.warning("Ignoring malformed blocked ids in snapshot: %r", raw)
        return set()
    return {item for item in raw if isinstance(item, str) and item}


def restore(
    payload: Any,
    tables: CompatibilityTables = DEFAULT_TABLES,
) -> TriageState:
    """Rebuild a TriageState from a stored snapshot. Never raises."""
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (ValueError, RecursionError):
            logger.warning("Triage snapshot is not valid JSON; restoring empty state")
            payload = None

    if not isinstance(payload, dict):
        if payload is not None:
            logger.warning("Triage snapshot has unexpected type %s; restoring empty state",
                           type(payload).__name__)
        return TriageState()

    version = payload.get("schema_version")
    if isinstance(version, int) and version > SNAPSHOT_SCHEMA_VERSION:
        logger.info("Restoring triage snapshot from newer schema v%s", version)

    state = TriageState(
        blocked_condition_ids=_restore_blocked(_lookup(payload, "blocked_condition_ids"))
    )

    # Upstream-first so each guard sees the fields it depends on
    for field_name, guard in FIELD_GUARDS.items():
        raw = _lookup(payload, field_name)
        try:
            value = parse_answer(field_name, raw)
        except TriageInputError as e:
            logger.warning("Dropping unreadable snapshot field %s", e)
            value = None
        if value is not None and not guard(state, tables):
            logger.debug("Dropping %s=%r; not applicable to restored answers", field_name, value)
            value = None
        setattr(state, field_name, value)

    return state
