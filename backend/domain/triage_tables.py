"""
domain/triage_tables.py — Static reference data for the triage wizard.

Contains the block-condition catalog, the VAN compatibility partition, the
VAN -> terminal model map and one recommendation template per
RecommendationKey, with bilingual labels (Korean + English).

The data is wrapped in a CompatibilityTables value object. Module-level
lookup functions delegate to DEFAULT_TABLES; a wizard can be given a
different instance (e.g. in integration tests) without touching the
resolver.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from domain.enums import (
    BlockGroup,
    CompatibilityStatus,
    RecommendationKey,
    Severity,
)


@dataclass(frozen=True)
class BlockCondition:
    """A single disqualifying fact about a prospective store."""
    id: str
    label: str
    label_en: str
    group: BlockGroup


@dataclass(frozen=True)
class RecommendationTemplate:
    key: RecommendationKey
    title: str
    title_en: str
    items: tuple[str, ...]
    severity: Severity


@dataclass(frozen=True)
class CompatibilityResult:
    """Advisory verdict of the VAN / terminal sub-check.

    ``compatible`` stays None until a terminal has been judged (or the VAN
    itself is known to be incompatible).
    """
    status: CompatibilityStatus
    van: Optional[str]
    terminal: Optional[str]
    compatible: Optional[bool]
    terminals: tuple[str, ...] = ()
    message: str = ""
    message_ko: str = ""


# ---------------------------------------------------------------------------
# Block conditions: 4 device + 5 service
# ---------------------------------------------------------------------------

BLOCK_CONDITIONS: tuple[BlockCondition, ...] = (
    # ===== DEVICE =====
    BlockCondition("mac_ipad", "Mac 또는 아이패드 사용 희망",
                   "Wants to run on a Mac or iPad", BlockGroup.DEVICE),
    BlockCondition("mobile_pos", "휴대폰 포스 사용 희망",
                   "Wants a mobile-phone POS", BlockGroup.DEVICE),
    BlockCondition("terminal", "터미널 기기 사용중 (토스/페이히어/KCP)",
                   "Already on an all-in-one terminal (Toss/Payhere/KCP)", BlockGroup.DEVICE),
    BlockCondition("dual_kds", "윈도우 + 안드로이드 KDS 동시 사용 필요",
                   "Needs Windows POS and Android KDS at the same time", BlockGroup.DEVICE),
    # ===== SERVICE =====
    BlockCondition("table_order", "테이블오더 필수",
                   "Table ordering is mandatory", BlockGroup.SERVICE),
    BlockCondition("qr_order", "QR오더 필수",
                   "QR ordering is mandatory", BlockGroup.SERVICE),
    BlockCondition("brand_app", "브랜드 앱 연동 필수",
                   "Brand app integration is mandatory", BlockGroup.SERVICE),
    BlockCondition("reservation", "예약 연동 필수 (캐치테이블/테이블링)",
                   "Reservation integration is mandatory (CatchTable/Tabling)", BlockGroup.SERVICE),
    BlockCondition("delivery_direct", "배달앱 직접 연동 필수",
                   "Direct delivery-app integration is mandatory", BlockGroup.SERVICE),
)


# ---------------------------------------------------------------------------
# VAN processors and terminal models
# ---------------------------------------------------------------------------

COMPATIBLE_VANS: tuple[str, ...] = (
    "NICE정보통신", "KIS정보통신", "KPN", "KOCES", "SMARTRO", "KICC",
)

INCOMPATIBLE_VANS: tuple[str, ...] = (
    "KSNET", "KOVAN", "KCP", "다우데이터", "NICE페이먼츠",
)

# Ordered as shown in the terminal picker
COMPATIBLE_TERMINALS: dict[str, tuple[str, ...]] = {
    "NICE정보통신": ("NC-7000", "NC-8000", "NC-8000(P)", "NC-6000"),
    "KIS정보통신": ("KIS-2200", "KIS-1421", "KIS-2420"),
    "KPN": ("MPOS-1901AE", "MPOS-1700AE", "MPOS-1902TE"),
    "KOCES": ("KTC-K501", "KTC-SC500", "KTC-K400"),
    "SMARTRO": ("SMT-T226",),
    "KICC": ("TS-114A",),
}


# ---------------------------------------------------------------------------
# Recommendation templates: one per RecommendationKey
# ---------------------------------------------------------------------------

RECOMMENDATION_TEMPLATES: dict[RecommendationKey, RecommendationTemplate] = {
    RecommendationKey.NEW_DELIVERY: RecommendationTemplate(
        key=RecommendationKey.NEW_DELIVERY,
        title="윈도우 포스 조합 추천",
        title_en="Recommend a Windows POS bundle",
        items=("윈도우 포스기", "엔페이 커넥트", "프린터"),
        severity=Severity.INFO,
    ),
    RecommendationKey.NEW_NO_DELIVERY: RecommendationTemplate(
        key=RecommendationKey.NEW_NO_DELIVERY,
        title="안드로이드 포스 조합 추천",
        title_en="Recommend an Android POS bundle",
        items=("태블릿", "CAT단말기", "엔페이 커넥트"),
        severity=Severity.SUCCESS,
    ),
    RecommendationKey.EXISTING_WINDOWS: RecommendationTemplate(
        key=RecommendationKey.EXISTING_WINDOWS,
        title="윈도우 포스 유지",
        title_en="Keep the Windows POS",
        items=("엔페이 커넥트 추가", "기존 프린터 호환 확인 필요"),
        severity=Severity.INFO,
    ),
    RecommendationKey.EXISTING_ANDROID: RecommendationTemplate(
        key=RecommendationKey.EXISTING_ANDROID,
        title="안드로이드 포스 유지/전환",
        title_en="Keep or switch to an Android POS",
        items=("VAN사 및 단말기 호환 확인 필요",),
        severity=Severity.SUCCESS,
    ),
    RecommendationKey.BLOCKED_CONTRACT: RecommendationTemplate(
        key=RecommendationKey.BLOCKED_CONTRACT,
        title="영업 불가 - 약정 잔여",
        title_en="Not eligible - contract obligation remains",
        items=("페이앤스토어로 리드 전달", "대리점 컨택 후 페이앤 직영업"),
        severity=Severity.BLOCKED,
    ),
    RecommendationKey.NEED_COMPATIBILITY_CHECK: RecommendationTemplate(
        key=RecommendationKey.NEED_COMPATIBILITY_CHECK,
        title="호환성 확인 필요",
        title_en="Compatibility check required",
        items=("기존 장비 사진/모델명 확보 필요", "리드 전달 전 호환 여부 체크"),
        severity=Severity.WARNING,
    ),
}


# ---------------------------------------------------------------------------
# Lookup surface
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompatibilityTables:
    """Read-only lookup surface over one set of reference tables."""
    block_conditions: tuple[BlockCondition, ...] = BLOCK_CONDITIONS
    compatible_vans: frozenset[str] = frozenset(COMPATIBLE_VANS)
    incompatible_vans: frozenset[str] = frozenset(INCOMPATIBLE_VANS)
    terminals: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(COMPATIBLE_TERMINALS))
    )
    templates: Mapping[RecommendationKey, RecommendationTemplate] = field(
        default_factory=lambda: MappingProxyType(dict(RECOMMENDATION_TEMPLATES))
    )

    def __post_init__(self):
        overlap = self.compatible_vans & self.incompatible_vans
        if overlap:
            raise ValueError(f"VANs listed as both compatible and incompatible: {sorted(overlap)}")
        ids = [c.id for c in self.block_conditions]
        if len(ids) != len(set(ids)):
            raise ValueError("block condition ids must be unique")

    # -- block conditions ---------------------------------------------------

    def get_block_condition(self, condition_id: str) -> BlockCondition | None:
        for condition in self.block_conditions:
            if condition.id == condition_id:
                return condition
        return None

    def block_conditions_for(self, group: str | None = None) -> list[BlockCondition]:
        if group is None:
            return list(self.block_conditions)
        return [c for c in self.block_conditions if c.group == group]

    # -- VANs and terminals --------------------------------------------------

    def is_compatible_van(self, name: str | None) -> bool:
        return name in self.compatible_vans

    def is_known_van(self, name: str | None) -> bool:
        return name in self.compatible_vans or name in self.incompatible_vans

    def list_vans(self) -> dict[str, list[str]]:
        """VAN names split by compatibility, in picker order."""
        return {
            "compatible": [v for v in COMPATIBLE_VANS if v in self.compatible_vans]
            + sorted(self.compatible_vans.difference(COMPATIBLE_VANS)),
            "incompatible": [v for v in INCOMPATIBLE_VANS if v in self.incompatible_vans]
            + sorted(self.incompatible_vans.difference(INCOMPATIBLE_VANS)),
        }

    def terminals_for(self, van_name: str | None) -> tuple[str, ...]:
        """Terminal models for a compatible VAN; empty for anything else."""
        if not self.is_compatible_van(van_name):
            return ()
        return tuple(self.terminals.get(van_name, ()))

    def is_compatible_terminal(self, van_name: str | None, terminal_model: str | None) -> bool:
        return terminal_model in self.terminals_for(van_name)

    # -- templates -------------------------------------------------------------

    def template_for(self, key: RecommendationKey) -> RecommendationTemplate:
        return self.templates[key]

    # -- advisory sub-check ------------------------------------------------------

    def check_compatibility(self, van: str | None, terminal: str | None) -> CompatibilityResult:
        """Judge the VAN / terminal pair picked on the compatibility step."""
        if not van:
            return CompatibilityResult(
                status=CompatibilityStatus.VAN_NOT_SELECTED,
                van=None, terminal=None, compatible=None,
                message="Select the store's VAN processor",
                message_ko="VAN사 선택",
            )

        if not self.is_compatible_van(van):
            return CompatibilityResult(
                status=CompatibilityStatus.INCOMPATIBLE_VAN,
                van=van, terminal=None, compatible=False,
                message=f"{van} is not a compatible VAN, terminal swap needed",
                message_ko=f"{van}은(는) 호환 불가 VAN사입니다. 단말기 교체가 필요합니다.",
            )

        terminals = self.terminals_for(van)
        if not terminal:
            return CompatibilityResult(
                status=CompatibilityStatus.TERMINAL_NOT_SELECTED,
                van=van, terminal=None, compatible=None, terminals=terminals,
                message="Select the store's terminal model",
                message_ko="단말기 선택",
            )

        if terminal in terminals:
            return CompatibilityResult(
                status=CompatibilityStatus.COMPATIBLE,
                van=van, terminal=terminal, compatible=True, terminals=terminals,
                message="compatible, no terminal swap needed",
                message_ko="호환 가능 - 단말기 교체 불필요",
            )

        return CompatibilityResult(
            status=CompatibilityStatus.INCOMPATIBLE_TERMINAL,
            van=van, terminal=terminal, compatible=False, terminals=terminals,
            message="incompatible, terminal swap needed",
            message_ko="호환 불가 - 단말기 교체 필요",
        )


DEFAULT_TABLES = CompatibilityTables()


# ---------------------------------------------------------------------------
# Module-level helpers (default tables)
# ---------------------------------------------------------------------------

def get_block_conditions(group: str | None = None) -> list[BlockCondition]:
    """Return the block-condition catalog, optionally for one group."""
    return DEFAULT_TABLES.block_conditions_for(group)


def get_block_condition(condition_id: str) -> BlockCondition | None:
    return DEFAULT_TABLES.get_block_condition(condition_id)


def is_compatible_van(name: str | None) -> bool:
    return DEFAULT_TABLES.is_compatible_van(name)


def terminals_for(van_name: str | None) -> tuple[str, ...]:
    return DEFAULT_TABLES.terminals_for(van_name)


def is_compatible_terminal(van_name: str | None, terminal_model: str | None) -> bool:
    return DEFAULT_TABLES.is_compatible_terminal(van_name, terminal_model)


def template_for(key: RecommendationKey) -> RecommendationTemplate:
    return DEFAULT_TABLES.template_for(key)


def check_compatibility(van: str | None, terminal: str | None) -> CompatibilityResult:
    return DEFAULT_TABLES.check_compatibility(van, terminal)
