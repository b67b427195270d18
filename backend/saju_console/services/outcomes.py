"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
격국 성패(Outcome) 정리 모듈
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
1. reconcile: 원본 outcome 중 병합(merged) outcome과 code가 겹치는 항목 제거
   - code 없는 항목은 항상 유지
   - namespace(천간/지지 × 비교 대상) 단위로만 적용
2. 세운/대운 성패 요약: 대표 결과, 위치, 이유, 역할
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from saju_console.services.ten_gods import extract_sipsung

logger = logging.getLogger(__name__)


# 성패 결과 문자열
SUCCESS = "성"
FAILURE = "패"
SUCCESS_WITH_FAILURE = "성중유패"
FAILURE_WITH_SUCCESS = "패중유성"
COEXISTENCE = "성패공존"

SUCCESS_ALIASES = {SUCCESS, "成", "success"}
FAILURE_ALIASES = {FAILURE, "敗", "failure"}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Namespace
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SIDES = ("sky", "earth")
COMPARISONS = ("self", "year_month", "month_time", "year", "day", "time", "decade")


@dataclass(frozen=True)
class Namespace:
    """천간/지지 × 비교 대상"""
    side: str
    comparison: str

    def __post_init__(self):
        if self.side not in SIDES:
            raise ValueError(f"알 수 없는 side: {self.side!r}")
        if self.comparison not in COMPARISONS:
            raise ValueError(f"알 수 없는 comparison: {self.comparison!r}")

    @property
    def key(self) -> str:
        return f"{self.side}:{self.comparison}"

    @classmethod
    def from_key(cls, key: str) -> "Namespace":
        side, _, comparison = key.partition(":")
        return cls(side=side, comparison=comparison)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 역할 (1차 ~ 4차)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

ROLE_TIERS = ("first", "second", "third", "fourth")


def _role_names(value: Any) -> Tuple[str, ...]:
    """'배우자, 자식' / ['배우자'] / [{'name': '배우자'}] → ('배우자', ...)"""
    if not value:
        return ()
    if isinstance(value, str):
        return tuple(p.strip() for p in value.split(",") if p.strip())
    if not isinstance(value, (list, tuple)):
        return ()
    names = []
    for r in value:
        if isinstance(r, str):
            name = r.strip()
        elif isinstance(r, dict):
            name = str(r.get("name") or r.get("role") or "").strip()
        else:
            name = ""
        if name:
            names.append(name)
    return tuple(names)


@dataclass(frozen=True)
class RoleTiers:
    first: Tuple[str, ...] = ()
    second: Tuple[str, ...] = ()
    third: Tuple[str, ...] = ()
    fourth: Tuple[str, ...] = ()

    @classmethod
    def from_value(cls, value: Any) -> Optional["RoleTiers"]:
        if value is None:
            return None
        if isinstance(value, RoleTiers):
            return value
        if isinstance(value, Mapping):
            return cls(**{tier: _role_names(value.get(tier)) for tier in ROLE_TIERS})
        if isinstance(value, str):
            # "배우자, 자식" → 1차 역할
            return cls(first=_role_names(value))
        if isinstance(value, (list, tuple)):
            # 순서 있는 리스트: [1차, 2차, ...]
            return cls(*(_role_names(t) for t in value[:len(ROLE_TIERS)]))
        return None

    def is_empty(self) -> bool:
        return not any(getattr(self, tier) for tier in ROLE_TIERS)

    def to_dict(self) -> Dict[str, str]:
        return {tier: ", ".join(getattr(self, tier)) for tier in ROLE_TIERS if getattr(self, tier)}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Outcome 레코드
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class OutcomeRecord:
    """단일 성패 판정 결과"""
    code: Optional[str] = None
    result: str = ""
    reason: str = ""
    positions: Tuple[str, ...] = ()
    roles: Optional[RoleTiers] = None
    deep_level: Optional[int] = None
    is_sanhe: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OutcomeRecord":
        # positions (복수) 또는 position (단수) 모두 처리
        positions = data.get("positions")
        if positions is None and data.get("position"):
            positions = [data["position"]]
        if isinstance(positions, str):
            positions = [positions]

        roles = data.get("roles")
        if roles is None and any(data.get(f"{tier}_roles") for tier in ROLE_TIERS):
            roles = {tier: data.get(f"{tier}_roles") for tier in ROLE_TIERS}

        deep_level = data.get("deep_level")
        return cls(
            code=data.get("code") or None,
            result=data.get("result") or "",
            reason=data.get("reason") or "",
            positions=tuple(positions or ()),
            roles=RoleTiers.from_value(roles),
            deep_level=int(deep_level) if deep_level is not None else None,
            is_sanhe=data.get("is_sanhe"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["positions"] = list(self.positions)
        out["roles"] = self.roles.to_dict() if self.roles else None
        return out


@dataclass(frozen=True)
class MergedOutcome(OutcomeRecord):
    """분석 단계에서 이미 병합된 outcome (원본과 같은 code 공간)"""
    pass


def flatten_outcomes(outcomes: Optional[Iterable[Any]]) -> List[Any]:
    """중첩 리스트 평탄화 + None 제거"""
    flat: List[Any] = []
    if not outcomes:
        return flat
    for o in outcomes:
        if o is None:
            continue
        if isinstance(o, (list, tuple)):
            flat.extend(flatten_outcomes(o))
        else:
            flat.append(o)
    return flat


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Reconcile
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def reconcile(raw: Sequence[OutcomeRecord], merged: Sequence[OutcomeRecord]) -> List[OutcomeRecord]:
    """
    병합 outcome과 code가 겹치는 원본 outcome 제거

    두 리스트는 같은 (운, namespace)에 속해야 한다.
    code 없는 원본은 항상 유지. 입력 순서 보존.
    """
    merged_codes = {m.code for m in merged if m.code}
    if not merged_codes:
        return list(raw)
    return [r for r in raw if not r.code or r.code not in merged_codes]


def reconcile_namespaces(
    raw_by_ns: Mapping[Namespace, Sequence[OutcomeRecord]],
    merged_by_ns: Mapping[Namespace, Sequence[OutcomeRecord]],
) -> Dict[Namespace, List[OutcomeRecord]]:
    """namespace별 reconcile (namespace 간 교차 제거 없음)"""
    result: Dict[Namespace, List[OutcomeRecord]] = {}
    for ns, raw in raw_by_ns.items():
        kept = reconcile(raw, merged_by_ns.get(ns, ()))
        dropped = len(raw) - len(kept)
        if dropped:
            logger.debug(f"[Outcome] {ns.key}: 병합 중복 {dropped}건 제외")
        result[ns] = kept
    return result


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 위치 / 역할
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

# 위치-역할 맵핑
POSITION_ROLE_MAP = {
    # 천간
    "year_sky": ["조상", "국가"],
    "month_sky": ["사회", "부모"],
    "time_sky": ["자식", "부하", "동료"],
    # 지지
    "year_earth": ["조상"],
    "month_earth": ["동료", "친구", "사회사람들", "부모"],
    "day_earth": ["배우자"],
    "time_earth": ["자식", "부하"],
    # 운
    "decade_luck_sky": ["대운 천간"],
    "decade_luck_earth": ["대운 지지"],
    "year_luck_sky": ["세운 천간"],
    "year_luck_earth": ["세운 지지"],
}

POSITION_LABELS = {
    "year_luck_sky": "세운 천간",
    "decade_luck_sky": "대운 천간",
    "year_sky": "년간",
    "month_sky": "월간",
    "time_sky": "시간",
    "year_earth": "년지",
    "month_earth": "월지",
    "day_earth": "일지",
    "year_luck_earth": "세운 지지",
    "decade_luck_earth": "대운 지지",
    "time_earth": "시지",
    "type": "격국",
}


def translate_position(position: str) -> str:
    return POSITION_LABELS.get(position, position)


def roles_from_positions(positions: Optional[Iterable[str]]) -> List[str]:
    """위치 목록 → 역할 목록 (중복 제거, 순서 유지)"""
    roles: List[str] = []
    for pos in positions or ():
        for role in POSITION_ROLE_MAP.get(pos, []):
            if role not in roles:
                roles.append(role)
    return roles


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 성패 요약
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def determine_result(outcomes: Optional[Iterable[Any]]) -> str:
    """
    대표 성패 결정

    1. deep_level 높은 순으로 복합 결과(패중유성/성중유패)가 있으면 그대로
    2. 단순 성/패 개수: 둘 다 있으면 실패 >= 성공 → 패중유성, 아니면 성중유패
    3. 성만 → 성, 패만 → 패, 없으면 ''
    """
    flat = [o for o in flatten_outcomes(outcomes) if isinstance(o, OutcomeRecord)]
    by_depth = sorted(flat, key=lambda o: o.deep_level or 0, reverse=True)

    for o in by_depth:
        if FAILURE_WITH_SUCCESS in o.result:
            return FAILURE_WITH_SUCCESS
        if SUCCESS_WITH_FAILURE in o.result:
            return SUCCESS_WITH_FAILURE

    success_count = sum(1 for o in flat if o.result in SUCCESS_ALIASES)
    fail_count = sum(1 for o in flat if o.result in FAILURE_ALIASES)

    if success_count > 0 and fail_count > 0:
        return FAILURE_WITH_SUCCESS if fail_count >= success_count else SUCCESS_WITH_FAILURE
    if success_count > 0:
        return SUCCESS
    if fail_count > 0:
        return FAILURE
    return ""


def extract_positions(outcomes: Optional[Iterable[Any]]) -> List[str]:
    positions: List[str] = []
    for o in flatten_outcomes(outcomes):
        for p in getattr(o, "positions", ()):
            if p not in positions:
                positions.append(p)
    return positions


def extract_reason(outcomes: Optional[Iterable[Any]]) -> str:
    reasons = [getattr(o, "reason", "") for o in flatten_outcomes(outcomes)]
    return ", ".join(r for r in reasons if r)


@dataclass
class OutcomeSummary:
    """천간/지지 한쪽의 성패 요약"""
    code: str = ""
    result: str = ""
    reason: str = ""
    positions: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)
    sipsung1: str = ""
    sipsung2: str = ""
    sipsung3: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def summarize_outcomes(
    outcomes: Optional[Iterable[Any]],
    codes: Optional[Sequence[str]] = None,
    fallback_reason: str = ""
) -> OutcomeSummary:
    """
    세운/대운 성패 요약

    Args:
        outcomes: (reconcile된) outcome 목록
        codes: 분석 결과의 codes 배열 (있으면 첫 번째 code 우선)
        fallback_reason: outcome에 이유가 없을 때 쓸 이유
    """
    flat = [o for o in flatten_outcomes(outcomes) if isinstance(o, OutcomeRecord)]

    code = codes[0] if codes else ""
    if not code:
        code = next((o.code for o in flat if o.code), "")

    tokens = extract_sipsung(code)
    positions = extract_positions(flat)
    return OutcomeSummary(
        code=code,
        result=determine_result(flat),
        reason=extract_reason(flat) or fallback_reason,
        positions=positions,
        roles=roles_from_positions(positions),
        sipsung1=tokens.sipsung1,
        sipsung2=tokens.sipsung2,
        sipsung3=tokens.sipsung3,
    )
