"""
격국 수정 제안(Suggestion) 오버레이
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- 승인된 제안이 있으면 성패/이유/역할을 덮어써서 표시 (원본은 불변)
- 실제로 달라진 필드가 있을 때만 is_modified
- 조회 키: suggestion_type:격국명:대상글자:code
- 배치 조회 실패 → 제안 없음으로 처리 (렌더링 차단 금지)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import httpx
from cachetools import TTLCache

from saju_console.config import get_settings
from saju_console.services.outcomes import OutcomeRecord, RoleTiers

logger = logging.getLogger(__name__)


SUGGESTION_TYPES = ("decade_luck_sky", "decade_luck_earth", "year_luck_sky", "year_luck_earth")

SUGGESTION_TYPE_LABELS = {
    "decade_luck_sky": "대운 천간",
    "decade_luck_earth": "대운 지지",
    "year_luck_sky": "세운 천간",
    "year_luck_earth": "세운 지지",
}

# 격국 미판정 값 → 조회하지 않음
UNRESOLVED_PATTERNS = {"", "unknown", "none", "알수없음", "알 수 없음", "미정"}


def suggestion_key(
    suggestion_type: Optional[str],
    pattern_name: Optional[str],
    target_char: Optional[str],
    code: Optional[str],
) -> Optional[str]:
    """조회 키 생성 - 하나라도 없거나 격국 미판정이면 None"""
    if not pattern_name or pattern_name.strip().lower() in UNRESOLVED_PATTERNS:
        return None
    if suggestion_type not in SUGGESTION_TYPES or not target_char or not code:
        return None
    return f"{suggestion_type}:{pattern_name}:{target_char}:{code}"


@dataclass(frozen=True)
class SuggestionTriple:
    suggestion_type: str
    target_char: str
    code: str

    def to_dict(self) -> Dict[str, str]:
        return {"suggestion_type": self.suggestion_type, "target_char": self.target_char, "code": self.code}


@dataclass(frozen=True)
class SuggestionOverride:
    """승인된 수정 제안 (읽기 전용)"""
    suggestion_type: str
    pattern_name: str
    target_char: str
    code: str
    suggested_result: Optional[str] = None
    suggested_reason: Optional[str] = None
    suggested_roles: Optional[RoleTiers] = None

    @property
    def key(self) -> Optional[str]:
        return suggestion_key(self.suggestion_type, self.pattern_name, self.target_char, self.code)

    @property
    def type_label(self) -> str:
        """편집 모달 제목용 (예: 세운 천간)"""
        return SUGGESTION_TYPE_LABELS.get(self.suggestion_type, self.suggestion_type)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **defaults: str) -> "SuggestionOverride":
        def pick(name: str, *aliases: str) -> str:
            for k in (name,) + aliases:
                if data.get(k):
                    return data[k]
            return defaults.get(name) or ""

        return cls(
            suggestion_type=pick("suggestion_type"),
            pattern_name=pick("pattern_name", "gyeokguk_name"),
            target_char=pick("target_char"),
            code=pick("code"),
            suggested_result=data.get("suggested_result") or None,
            suggested_reason=data.get("suggested_reason") or None,
            suggested_roles=RoleTiers.from_value(data.get("suggested_roles")),
        )


@dataclass(frozen=True)
class DisplayOutcome:
    """화면 표시용 outcome (제안 반영)"""
    outcome: OutcomeRecord
    is_modified: bool = False
    original: Optional[OutcomeRecord] = None

    @property
    def code(self) -> Optional[str]:
        return self.outcome.code

    @property
    def result(self) -> str:
        return self.outcome.result

    @property
    def reason(self) -> str:
        return self.outcome.reason

    @property
    def roles(self) -> Optional[RoleTiers]:
        return self.outcome.roles

    def to_dict(self) -> Dict[str, Any]:
        out = self.outcome.to_dict()
        out["is_modified"] = self.is_modified
        out["original"] = self.original.to_dict() if self.original else None
        return out


def resolve(outcome: OutcomeRecord, override: Optional[SuggestionOverride]) -> DisplayOutcome:
    """
    제안 반영

    제안 필드가 비어 있으면 해당 필드는 원본 유지.
    원본과 같은 값으로의 제안은 수정으로 보지 않는다.
    """
    if override is None:
        return DisplayOutcome(outcome=outcome)

    result = outcome.result
    if override.suggested_result and override.suggested_result != outcome.result:
        result = override.suggested_result

    reason = outcome.reason
    if override.suggested_reason and override.suggested_reason != outcome.reason:
        reason = override.suggested_reason

    roles = outcome.roles
    suggested_roles = override.suggested_roles
    if suggested_roles is not None and not suggested_roles.is_empty() and suggested_roles != outcome.roles:
        roles = suggested_roles

    modified = (result, reason, roles) != (outcome.result, outcome.reason, outcome.roles)
    if not modified:
        return DisplayOutcome(outcome=outcome)

    return DisplayOutcome(
        outcome=replace(outcome, result=result, reason=reason, roles=roles),
        is_modified=True,
        original=outcome,
    )


class SuggestionOverlay:
    """outcome 목록 + 제안 맵 → 표시용 목록"""

    @staticmethod
    def resolve(outcome: OutcomeRecord, override: Optional[SuggestionOverride]) -> DisplayOutcome:
        return resolve(outcome, override)

    @staticmethod
    def apply(
        outcomes: Iterable[OutcomeRecord],
        overrides: Mapping[str, Optional[SuggestionOverride]],
        suggestion_type: str,
        pattern_name: Optional[str],
        target_char: str,
    ) -> List[DisplayOutcome]:
        shown = []
        for o in outcomes:
            key = suggestion_key(suggestion_type, pattern_name, target_char, o.code)
            shown.append(resolve(o, overrides.get(key) if key else None))
        return shown


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 배치 조회 클라이언트
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class SuggestionClient:
    """
    격국 제안 배치 조회 (best-effort)

    캐시: (chart_id, 조회 키) → 제안 또는 None
    실패한 조회는 캐시하지 않는다.
    """

    BATCH_PATH = "/api/v1/manager/gyeokguk_suggestions/batch"
    CHECK_PATH = "/api/v1/manager/gyeokguk_suggestions/check_pattern"

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.clean_api_token
        self.timeout = settings.http_timeout
        self._transport = transport
        self._cache: TTLCache = TTLCache(
            maxsize=settings.suggestion_cache_max_size,
            ttl=settings.suggestion_cache_ttl,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def fetch_batch(
        self,
        pattern_name: Optional[str],
        triples: Sequence[SuggestionTriple],
        chart_id: str = "",
    ) -> Dict[str, Optional[SuggestionOverride]]:
        """
        화면에 실제 등장한 (type, 글자, code) 묶음을 한 번에 조회

        Returns:
            {조회 키: 제안 또는 None} - 실패 시 캐시에 있던 항목만
        """
        wanted: Dict[str, SuggestionTriple] = {}
        for t in triples:
            key = suggestion_key(t.suggestion_type, pattern_name, t.target_char, t.code)
            if key:
                wanted[key] = t
        if not wanted:
            return {}

        found: Dict[str, Optional[SuggestionOverride]] = {}
        missing: List[Tuple[str, SuggestionTriple]] = []
        for key, t in wanted.items():
            if (chart_id, key) in self._cache:
                found[key] = self._cache[(chart_id, key)]
            else:
                missing.append((key, t))

        if not missing:
            return found

        payload = {
            "gyeokguk_name": pattern_name,
            "items": [t.to_dict() for _, t in missing],
        }
        try:
            async with self._client() as client:
                response = await client.post(self.BATCH_PATH, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[Suggestion] 배치 조회 실패 (제안 없이 진행): {e}")
            return found

        suggestions = data.get("suggestions") if isinstance(data, dict) else None
        if not isinstance(suggestions, dict):
            logger.warning("[Suggestion] 응답 형식 오류 (제안 없이 진행)")
            return found

        for key, t in missing:
            raw = suggestions.get(key)
            override = None
            if isinstance(raw, dict):
                try:
                    override = SuggestionOverride.from_dict(
                        raw,
                        suggestion_type=t.suggestion_type,
                        pattern_name=pattern_name,
                        target_char=t.target_char,
                        code=t.code,
                    )
                except (TypeError, ValueError, AttributeError) as e:
                    logger.warning(f"[Suggestion] 제안 레코드 오류 ({key}): {e}")
            self._cache[(chart_id, key)] = override
            found[key] = override

        hits = sum(1 for v in found.values() if v is not None)
        logger.info(f"[Suggestion] 배치 조회: 요청 {len(missing)}건 | 승인 제안 {hits}건")
        return found

    async def check_pattern(
        self,
        suggestion_type: str,
        pattern_name: Optional[str],
        target_char: str,
        code: str,
    ) -> Optional[SuggestionOverride]:
        """단건 조회 (편집 모달용)"""
        if suggestion_key(suggestion_type, pattern_name, target_char, code) is None:
            return None
        params = {
            "suggestion_type": suggestion_type,
            "gyeokguk_name": pattern_name,
            "target_char": target_char,
            "code": code,
        }
        try:
            async with self._client() as client:
                response = await client.get(self.CHECK_PATH, params=params)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"[Suggestion] 패턴 확인 실패: {e}")
            return None

        approved = data.get("approved_suggestion") if isinstance(data, dict) and data.get("success") else None
        if not isinstance(approved, dict):
            return None
        try:
            return SuggestionOverride.from_dict(
                approved,
                suggestion_type=suggestion_type,
                pattern_name=pattern_name,
                target_char=target_char,
                code=code,
            )
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"[Suggestion] 제안 레코드 오류: {e}")
            return None

    def clear_chart(self, chart_id: str):
        """차트 변경 시 해당 차트 캐시 제거"""
        for cache_key in [k for k in self._cache.keys() if k[0] == chart_id]:
            self._cache.pop(cache_key, None)
