"""
격국 수정 제안 오버레이 / 배치 조회 테스트
"""
import asyncio
import json

import httpx
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_console.services.outcomes import OutcomeRecord, RoleTiers
from saju_console.services.suggestions import (
    SuggestionClient,
    SuggestionOverlay,
    SuggestionOverride,
    SuggestionTriple,
    resolve,
    suggestion_key,
)


ORIGINAL = OutcomeRecord(
    code="식신정인합",
    result="성",
    reason="식신이 인성과 합",
    roles=RoleTiers(first=("자식",)),
)


def _override(**kwargs):
    base = dict(
        suggestion_type="year_luck_sky",
        pattern_name="정관격",
        target_char="甲",
        code="식신정인합",
    )
    base.update(kwargs)
    return SuggestionOverride(**base)


class TestResolve:
    """제안 반영"""

    def test_no_override(self):
        shown = resolve(ORIGINAL, None)
        assert shown.outcome is ORIGINAL
        assert shown.is_modified is False
        assert shown.original is None

    def test_same_result_is_not_modified(self):
        shown = resolve(ORIGINAL, _override(suggested_result="성"))
        assert shown.is_modified is False
        assert shown.result == "성"

    def test_reason_only(self):
        shown = resolve(ORIGINAL, _override(suggested_reason="수정된 이유"))
        assert shown.is_modified is True
        assert shown.result == "성"
        assert shown.reason == "수정된 이유"
        assert shown.original == ORIGINAL

    def test_all_fields(self):
        roles = RoleTiers(first=("배우자",), second=("부모",))
        shown = resolve(ORIGINAL, _override(suggested_result="패", suggested_reason="r", suggested_roles=roles))
        assert (shown.result, shown.reason, shown.roles) == ("패", "r", roles)
        assert shown.code == ORIGINAL.code
        assert shown.original.result == "성"

    def test_empty_roles_keep_original(self):
        shown = resolve(ORIGINAL, _override(suggested_roles=RoleTiers()))
        assert shown.is_modified is False
        assert shown.roles == ORIGINAL.roles

    def test_original_untouched(self):
        resolve(ORIGINAL, _override(suggested_result="패"))
        assert ORIGINAL.result == "성"

    def test_to_dict(self):
        d = resolve(ORIGINAL, _override(suggested_result="패")).to_dict()
        assert d["is_modified"] is True
        assert d["result"] == "패"
        assert d["original"]["result"] == "성"


class TestKey:
    """조회 키"""

    def test_full_key(self):
        assert suggestion_key("year_luck_sky", "정관격", "甲", "A") == "year_luck_sky:정관격:甲:A"

    @pytest.mark.parametrize("pattern", [None, "", "unknown", "Unknown", "알 수 없음", "미정"])
    def test_unresolved_pattern_short_circuits(self, pattern):
        assert suggestion_key("year_luck_sky", pattern, "甲", "A") is None

    @pytest.mark.parametrize("args", [
        (None, "정관격", "甲", "A"),
        ("year_luck_sky", "정관격", "", "A"),
        ("year_luck_sky", "정관격", "甲", None),
    ])
    def test_missing_part(self, args):
        assert suggestion_key(*args) is None

    def test_unknown_type(self):
        assert suggestion_key("month_luck_sky", "정관격", "甲", "A") is None

    def test_type_label(self):
        assert _override().type_label == "세운 천간"
        assert _override(suggestion_type="decade_luck_earth").type_label == "대운 지지"

    def test_override_from_dict_alias(self):
        o = SuggestionOverride.from_dict(
            {"gyeokguk_name": "정관격", "suggested_result": "패", "suggested_roles": {"first": "배우자"}},
            suggestion_type="year_luck_earth",
            target_char="子",
            code="B",
        )
        assert o.key == "year_luck_earth:정관격:子:B"
        assert o.suggested_roles == RoleTiers(first=("배우자",))


class TestOverlayApply:

    def test_apply_by_key(self):
        outcomes = [ORIGINAL, OutcomeRecord(code="other", result="패"), OutcomeRecord(code=None, result="성")]
        overrides = {"year_luck_sky:정관격:甲:식신정인합": _override(suggested_result="패")}
        shown = SuggestionOverlay.apply(outcomes, overrides, "year_luck_sky", "정관격", "甲")
        assert [s.is_modified for s in shown] == [True, False, False]

    def test_apply_unknown_pattern(self):
        overrides = {"year_luck_sky:unknown:甲:식신정인합": _override(pattern_name="unknown", suggested_result="패")}
        shown = SuggestionOverlay.apply([ORIGINAL], overrides, "year_luck_sky", "unknown", "甲")
        assert shown[0].is_modified is False


class TestSuggestionClient:
    """배치 조회 (httpx MockTransport)"""

    def _client(self, handler):
        return SuggestionClient(base_url="http://test", token="t0ken", transport=httpx.MockTransport(handler))

    def test_batch(self):
        calls = []

        def handler(request: httpx.Request):
            calls.append(request)
            body = json.loads(request.content)
            assert request.url.path == SuggestionClient.BATCH_PATH
            assert request.headers["Authorization"] == "Bearer t0ken"
            assert body["gyeokguk_name"] == "정관격"
            return httpx.Response(200, json={
                "success": True,
                "suggestions": {
                    "year_luck_sky:정관격:甲:A": {"suggested_result": "패"},
                    "year_luck_earth:정관격:子:B": None,
                },
            })

        client = self._client(handler)
        triples = [
            SuggestionTriple("year_luck_sky", "甲", "A"),
            SuggestionTriple("year_luck_earth", "子", "B"),
        ]
        found = asyncio.run(client.fetch_batch("정관격", triples, chart_id="c1"))

        assert found["year_luck_sky:정관격:甲:A"].suggested_result == "패"
        assert found["year_luck_sky:정관격:甲:A"].code == "A"
        assert found["year_luck_earth:정관격:子:B"] is None

        # 두 번째 조회는 캐시
        again = asyncio.run(client.fetch_batch("정관격", triples, chart_id="c1"))
        assert again == found
        assert len(calls) == 1

        client.clear_chart("c1")
        asyncio.run(client.fetch_batch("정관격", triples, chart_id="c1"))
        assert len(calls) == 2

    def test_unknown_pattern_no_request(self):
        def handler(request):
            raise AssertionError("요청이 나가면 안 됨")

        client = self._client(handler)
        found = asyncio.run(client.fetch_batch("unknown", [SuggestionTriple("year_luck_sky", "甲", "A")]))
        assert found == {}

    def test_failure_degrades_to_no_override(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"success": False})

        client = self._client(handler)
        triples = [SuggestionTriple("year_luck_sky", "甲", "A")]
        assert asyncio.run(client.fetch_batch("정관격", triples)) == {}

        # 실패는 캐시하지 않음
        asyncio.run(client.fetch_batch("정관격", triples))
        assert len(calls) == 2

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        client = self._client(handler)
        assert asyncio.run(client.fetch_batch("정관격", [SuggestionTriple("year_luck_sky", "甲", "A")])) == {}

    def test_bad_payload(self):
        client = self._client(lambda request: httpx.Response(200, text="not json"))
        assert asyncio.run(client.fetch_batch("정관격", [SuggestionTriple("year_luck_sky", "甲", "A")])) == {}

    def test_role_string_is_first_tier(self):
        client = self._client(lambda request: httpx.Response(200, json={
            "success": True,
            "suggestions": {"year_luck_sky:정관격:甲:A": {"suggested_roles": "배우자"}},
        }))
        found = asyncio.run(client.fetch_batch("정관격", [SuggestionTriple("year_luck_sky", "甲", "A")]))
        assert found["year_luck_sky:정관격:甲:A"].suggested_roles == RoleTiers(first=("배우자",))

    @pytest.mark.parametrize("roles", [5, 1.5, True, [7, {"name": 3}]])
    def test_malformed_roles_do_not_raise(self, roles):
        client = self._client(lambda request: httpx.Response(200, json={
            "success": True,
            "suggestions": {
                "year_luck_sky:정관격:甲:A": {"suggested_result": "패", "suggested_roles": roles},
                "year_luck_earth:정관격:子:B": {"suggested_reason": "r"},
            },
        }))
        triples = [SuggestionTriple("year_luck_sky", "甲", "A"), SuggestionTriple("year_luck_earth", "子", "B")]
        found = asyncio.run(client.fetch_batch("정관격", triples))

        bad = found["year_luck_sky:정관격:甲:A"]
        assert bad.suggested_result == "패"
        assert bad.suggested_roles is None or bad.suggested_roles.is_empty()
        assert found["year_luck_earth:정관격:子:B"].suggested_reason == "r"

    def test_check_pattern(self):
        def handler(request):
            assert request.url.path == SuggestionClient.CHECK_PATH
            assert request.url.params["gyeokguk_name"] == "정관격"
            return httpx.Response(200, json={
                "success": True,
                "approved_suggestion": {"suggested_reason": "관인상생"},
            })

        client = self._client(handler)
        o = asyncio.run(client.check_pattern("year_luck_sky", "정관격", "甲", "A"))
        assert o.suggested_reason == "관인상생"
        assert o.key == "year_luck_sky:정관격:甲:A"


class TestAccessor:

    def test_lazy_singleton(self):
        from saju_console.services import get_suggestion_client

        client = get_suggestion_client()
        assert client is get_suggestion_client()
        assert client.base_url.startswith("http")
