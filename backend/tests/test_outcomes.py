"""
성패 outcome reconcile / 요약 테스트
"""
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from saju_console.services.outcomes import (
    COEXISTENCE,
    FAILURE,
    FAILURE_WITH_SUCCESS,
    SUCCESS,
    SUCCESS_WITH_FAILURE,
    MergedOutcome,
    Namespace,
    OutcomeRecord,
    RoleTiers,
    determine_result,
    flatten_outcomes,
    reconcile,
    reconcile_namespaces,
    roles_from_positions,
    summarize_outcomes,
    translate_position,
)


def _o(code=None, result="", **kwargs):
    return OutcomeRecord(code=code, result=result, **kwargs)


class TestReconcile:
    """병합 중복 제거"""

    def test_drops_merged_codes(self):
        raw = [_o("A", SUCCESS), _o("B", FAILURE), _o("C", SUCCESS)]
        merged = [MergedOutcome(code="B", result=FAILURE)]
        assert [r.code for r in reconcile(raw, merged)] == ["A", "C"]

    def test_empty_merged_returns_raw(self):
        raw = [_o("A"), _o("B"), _o(None)]
        assert reconcile(raw, []) == raw

    def test_merged_without_codes_drops_nothing(self):
        raw = [_o("A"), _o("B")]
        assert reconcile(raw, [MergedOutcome(code=None)]) == raw

    def test_codeless_records_are_kept(self):
        raw = [_o(None, SUCCESS, reason="x"), _o("A"), _o(None, FAILURE, reason="y")]
        kept = reconcile(raw, [MergedOutcome(code="A")])
        assert [r.reason for r in kept] == ["x", "y"]

    def test_idempotent(self):
        raw = [_o("A"), _o("B"), _o(None), _o("C"), _o("B")]
        merged = [MergedOutcome(code="B"), MergedOutcome(code="Z")]
        once = reconcile(raw, merged)
        assert reconcile(once, merged) == once

    def test_preserves_order(self):
        raw = [_o("C"), _o("A"), _o("B"), _o("D")]
        kept = reconcile(raw, [MergedOutcome(code="A")])
        assert [r.code for r in kept] == ["C", "B", "D"]


class TestNamespaces:
    """namespace 단위 적용"""

    def test_no_cross_namespace_suppression(self):
        sky = Namespace("sky", "year_month")
        earth = Namespace("earth", "year_month")
        raw = {sky: [_o("식신정인")], earth: [_o("식신정인")]}
        merged = {sky: [MergedOutcome(code="식신정인")]}

        result = reconcile_namespaces(raw, merged)
        assert result[sky] == []
        assert [r.code for r in result[earth]] == ["식신정인"]

    def test_key_round_trip(self):
        ns = Namespace.from_key("earth:decade")
        assert ns == Namespace("earth", "decade")
        assert ns.key == "earth:decade"

    @pytest.mark.parametrize("key", ["middle:self", "sky:everything", "sky", ""])
    def test_bad_key(self, key):
        with pytest.raises(ValueError):
            Namespace.from_key(key)


class TestOutcomeRecord:
    """dict ↔ OutcomeRecord"""

    def test_from_dict_singular_position_and_tier_roles(self):
        o = OutcomeRecord.from_dict({
            "code": "정관정인",
            "result": SUCCESS,
            "reason": "관인상생",
            "position": "month_sky",
            "first_roles": "부모, 사회",
            "second_roles": ["배우자"],
            "deep_level": "2",
        })
        assert o.positions == ("month_sky",)
        assert o.roles == RoleTiers(first=("부모", "사회"), second=("배우자",))
        assert o.deep_level == 2

    def test_empty_code_becomes_none(self):
        assert OutcomeRecord.from_dict({"code": "", "result": FAILURE}).code is None

    def test_roles_list_form(self):
        roles = RoleTiers.from_value([["조상"], [{"name": "자식"}], "부하, 동료"])
        assert roles.to_dict() == {"first": "조상", "second": "자식", "third": "부하, 동료"}

    def test_roles_plain_string(self):
        assert RoleTiers.from_value("배우자, 자식") == RoleTiers(first=("배우자", "자식"))

    @pytest.mark.parametrize("value", [5, 2.5, object()])
    def test_roles_unsupported_value(self, value):
        assert RoleTiers.from_value(value) is None

    def test_to_dict(self):
        o = OutcomeRecord(code="A", result=SUCCESS, positions=("day_earth",), roles=RoleTiers(first=("배우자",)))
        d = o.to_dict()
        assert d["positions"] == ["day_earth"]
        assert d["roles"] == {"first": "배우자"}

    def test_flatten(self):
        assert flatten_outcomes([[_o("A"), None], _o("B"), [[_o("C")]]]) == [_o("A"), _o("B"), _o("C")]
        assert flatten_outcomes(None) == []


class TestDetermineResult:
    """대표 성패"""

    def test_mixed_by_deep_level(self):
        outcomes = [
            _o("A", SUCCESS_WITH_FAILURE, deep_level=1),
            _o("B", FAILURE_WITH_SUCCESS, deep_level=3),
        ]
        assert determine_result(outcomes) == FAILURE_WITH_SUCCESS

    def test_counts(self):
        assert determine_result([_o("A", SUCCESS), _o("B", FAILURE)]) == FAILURE_WITH_SUCCESS
        assert determine_result([_o("A", SUCCESS), _o("B", SUCCESS), _o("C", FAILURE)]) == SUCCESS_WITH_FAILURE

    def test_single_kind(self):
        assert determine_result([_o("A", SUCCESS), _o("B", "成")]) == SUCCESS
        assert determine_result([_o("A", FAILURE)]) == FAILURE

    def test_nothing(self):
        assert determine_result([]) == ""
        assert determine_result([_o("A", COEXISTENCE)]) == ""


class TestSummary:
    """세운/대운 성패 요약"""

    def test_positions_and_roles(self):
        assert translate_position("day_earth") == "일지"
        assert translate_position("custom") == "custom"
        assert roles_from_positions(["time_sky", "time_earth"]) == ["자식", "부하", "동료"]

    def test_summarize(self):
        outcomes = [
            _o("식신정인합", SUCCESS, reason="식신 생재", positions=("month_earth",)),
            _o(None, FAILURE, reason="", positions=("day_earth", "month_earth")),
        ]
        summary = summarize_outcomes(outcomes)
        assert summary.code == "식신정인합"
        assert summary.result == FAILURE_WITH_SUCCESS
        assert summary.reason == "식신 생재"
        assert summary.positions == ["month_earth", "day_earth"]
        assert summary.roles == ["동료", "친구", "사회사람들", "부모", "배우자"]
        assert (summary.sipsung1, summary.sipsung2, summary.sipsung3) == ("식신", "정인", "합")

    def test_codes_and_fallback_reason(self):
        summary = summarize_outcomes([], codes=["정관정인"], fallback_reason="기본 이유")
        assert summary.code == "정관정인"
        assert summary.reason == "기본 이유"
        assert summary.result == ""
