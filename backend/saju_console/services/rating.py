"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
운세 등급(Rating) 판정 모듈
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
우선순위 (첫 번째로 판정되는 단계에서 종료):
1. degree (명시 등급) → 항상 우선
2. result (성패 문자열)
3. score (점수)
4. 전부 없음 → 보통

단일 기둥: 길 / 보통 / 흉 (degree 지정 시 5단계 그대로)
천간+지지 종합: 대길 / 길 / 보통 / 주의 / 흉
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import math
import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from saju_console.services.outcomes import (
    SUCCESS_ALIASES, FAILURE_ALIASES,
    SUCCESS_WITH_FAILURE, FAILURE_WITH_SUCCESS, COEXISTENCE,
)

Number = Union[int, float]


class Rating(str, Enum):
    EXCELLENT = "excellent"   # 대길
    GOOD = "good"             # 길
    NEUTRAL = "neutral"       # 보통
    CAUTION = "caution"       # 주의
    DIFFICULT = "difficult"   # 흉

    @property
    def label(self) -> str:
        return RATING_LABELS[self]

    @property
    def fortune_level(self) -> str:
        return FORTUNE_LEVEL_CODES[self]

    @property
    def fortune_level_label(self) -> str:
        return FORTUNE_LEVEL_LABELS[self.fortune_level]


RATING_LABELS = {
    Rating.EXCELLENT: "◎ 대길",
    Rating.GOOD: "○ 길",
    Rating.NEUTRAL: "△ 보통",
    Rating.CAUTION: "▽ 주의",
    Rating.DIFFICULT: "✕ 흉",
}

# 콘솔 에디터의 운세 레벨 코드
FORTUNE_LEVEL_CODES = {
    Rating.EXCELLENT: "very_good",
    Rating.GOOD: "good",
    Rating.NEUTRAL: "normal",
    Rating.CAUTION: "caution",
    Rating.DIFFICULT: "difficult",
}

FORTUNE_LEVEL_LABELS = {
    "very_good": "매우좋음",
    "good": "좋음",
    "normal": "보통",
    "caution": "주의필요",
    "difficult": "어려움",
}

# 명시 등급 동의어 (영문 / 한글 / 에디터 레벨 코드)
DEGREE_SYNONYMS = {
    Rating.EXCELLENT: ["excellent", "very_good", "great", "best", "대길", "매우좋음", "최상"],
    Rating.GOOD: ["good", "길", "좋음", "양호"],
    Rating.NEUTRAL: ["neutral", "normal", "average", "unspecified", "보통", "평", "평범"],
    Rating.CAUTION: ["caution", "warning", "주의", "주의필요", "소흉"],
    Rating.DIFFICULT: ["difficult", "bad", "poor", "흉", "대흉", "어려움", "나쁨"],
}


def normalize_degree(degree: Any) -> str:
    """대소문자/전각/공백/구분자/라벨 기호 제거"""
    s = unicodedata.normalize("NFKC", str(degree)).casefold()
    s = re.sub(r"[◎○△▽✕\s_\-]+", "", s)
    return s


_DEGREE_LOOKUP = {
    normalize_degree(word): rating
    for rating, words in DEGREE_SYNONYMS.items()
    for word in words
}


def classify_degree(degree: Any) -> Optional[Rating]:
    """명시 등급 → Rating (없거나 인식 불가면 None)"""
    if degree is None:
        return None
    if isinstance(degree, Rating):
        return degree
    key = normalize_degree(degree)
    if not key:
        return None
    return _DEGREE_LOOKUP.get(key)


def classify_result(result: Any) -> Optional[Rating]:
    """성패 문자열 → 길/보통/흉 (인식 불가면 None)"""
    if not isinstance(result, str):
        return None
    r = result.strip()
    if not r:
        return None
    if r in SUCCESS_ALIASES:
        return Rating.GOOD
    if r in FAILURE_ALIASES:
        return Rating.DIFFICULT
    if FAILURE_WITH_SUCCESS in r:
        return Rating.GOOD
    if SUCCESS_WITH_FAILURE in r:
        return Rating.DIFFICULT
    if COEXISTENCE in r:
        return Rating.NEUTRAL
    return None


def coerce_score(score: Any) -> Optional[float]:
    """숫자 변환 (bool, NaN, 숫자 아닌 문자열은 없음 처리)"""
    if score is None or isinstance(score, bool):
        return None
    if isinstance(score, (int, float)):
        value = float(score)
    elif isinstance(score, str) and score.strip():
        try:
            value = float(score.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(value):
        return None
    return value


@dataclass(frozen=True)
class PillarSignal:
    """한쪽(천간/지지) 신호"""
    result: Optional[str] = None
    score: Optional[Number] = None
    degree: Optional[str] = None


def single_rating(
    result: Optional[str] = None,
    score: Optional[Number] = None,
    degree: Optional[str] = None
) -> Rating:
    """단일 기둥 등급"""
    by_degree = classify_degree(degree)
    if by_degree is not None:
        return by_degree

    by_result = classify_result(result)
    if by_result is not None:
        return by_result

    value = coerce_score(score)
    if value is not None:
        # score > 0 과 score >= 1 사이 경계는 보통
        if value >= 1:
            return Rating.GOOD
        if value > 0:
            return Rating.NEUTRAL
        if value <= -1:
            return Rating.DIFFICULT
        return Rating.NEUTRAL

    return Rating.NEUTRAL


_GOOD_SIDE = (Rating.EXCELLENT, Rating.GOOD)
_BAD_SIDE = (Rating.CAUTION, Rating.DIFFICULT)


def _side(signal: PillarSignal) -> Optional[str]:
    """한쪽 판정: 명시 등급이 있으면 등급, 없으면 성패 결과"""
    rating = classify_degree(signal.degree)
    if rating is None:
        rating = classify_result(signal.result)
    if rating in _GOOD_SIDE:
        return "good"
    if rating in _BAD_SIDE:
        return "bad"
    return None


def combined_rating(
    sky: PillarSignal,
    earth: PillarSignal,
    degree: Optional[str] = None
) -> Rating:
    """천간 + 지지 종합 등급 (5단계)"""
    by_degree = classify_degree(degree)
    if by_degree is not None:
        return by_degree

    s, e = _side(sky), _side(earth)
    if s or e:
        if s == "good" and e == "good":
            return Rating.EXCELLENT
        if (s == "good" and e != "bad") or (e == "good" and s != "bad"):
            return Rating.GOOD
        if s == "bad" and e == "bad":
            return Rating.DIFFICULT
        if s == "bad" or e == "bad":
            return Rating.CAUTION
        return Rating.NEUTRAL

    sky_score, earth_score = coerce_score(sky.score), coerce_score(earth.score)
    if sky_score is not None or earth_score is not None:
        total = (sky_score or 0.0) + (earth_score or 0.0)
        if total >= 3:
            return Rating.EXCELLENT
        if total >= 1:
            return Rating.GOOD
        if total >= -1:
            return Rating.NEUTRAL
        if total >= -3:
            return Rating.CAUTION
        return Rating.DIFFICULT

    return Rating.NEUTRAL


class RatingClassifier:
    """등급 판정기"""

    @staticmethod
    def single_rating(result=None, score=None, degree=None) -> Rating:
        return single_rating(result, score, degree)

    @staticmethod
    def combined_rating(sky: PillarSignal, earth: PillarSignal, degree=None) -> Rating:
        return combined_rating(sky, earth, degree)


# 싱글톤
rating_classifier = RatingClassifier()
