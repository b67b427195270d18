"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
십성(十星) 분류 모듈
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
일간(기준 천간) ↔ 대상 천간/지지 관계를 10가지 십성으로 분류
- 오행 차이 (목=0 화=1 토=2 금=3 수=4, mod 5) → 비겁/식상/재성/관성/인성
- 음양 일치 여부 → 편/정
- 지지는 본기(지장간 정기) 천간으로 환산 후 분류
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import math
import re
from dataclasses import dataclass
from enum import Enum

from saju_console.services.ganji import (
    Stem, Branch, StemLike, BranchLike, as_stem, as_branch,
)


class TenGod(str, Enum):
    BIGYEON = "비견"      # 비겁 / 같은 음양
    GEOPJAE = "겁재"      # 비겁 / 다른 음양
    SIKSIN = "식신"       # 식상 / 같은 음양
    SANGGWAN = "상관"     # 식상 / 다른 음양
    PYEONJAE = "편재"     # 재성 / 같은 음양
    JEONGJAE = "정재"     # 재성 / 다른 음양
    PYEONGWAN = "편관"    # 관성 / 같은 음양
    JEONGGWAN = "정관"    # 관성 / 다른 음양
    PYEONIN = "편인"      # 인성 / 같은 음양
    JEONGIN = "정인"      # 인성 / 다른 음양

    @property
    def category(self) -> str:
        return TEN_GOD_CATEGORY[self]

    @property
    def same_polarity(self) -> bool:
        return list(TenGod).index(self) % 2 == 0


# 오행 차이(elem_diff) → (같은 음양, 다른 음양)
TEN_GOD_TABLE = [
    (TenGod.BIGYEON, TenGod.GEOPJAE),      # 0: 같은 오행
    (TenGod.SIKSIN, TenGod.SANGGWAN),      # 1: 내가 생하는 오행
    (TenGod.PYEONJAE, TenGod.JEONGJAE),    # 2: 내가 극하는 오행
    (TenGod.PYEONGWAN, TenGod.JEONGGWAN),  # 3: 나를 극하는 오행
    (TenGod.PYEONIN, TenGod.JEONGIN),      # 4: 나를 생하는 오행
]

CATEGORY_NAMES = ["비겁", "식상", "재성", "관성", "인성"]

TEN_GOD_CATEGORY = {
    god: CATEGORY_NAMES[diff]
    for diff, pair in enumerate(TEN_GOD_TABLE)
    for god in pair
}

# 일간 자기 자신 (십성 아님)
SELF_LABEL = "일간"


def element_diff(reference: Stem, target_element_index: int) -> int:
    return (target_element_index - reference.element_index + 5) % 5


def classify_stem(reference_stem: StemLike, target_stem: StemLike) -> TenGod:
    """
    천간 십성 분류

    Raises:
        UnknownStem: 범위를 벗어난 천간
    """
    ref = as_stem(reference_stem)
    target = as_stem(target_stem)
    same, diff = TEN_GOD_TABLE[element_diff(ref, target.element_index)]
    return same if ref.polarity == target.polarity else diff


def classify_branch(reference_stem: StemLike, target_branch: BranchLike) -> TenGod:
    """지지 십성 분류 (본기 기준)"""
    branch: Branch = as_branch(target_branch)
    return classify_stem(reference_stem, branch.root_stem)


def label_for(reference_stem: StemLike, target_stem: StemLike, is_day_stem: bool = False) -> str:
    """표시용 라벨 - 일간 자리는 '일간'"""
    if is_day_stem:
        return SELF_LABEL
    return classify_stem(reference_stem, target_stem).value


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 성패 코드 토큰 (예: "식신정인합")
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

SIPSUNG_PATTERN = re.compile(r"(비견|겁재|식신|상관|편재|정재|편관|정관|편인|정인)")
RELATION_PATTERN = re.compile(r"(합|충|형|파|해|원진)")


@dataclass(frozen=True)
class CodeTokens:
    code: str
    sipsung1: str = ""
    sipsung2: str = ""
    sipsung3: str = ""


def extract_sipsung(code: str) -> CodeTokens:
    """코드에서 십성 2개 + 관계(합/충 등) 1개 추출"""
    if not code:
        return CodeTokens(code="")
    gods = SIPSUNG_PATTERN.findall(code)
    relations = RELATION_PATTERN.findall(code)
    third = relations[0] if relations else (gods[2] if len(gods) > 2 else "")
    return CodeTokens(
        code=code,
        sipsung1=gods[0] if gods else "",
        sipsung2=gods[1] if len(gods) > 1 else "",
        sipsung3=third,
    )


def role_count(code: str) -> int:
    """코드 길이 기반 역할 단계 수 ('합' 제외 2글자당 1단계)"""
    if not code:
        return 0
    return math.ceil(len(code.replace("합", "")) / 2)


class TenGodClassifier:
    """십성 분류기"""

    @staticmethod
    def classify_stem(reference_stem: StemLike, target_stem: StemLike) -> TenGod:
        return classify_stem(reference_stem, target_stem)

    @staticmethod
    def classify_branch(reference_stem: StemLike, target_branch: BranchLike) -> TenGod:
        return classify_branch(reference_stem, target_branch)


# 싱글톤
ten_god_classifier = TenGodClassifier()
