"""
60갑자 계산 모듈
- 천간(10개) × 지지(12개) 중 음양이 맞는 60갑자
- 간지 인덱스 복원 (천간 mod 10, 지지 mod 12)
- 연도 → 연주 간지 (1984 갑자년 기준)
- 간지 문자열 포맷/파싱 (한자 2글자, 한글 입력 허용)
"""
import re
from dataclasses import dataclass
from typing import Optional, Union


# ============ 에러 ============

class EngineError(Exception):
    """분석 엔진 오류 (기둥 단위로 복구 가능)"""
    pass


class InvalidPillar(EngineError):
    """천간/지지 음양 불일치 또는 간지 형식 오류"""
    pass


class UnknownStem(EngineError):
    """범위를 벗어난 천간"""
    pass


class UnknownBranch(EngineError):
    """범위를 벗어난 지지"""
    pass


# ============ 상수 정의 ============

# 천간 (10개)
CHEONGAN = ["갑", "을", "병", "정", "무", "기", "경", "신", "임", "계"]
CHEONGAN_HANJA = ["甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸"]

# 지지 (12개)
JIJI = ["자", "축", "인", "묘", "진", "사", "오", "미", "신", "유", "술", "해"]
JIJI_HANJA = ["子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥"]

# 오행 순환 순서 (목 → 화 → 토 → 금 → 수 → 목)
ELEMENTS = ["목", "화", "토", "금", "수"]

YANG = "양"
YIN = "음"

# 천간 오행 인덱스
GAN_ELEMENT_INDEX = [0, 0, 1, 1, 2, 2, 3, 3, 4, 4]

# 지지 오행 인덱스
JI_ELEMENT_INDEX = [4, 2, 0, 0, 2, 1, 1, 2, 3, 3, 2, 4]

# 지지 본기 (지장간 정기) → 천간 인덱스
# 子癸 丑己 寅甲 卯乙 辰戊 巳丙 午丁 未己 申庚 酉辛 戌戊 亥壬
JI_ROOT_STEM_INDEX = [9, 5, 0, 1, 4, 2, 3, 5, 6, 7, 4, 8]


@dataclass(frozen=True)
class Stem:
    """천간"""
    index: int
    hanja: str
    hangul: str
    element: str
    polarity: str

    @property
    def element_index(self) -> int:
        return ELEMENTS.index(self.element)


@dataclass(frozen=True)
class Branch:
    """지지"""
    index: int
    hanja: str
    hangul: str
    element: str
    root_stem_index: int

    @property
    def element_index(self) -> int:
        return ELEMENTS.index(self.element)

    @property
    def root_stem(self) -> Stem:
        return STEMS[self.root_stem_index]


STEMS = tuple(
    Stem(
        index=i,
        hanja=CHEONGAN_HANJA[i],
        hangul=CHEONGAN[i],
        element=ELEMENTS[GAN_ELEMENT_INDEX[i]],
        polarity=YANG if i % 2 == 0 else YIN,
    )
    for i in range(10)
)

BRANCHES = tuple(
    Branch(
        index=i,
        hanja=JIJI_HANJA[i],
        hangul=JIJI[i],
        element=ELEMENTS[JI_ELEMENT_INDEX[i]],
        root_stem_index=JI_ROOT_STEM_INDEX[i],
    )
    for i in range(12)
)

_STEM_BY_CHAR = {s.hanja: s for s in STEMS}
_STEM_BY_CHAR.update({s.hangul: s for s in STEMS})

_BRANCH_BY_CHAR = {b.hanja: b for b in BRANCHES}
_BRANCH_BY_CHAR.update({b.hangul: b for b in BRANCHES})


def _is_index(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def stem_by_index(index: int) -> Stem:
    """천간 인덱스(0-9) → Stem"""
    if not _is_index(index) or not 0 <= index < 10:
        raise UnknownStem(f"천간 인덱스 범위 초과: {index!r}")
    return STEMS[index]


def branch_by_index(index: int) -> Branch:
    """지지 인덱스(0-11) → Branch"""
    if not _is_index(index) or not 0 <= index < 12:
        raise UnknownBranch(f"지지 인덱스 범위 초과: {index!r}")
    return BRANCHES[index]


def stem_from_char(char: str) -> Stem:
    """천간 글자(한자/한글) → Stem"""
    stem = _STEM_BY_CHAR.get(char) if isinstance(char, str) else None
    if stem is None:
        raise UnknownStem(f"알 수 없는 천간: {char!r}")
    return stem


def branch_from_char(char: str) -> Branch:
    """지지 글자(한자/한글) → Branch"""
    branch = _BRANCH_BY_CHAR.get(char) if isinstance(char, str) else None
    if branch is None:
        raise UnknownBranch(f"알 수 없는 지지: {char!r}")
    return branch


StemLike = Union[Stem, int, str]
BranchLike = Union[Branch, int, str]


def as_stem(value: StemLike) -> Stem:
    if isinstance(value, Stem):
        return value
    if isinstance(value, str):
        return stem_from_char(value)
    return stem_by_index(value)


def as_branch(value: BranchLike) -> Branch:
    if isinstance(value, Branch):
        return value
    if isinstance(value, str):
        return branch_from_char(value)
    return branch_by_index(value)


@dataclass(frozen=True)
class Pillar:
    """간지 기둥 (천간 + 지지)"""
    stem: Stem
    branch: Branch

    def __post_init__(self):
        if self.stem.index % 2 != self.branch.index % 2:
            raise InvalidPillar(
                f"음양 불일치: {self.stem.hanja}({self.stem.index}) + {self.branch.hanja}({self.branch.index})"
            )

    @property
    def ganji(self) -> str:
        return format_pillar(self)

    @property
    def index(self) -> int:
        return pillar_index(self)

    def __str__(self) -> str:
        return self.ganji


def make_pillar(stem: StemLike, branch: BranchLike) -> Pillar:
    """천간/지지 (객체, 인덱스, 글자 모두 허용) → Pillar"""
    return Pillar(as_stem(stem), as_branch(branch))


def pillar_index(pillar: Pillar) -> int:
    """
    60갑자 인덱스 (0-59)

    i % 10 == 천간, i % 12 == 지지 를 만족하는 유일한 i.
    6 ≡ 1 (mod 10), 6 ≡ 0 (mod 12) / -5 ≡ 0 (mod 10), -5 ≡ 1 (mod 12)
    """
    s, b = pillar.stem.index, pillar.branch.index
    if s % 2 != b % 2:
        raise InvalidPillar(f"음양 불일치: 천간 {s}, 지지 {b}")
    return (6 * s - 5 * b) % 60


def pillar_at(index: int) -> Pillar:
    """60갑자 인덱스 → Pillar (60 주기)"""
    i = index % 60
    return Pillar(STEMS[i % 10], BRANCHES[i % 12])


def format_pillar(pillar: Pillar) -> str:
    """간지 한자 문자열 (예: 甲子)"""
    return f"{pillar.stem.hanja}{pillar.branch.hanja}"


def to_hangul(pillar: Pillar) -> str:
    """간지 한글 문자열 (예: 갑자)"""
    return f"{pillar.stem.hangul}{pillar.branch.hangul}"


def _norm_ganji(x) -> str:
    """
    간지 문자열 정규화
    - '무인(戊寅)' → '무인'
    - invisible chars, 공백 제거
    """
    s = str(x)
    s = re.sub(r"\([^)]*\)", "", s)
    s = s.replace("\u200b", "").replace("\ufeff", "").replace("\xa0", "")
    return re.sub(r"\s+", "", s)


def parse_ganji(text: str) -> Pillar:
    """간지 문자열(한자/한글 2글자) → Pillar"""
    s = _norm_ganji(text)
    if len(s) != 2:
        raise InvalidPillar(f"간지 형식 오류: {text!r}")
    return Pillar(stem_from_char(s[0]), branch_from_char(s[1]))


# 60갑자 배열 (한자)
GANJI_60 = tuple(format_pillar(pillar_at(i)) for i in range(60))

JIAZI = pillar_at(0)


class SexagenaryCalendar:
    """60갑자 계산기"""

    DEFAULT_EPOCH_YEAR = 1984  # 갑자년

    @staticmethod
    def pillar_index(pillar: Pillar) -> int:
        return pillar_index(pillar)

    @staticmethod
    def ganji_for_year(
        year: int,
        epoch_year: int = DEFAULT_EPOCH_YEAR,
        epoch_pillar: Optional[Pillar] = None
    ) -> Pillar:
        """
        연도 → 연주 간지

        Args:
            year: 양력 연도 (입춘 보정은 호출측 책임)
            epoch_year: 기준 연도 (기본 1984)
            epoch_pillar: 기준 연도의 간지 (기본 甲子)

        기준 이전 연도(음수 offset)도 이중 mod로 정규화
        """
        base = JIAZI if epoch_pillar is None else epoch_pillar
        offset = ((year - epoch_year) % 60 + 60) % 60
        return pillar_at((pillar_index(base) + offset) % 60)

    @staticmethod
    def format(pillar: Pillar) -> str:
        return format_pillar(pillar)

    @staticmethod
    def parse(text: str) -> Pillar:
        return parse_ganji(text)


def ganji_for_year(
    year: int,
    epoch_year: int = SexagenaryCalendar.DEFAULT_EPOCH_YEAR,
    epoch_pillar: Optional[Pillar] = None
) -> Pillar:
    return SexagenaryCalendar.ganji_for_year(year, epoch_year, epoch_pillar)


# 싱글톤
sexagenary = SexagenaryCalendar()
