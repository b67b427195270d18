"""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
사주 원국 / 대운 / 세운 모듈
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
- SajuChart: 년/월/일/시주 + 일간(기준)
- LuckPeriod: 대운(나이 구간) / 세운(연도), 세운은 하나의 대운에 속함
- 기둥 표시: 십성(천간/지지), 십이운성, 십이신살
- 잘못된 간지는 해당 기둥만 '?' 처리 (차트 전체는 계속 렌더링)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Literal, Optional, Sequence

from saju_console.config import get_settings
from saju_console.services.ganji import EngineError, Pillar, parse_ganji, ganji_for_year
from saju_console.services.ten_gods import classify_stem, classify_branch, SELF_LABEL
from saju_console.services.life_cycle import twelve_stage, twelve_spirit

logger = logging.getLogger(__name__)

PLACEHOLDER = "?"

PILLAR_POSITIONS = ("year", "month", "day", "time")

POSITION_NAMES = {"year": "년주", "month": "월주", "day": "일주", "time": "시주"}


def safe_parse(text: Optional[str], where: str = "") -> Optional[Pillar]:
    """간지 파싱 - 실패 시 None (경고 로그)"""
    if not text:
        return None
    try:
        return parse_ganji(text)
    except EngineError as e:
        logger.warning(f"[Luck] 간지 오류 {where}: {e}")
        return None


@dataclass(frozen=True)
class SajuChart:
    """사주 원국 (시주는 출생시간 미입력 시 None)"""
    year: Optional[Pillar]
    month: Optional[Pillar]
    day: Optional[Pillar]
    time: Optional[Pillar] = None

    @property
    def day_stem(self):
        return self.day.stem if self.day else None

    def pillar(self, position: str) -> Optional[Pillar]:
        return getattr(self, position)

    @classmethod
    def from_ganji(
        cls,
        year: Optional[str],
        month: Optional[str],
        day: Optional[str],
        time: Optional[str] = None
    ) -> "SajuChart":
        return cls(
            year=safe_parse(year, "year"),
            month=safe_parse(month, "month"),
            day=safe_parse(day, "day"),
            time=safe_parse(time, "time"),
        )


@dataclass(frozen=True)
class LuckPeriod:
    """대운 / 세운"""
    kind: Literal["decade", "year"]
    pillar: Optional[Pillar]
    index: Optional[int] = None
    start_age: Optional[int] = None
    end_age: Optional[int] = None
    year: Optional[int] = None
    age: Optional[int] = None
    is_current: bool = False
    decade: Optional["LuckPeriod"] = None

    @property
    def ganji(self) -> str:
        return self.pillar.ganji if self.pillar else PLACEHOLDER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "ganji": self.ganji,
            "sky": self.ganji[0] if self.pillar else PLACEHOLDER,
            "earth": self.ganji[1] if self.pillar else PLACEHOLDER,
            "index": self.index,
            "start_age": self.start_age,
            "end_age": self.end_age,
            "year": self.year,
            "age": self.age,
            "is_current": self.is_current,
            "decade": self.decade.to_dict() if self.decade else None,
        }


def _decade_start(start_age: int) -> int:
    # 대운 시작 나이가 1살부터면 0으로
    return max(start_age - 1, 0)


def find_decade_for_age(
    decade_array: Sequence[str],
    start_age: int,
    age: int,
    current_age: Optional[int] = None
) -> Optional[LuckPeriod]:
    """나이(한국 나이)가 속한 대운"""
    if not decade_array:
        return None

    adjusted = _decade_start(start_age)
    idx = (age - adjusted) // 10
    if idx < 0 or idx >= len(decade_array) or not decade_array[idx]:
        return None

    begin = adjusted + idx * 10
    end = begin + 9
    return LuckPeriod(
        kind="decade",
        pillar=safe_parse(decade_array[idx], f"decade[{idx}]"),
        index=idx,
        start_age=begin,
        end_age=end,
        is_current=current_age is not None and begin <= current_age <= end,
    )


def build_decade_lucks(
    decade_array: Sequence[str],
    start_age: int,
    current_age: Optional[int] = None
) -> List[LuckPeriod]:
    """대운 전체 목록"""
    adjusted = _decade_start(start_age)
    lucks = []
    for idx, ganji in enumerate(decade_array or []):
        begin = adjusted + idx * 10
        lucks.append(LuckPeriod(
            kind="decade",
            pillar=safe_parse(ganji, f"decade[{idx}]"),
            index=idx,
            start_age=begin,
            end_age=begin + 9,
            is_current=current_age is not None and begin <= current_age <= begin + 9,
        ))
    return lucks


YEAR_LABELS = ["올해", "내년", "2년 후", "3년 후", "4년 후"]


def year_label(index: int) -> str:
    if 0 <= index < len(YEAR_LABELS):
        return YEAR_LABELS[index]
    return f"{index}년 후"


def year_pillar(year: int) -> Pillar:
    """설정된 기준 연도/간지로 연도 간지 계산"""
    settings = get_settings()
    return ganji_for_year(
        year,
        epoch_year=settings.epoch_year,
        epoch_pillar=parse_ganji(settings.epoch_pillar),
    )


def build_year_lucks(
    start_year: int,
    birth_year: int,
    decade_array: Sequence[str],
    decade_start_age: int,
    count: int = 5,
    current_year: Optional[int] = None,
    fallback_decade: Optional[LuckPeriod] = None,
) -> List[LuckPeriod]:
    """
    세운 목록 (기본 5년)

    각 세운의 대운은 해당 연도의 한국 나이로 결정.
    대운 배열이 없으면 fallback_decade (현재 대운) 사용.
    """
    current_year = start_year if current_year is None else current_year
    current_age = current_year - birth_year + 1

    lucks = []
    for i in range(count):
        year = start_year + i
        age = year - birth_year + 1
        decade = find_decade_for_age(decade_array, decade_start_age, age, current_age) or fallback_decade
        lucks.append(LuckPeriod(
            kind="year",
            pillar=year_pillar(year),
            index=i,
            year=year,
            age=age,
            is_current=year == current_year,
            decade=decade,
        ))
    return lucks


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 기둥 표시 (십성 / 운성 / 신살)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass
class PillarView:
    position: str
    ganji: str
    sky: str
    earth: str
    sky_ten_god: Optional[str] = None
    earth_ten_god: Optional[str] = None
    twelve_stage: Optional[str] = None
    twelve_spirit: Optional[str] = None
    is_placeholder: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def spirit_reference(chart: SajuChart, basis: Optional[str] = None) -> Optional[Pillar]:
    basis = basis or get_settings().spirit_basis
    return chart.year if basis == "year" else chart.day


def pillar_view(
    chart: SajuChart,
    pillar: Optional[Pillar],
    position: str,
    spirit_basis: Optional[str] = None
) -> PillarView:
    """대상 기둥 하나를 일간 기준으로 표시"""
    if pillar is None:
        return PillarView(
            position=position, ganji=PLACEHOLDER, sky=PLACEHOLDER, earth=PLACEHOLDER, is_placeholder=True
        )

    view = PillarView(
        position=position,
        ganji=pillar.ganji,
        sky=pillar.stem.hanja,
        earth=pillar.branch.hanja,
    )
    day_stem = chart.day_stem
    if day_stem is None:
        return view

    if position == "day":
        view.sky_ten_god = SELF_LABEL
    else:
        view.sky_ten_god = classify_stem(day_stem, pillar.stem).value
    view.earth_ten_god = classify_branch(day_stem, pillar.branch).value
    view.twelve_stage = twelve_stage(day_stem, pillar.branch)

    ref = spirit_reference(chart, spirit_basis)
    if ref is not None:
        view.twelve_spirit = twelve_spirit(ref.branch, pillar.branch)
    return view


def chart_view(chart: SajuChart, spirit_basis: Optional[str] = None) -> List[PillarView]:
    """원국 4기둥 표시"""
    return [pillar_view(chart, chart.pillar(pos), pos, spirit_basis) for pos in PILLAR_POSITIONS]


def luck_view(chart: SajuChart, luck: LuckPeriod, spirit_basis: Optional[str] = None) -> PillarView:
    position = "decade_luck" if luck.kind == "decade" else "year_luck"
    return pillar_view(chart, luck.pillar, position, spirit_basis)
