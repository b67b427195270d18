"""
Pydantic 스키마 정의
분석 엔진 API 요청/응답 모델
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Dict, Any, Union


# ============ 간지 / 기둥 ============

class GanjiResponse(BaseModel):
    """연도 → 간지"""
    year: int
    ganji: str = Field(..., description="간지 한자 (예: 甲辰)")
    hangul: str = Field(..., description="간지 한글 (예: 갑진)")
    index: int = Field(..., ge=0, le=59, description="60갑자 인덱스")


class ChartIn(BaseModel):
    """사주 원국 (간지 문자열, 한자/한글)"""
    year_pillar: Optional[str] = None
    month_pillar: Optional[str] = None
    day_pillar: str = Field(..., description="일주 (일간 = 기준)")
    time_pillar: Optional[str] = Field(None, description="시주 (시간 미입력시 None)")

    class Config:
        json_schema_extra = {
            "example": {
                "year_pillar": "戊午",
                "month_pillar": "丁巳",
                "day_pillar": "戊寅",
                "time_pillar": "丁巳",
            }
        }


class PillarRequest(BaseModel):
    """대상 기둥 표시 요청"""
    chart: ChartIn
    target: str = Field(..., description="대상 간지 (예: 甲辰)")
    position: str = Field("year_luck", description="위치 (year_luck, decade_luck, ...)")
    spirit_basis: Optional[Literal["day", "year"]] = None


class PillarViewOut(BaseModel):
    position: str
    ganji: str
    sky: str
    earth: str
    sky_ten_god: Optional[str] = None
    earth_ten_god: Optional[str] = None
    twelve_stage: Optional[str] = None
    twelve_spirit: Optional[str] = None
    is_placeholder: bool = False


class ChartViewResponse(BaseModel):
    day_master: Optional[str] = None
    pillars: List[PillarViewOut]


# ============ Outcome ============

class OutcomeIn(BaseModel):
    """성패 outcome (분석 결과 원본 형식)"""
    code: Optional[str] = None
    result: str = ""
    reason: str = ""
    positions: Optional[List[str]] = None
    position: Optional[str] = None
    roles: Optional[Union[Dict[str, Any], List[Any]]] = None
    deep_level: Optional[int] = None
    is_sanhe: Optional[bool] = None


class ReconcileRequest(BaseModel):
    """namespace 키("sky:year_month" 등)별 원본/병합 outcome"""
    raw: Dict[str, List[OutcomeIn]]
    merged: Dict[str, List[OutcomeIn]] = Field(default_factory=dict)


class ReconcileResponse(BaseModel):
    outcomes: Dict[str, List[Dict[str, Any]]]
    dropped: Dict[str, int]


# ============ Rating ============

class SingleRatingRequest(BaseModel):
    result: Optional[str] = None
    score: Optional[float] = None
    degree: Optional[str] = None


class SignalIn(BaseModel):
    result: Optional[str] = None
    score: Optional[float] = None
    degree: Optional[str] = None


class CombinedRatingRequest(BaseModel):
    sky: SignalIn = Field(default_factory=SignalIn)
    earth: SignalIn = Field(default_factory=SignalIn)
    degree: Optional[str] = Field(None, description="종합 명시 등급")


class RatingResponse(BaseModel):
    rating: Literal["excellent", "good", "neutral", "caution", "difficult"]
    label: str = Field(..., description="표시 라벨 (예: ◎ 대길)")
    fortune_level: str = Field(..., description="에디터 레벨 코드 (very_good, good, normal, caution, difficult)")
    fortune_level_label: str = Field(..., description="에디터 레벨 이름 (예: 매우좋음)")


# ============ Suggestion overlay ============

class OverrideIn(BaseModel):
    suggestion_type: str
    pattern_name: str
    target_char: str
    code: str
    suggested_result: Optional[str] = None
    suggested_reason: Optional[str] = None
    suggested_roles: Optional[Union[Dict[str, Any], List[Any]]] = None


class OverlayRequest(BaseModel):
    outcome: OutcomeIn
    override: Optional[OverrideIn] = None


# ============ 세운 ============

class FiveYearRequest(BaseModel):
    """세운 목록 요청"""
    start_year: int = Field(..., ge=1, le=9999)
    birth_year: int = Field(..., ge=1, le=9999)
    decade_array: List[str] = Field(default_factory=list, description="대운 간지 배열")
    decade_start_age: int = Field(1, ge=0, le=120)
    count: int = Field(5, ge=1, le=20)
    current_year: Optional[int] = None
    chart: Optional[ChartIn] = None


# ============ 에러 응답 ============

class ErrorResponse(BaseModel):
    """에러 응답"""
    success: bool = False
    error_code: str
    message: str
    detail: Optional[str] = None
