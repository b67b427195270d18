"""
/engine 엔드포인트 - 분석 엔진 (콘솔 재계산용)

- 연도 간지, 기둥 표시 (십성/운성/신살)
- 성패 reconcile (namespace 단위)
- 단일/종합 등급
- 수정 제안 오버레이
- 세운 목록 (대운 매칭)
"""
from fastapi import APIRouter, HTTPException
from typing import Dict, List
import logging

from saju_console.models.schemas import (
    ChartIn,
    ChartViewResponse,
    CombinedRatingRequest,
    ErrorResponse,
    FiveYearRequest,
    GanjiResponse,
    OutcomeIn,
    OverlayRequest,
    PillarRequest,
    PillarViewOut,
    RatingResponse,
    ReconcileRequest,
    ReconcileResponse,
    SingleRatingRequest,
)
from saju_console.services.ganji import to_hangul
from saju_console.services.luck import (
    SajuChart, build_year_lucks, chart_view, luck_view, pillar_view, safe_parse, year_pillar,
)
from saju_console.services.outcomes import Namespace, OutcomeRecord, reconcile_namespaces
from saju_console.services.rating import PillarSignal, Rating, single_rating, combined_rating
from saju_console.services.suggestions import SuggestionOverride, resolve

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/engine")

ERROR_RESPONSES = {400: {"model": ErrorResponse}}


def _bad_request(error_code: str, message: str) -> HTTPException:
    return HTTPException(status_code=400, detail={"error_code": error_code, "message": message})


def _chart(chart: ChartIn) -> SajuChart:
    return SajuChart.from_ganji(chart.year_pillar, chart.month_pillar, chart.day_pillar, chart.time_pillar)


def _outcome(o: OutcomeIn) -> OutcomeRecord:
    return OutcomeRecord.from_dict(o.model_dump())


def _rating_response(rating: Rating) -> RatingResponse:
    return RatingResponse(
        rating=rating.value,
        label=rating.label,
        fortune_level=rating.fortune_level,
        fortune_level_label=rating.fortune_level_label,
    )


@router.get("/ganji/{year}", response_model=GanjiResponse, summary="연도 → 연주 간지")
async def get_year_ganji(year: int):
    pillar = year_pillar(year)
    return GanjiResponse(year=year, ganji=pillar.ganji, hangul=to_hangul(pillar), index=pillar.index)


@router.post("/chart", response_model=ChartViewResponse, summary="원국 4기둥 표시")
async def view_chart(request: ChartIn):
    chart = _chart(request)
    if chart.day is None:
        logger.warning(f"[Engine] 일주 간지 오류 (십성 없이 표시): {request.day_pillar!r}")
    views = chart_view(chart)
    return ChartViewResponse(
        day_master=chart.day_stem.hanja if chart.day_stem else None,
        pillars=[PillarViewOut(**v.to_dict()) for v in views],
    )


@router.post("/pillar", response_model=PillarViewOut, summary="대상 기둥 표시")
async def view_pillar(request: PillarRequest):
    chart = _chart(request.chart)
    if chart.day is None:
        logger.warning(f"[Engine] 일주 간지 오류 (십성 없이 표시): {request.chart.day_pillar!r}")
    target = safe_parse(request.target, request.position)
    view = pillar_view(chart, target, request.position, request.spirit_basis)
    return PillarViewOut(**view.to_dict())


@router.post("/reconcile", response_model=ReconcileResponse, responses=ERROR_RESPONSES, summary="성패 중복 제거")
async def reconcile_outcomes(request: ReconcileRequest):
    try:
        raw_by_ns = {Namespace.from_key(k): [_outcome(o) for o in v] for k, v in request.raw.items()}
        merged_by_ns = {Namespace.from_key(k): [_outcome(o) for o in v] for k, v in request.merged.items()}
    except ValueError as e:
        raise _bad_request("INVALID_NAMESPACE", str(e))

    kept = reconcile_namespaces(raw_by_ns, merged_by_ns)
    outcomes: Dict[str, List[dict]] = {}
    dropped: Dict[str, int] = {}
    for ns, records in kept.items():
        outcomes[ns.key] = [r.to_dict() for r in records]
        dropped[ns.key] = len(raw_by_ns[ns]) - len(records)
    return ReconcileResponse(outcomes=outcomes, dropped=dropped)


@router.post("/rating/single", response_model=RatingResponse, summary="단일 기둥 등급")
async def rate_single(request: SingleRatingRequest):
    return _rating_response(single_rating(request.result, request.score, request.degree))


@router.post("/rating/combined", response_model=RatingResponse, summary="천간+지지 종합 등급")
async def rate_combined(request: CombinedRatingRequest):
    sky = PillarSignal(**request.sky.model_dump())
    earth = PillarSignal(**request.earth.model_dump())
    return _rating_response(combined_rating(sky, earth, request.degree))


@router.post("/overlay", summary="수정 제안 반영")
async def overlay_outcome(request: OverlayRequest):
    override = SuggestionOverride.from_dict(request.override.model_dump()) if request.override else None
    return resolve(_outcome(request.outcome), override).to_dict()


@router.post("/five-year", responses=ERROR_RESPONSES, summary="세운 목록 (대운 매칭)")
async def year_lucks(request: FiveYearRequest):
    lucks = build_year_lucks(
        start_year=request.start_year,
        birth_year=request.birth_year,
        decade_array=request.decade_array,
        decade_start_age=request.decade_start_age,
        count=request.count,
        current_year=request.current_year,
    )
    chart = _chart(request.chart) if request.chart else None

    items = []
    for luck in lucks:
        item = luck.to_dict()
        if chart is not None:
            item["view"] = luck_view(chart, luck).to_dict()
        items.append(item)
    logger.info(f"[Engine] 세운 {len(items)}건: {request.start_year}~{request.start_year + request.count - 1}")
    return {"success": True, "year_lucks": items}
