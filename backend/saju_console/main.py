"""
Saju Console 분석 엔진 - Main App
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
1. /api/v1/engine - 간지/십성/운성/신살, 성패 reconcile, 등급, 제안 오버레이, 세운
2. /health, /ready
3. 엔진 에러 → 400, 그 외 → 500 JSON
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from saju_console.config import get_settings
from saju_console.services.ganji import EngineError, GANJI_60
from saju_console.services.life_cycle import TWELVE_STAGE_MAP, TWELVE_SPIRIT_MAP

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Saju Console Engine", version="1.0.0", debug=settings.debug)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"service": "Saju Console Engine", "status": "running"}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 라우터 등록
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
try:
    from saju_console.routers import engine
    app.include_router(engine.router, prefix="/api/v1", tags=["Engine"])
    logger.info("✅ engine 라우터 등록 (/api/v1/engine)")
except Exception as e:
    logger.error(f"❌ engine 라우터 등록 실패: {e}")


@app.get("/ready")
async def ready():
    """
    서버 준비 상태 확인

    Returns:
        - tables: 60갑자 / 십이운성 / 십이신살 테이블 크기 확인
        - api_base_url: 리포트/제안 API 설정 여부
    """
    checks = {
        "ganji_60": len(GANJI_60) == 60,
        "twelve_stage": len(TWELVE_STAGE_MAP) == 10,
        "twelve_spirit": len(TWELVE_SPIRIT_MAP) == 12,
        "api_base_url": bool(settings.api_base_url),
        "spirit_basis": settings.spirit_basis,
    }
    tables_ok = checks["ganji_60"] and checks["twelve_stage"] and checks["twelve_spirit"]
    return {"status": "ready" if tables_ok and checks["api_base_url"] else "partial", "checks": checks}


@app.exception_handler(EngineError)
async def engine_error_handler(request: Request, exc: EngineError):
    logger.warning(f"[Engine] {type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=400,
        content={"success": False, "error_code": type(exc).__name__, "message": str(exc), "detail": None},
    )


@app.exception_handler(Exception)
async def error_handler(request: Request, exc: Exception):
    logger.error(f"Error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error_code": "INTERNAL_ERROR", "message": str(exc)[:100], "detail": None},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
