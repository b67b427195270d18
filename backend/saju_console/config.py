"""
Saju Console Engine Settings
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
관리자 콘솔 분석 엔진 설정:
- 60갑자 기준년 (1984 갑자년)
- 십이신살 기준 지지 (일지/년지)
- 리포트 생성 Job 폴링 (2초 간격, 10분 타임아웃)
- 격국 수정 제안 조회 캐시
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
from pydantic_settings import BaseSettings
from typing import List, Literal, Optional


class Settings(BaseSettings):
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 백엔드 API (리포트 생성 / 격국 제안)
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    api_base_url: str = "http://localhost:4000"
    api_token: str = ""

    @property
    def clean_api_token(self) -> str:
        return self.api_token.strip().replace('\n', '').replace('\r', '')

    http_timeout: float = 20.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 달력 / 신살 기준
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    epoch_year: int = 1984
    epoch_pillar: str = "甲子"  # epoch_year 의 간지 (한자/한글)
    spirit_basis: Literal["day", "year"] = "day"

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 리포트 생성 Job 폴링
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    job_poll_interval: float = 2.0
    job_timeout: int = 600

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # 격국 수정 제안 캐시 (차트 단위)
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    suggestion_cache_ttl: int = 1800
    suggestion_cache_max_size: int = 1000

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


_settings: Optional[Settings] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
