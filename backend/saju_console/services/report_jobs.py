"""
리포트 생성 Job 클라이언트
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
시작 → job_id → 2초 간격 상태 폴링 → completed / failed / 10분 타임아웃
- 중간 폴링마다 진행률(0-100) + 메시지 전달
- 종료 상태 즉시 폴링 중단
- 자동 재시도 없음 (실패/타임아웃은 호출측이 다시 시작)
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
"""
import asyncio
import time
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from enum import Enum

import httpx

from saju_console.config import get_settings

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    QUEUED = "queued"         # 대기열
    PROCESSING = "processing" # 처리 중
    COMPLETED = "completed"   # 완료
    FAILED = "failed"         # 실패
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "JobStatus":
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


TERMINAL_STATUSES = {JobStatus.COMPLETED, JobStatus.FAILED}


class JobError(Exception):
    """리포트 Job 오류"""

    def __init__(self, job_id: str, message: str):
        super().__init__(message)
        self.job_id = job_id


class JobFailed(JobError):
    pass


class JobTimeout(JobError):
    pass


@dataclass
class JobProgress:
    job_id: str
    status: JobStatus = JobStatus.QUEUED
    percent: int = 0
    message: str = ""
    result: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @classmethod
    def from_payload(cls, job_id: str, data: Dict[str, Any]) -> "JobProgress":
        if not isinstance(data, dict):
            raise JobFailed(job_id, f"상태 응답 형식 오류: {type(data).__name__}")
        percent = data.get("progress", data.get("percent", 0))
        try:
            percent = int(percent or 0)
        except (TypeError, ValueError):
            percent = 0
        status = JobStatus.parse(data.get("status"))
        if status == JobStatus.COMPLETED:
            percent = 100
        return cls(
            job_id=job_id,
            status=status,
            percent=min(max(percent, 0), 100),
            message=data.get("message") or "",
            result=data.get("result"),
            error_message=data.get("error") or data.get("error_message"),
            raw=data,
        )


ProgressCallback = Callable[[JobProgress], Union[None, Awaitable[None]]]


class ReportJobClient:
    """리포트 생성 API 클라이언트 (start + poll)"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.clean_api_token
        self.http_timeout = settings.http_timeout
        self.poll_interval = settings.job_poll_interval if poll_interval is None else poll_interval
        self.timeout = settings.job_timeout if timeout is None else timeout
        self._transport = transport
        self._sleep = sleep
        self._clock = clock

    def _client(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.http_timeout,
            transport=self._transport,
        )

    async def start(self, kind: str, payload: Dict[str, Any]) -> str:
        """생성 시작 → job_id"""
        async with self._client() as client:
            response = await client.post(f"/api/v1/{kind}/start", json=payload)
            response.raise_for_status()
            data = response.json()

        job_id = data.get("job_id") if isinstance(data, dict) else None
        if not job_id:
            raise JobFailed("", data.get("error", "job_id 없음") if isinstance(data, dict) else "job_id 없음")
        logger.info(f"[ReportJob] 시작: {kind} | job={job_id}")
        return str(job_id)

    async def get_status(self, job_id: str, client: Optional[httpx.AsyncClient] = None) -> JobProgress:
        if client is None:
            async with self._client() as own:
                return await self.get_status(job_id, own)
        response = await client.get(f"/api/v1/jobs/{job_id}/status")
        response.raise_for_status()
        return JobProgress.from_payload(job_id, response.json())

    async def wait(self, job_id: str, on_progress: Optional[ProgressCallback] = None) -> JobProgress:
        """
        종료 상태까지 폴링

        Returns:
            completed 상태의 JobProgress

        Raises:
            JobFailed: failed 상태
            JobTimeout: 타임아웃 (기본 10분)
        """
        deadline = self._clock() + self.timeout
        polls = 0
        async with self._client() as client:
            while True:
                progress = await self.get_status(job_id, client)
                polls += 1

                if progress.status == JobStatus.COMPLETED:
                    logger.info(f"[ReportJob] 완료: job={job_id} | polls={polls}")
                    return progress
                if progress.status == JobStatus.FAILED:
                    logger.warning(f"[ReportJob] 실패: job={job_id} | {progress.error_message}")
                    raise JobFailed(job_id, progress.error_message or "생성 실패")

                if on_progress is not None:
                    maybe = on_progress(progress)
                    if asyncio.iscoroutine(maybe):
                        await maybe

                if self._clock() >= deadline:
                    logger.warning(f"[ReportJob] 타임아웃: job={job_id} | {self.timeout}s")
                    raise JobTimeout(job_id, f"{self.timeout}초 내 완료되지 않음")

                await self._sleep(self.poll_interval)

    async def run(
        self,
        kind: str,
        payload: Dict[str, Any],
        on_progress: Optional[ProgressCallback] = None
    ) -> JobProgress:
        job_id = await self.start(kind, payload)
        return await self.wait(job_id, on_progress)
