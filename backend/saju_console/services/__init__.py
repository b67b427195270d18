# services package - HTTP 클라이언트는 lazy import (설정 로드 시점 지연)
from saju_console.services.ganji import EngineError, InvalidPillar, UnknownStem, UnknownBranch

suggestion_client = None
report_job_client = None

def get_suggestion_client():
    global suggestion_client
    if suggestion_client is None:
        from saju_console.services.suggestions import SuggestionClient
        suggestion_client = SuggestionClient()
    return suggestion_client

def get_report_job_client():
    global report_job_client
    if report_job_client is None:
        from saju_console.services.report_jobs import ReportJobClient
        report_job_client = ReportJobClient()
    return report_job_client
