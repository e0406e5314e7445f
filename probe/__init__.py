"""Network probe library -- measurement engine, scheduling, history and insights."""

from .download import DownloadResult, DownloadTester
from .engine import ProbeEngine
from .history import HistoryBuffer, HistoryStore
from .insights import (
    HeuristicAnalyzer,
    HttpInsightAnalyzer,
    InsightError,
    InsightService,
    create_insight_service,
)
from .latency import LatencyResult, LatencyTester
from .models import (
    INSUFFICIENT_DATA_INSIGHT,
    UNAVAILABLE_INSIGHT,
    Attempt,
    NetworkInsight,
    SpeedResult,
)
from .scheduler import DisplayFeed, ProbeScheduler
from .stats import calculate_jitter, calculate_mean, format_latency, format_speed, throughput_mbps
from .upload import UploadResult, UploadTester, build_payload, secure_fill

__all__ = [
    "INSUFFICIENT_DATA_INSIGHT",
    "UNAVAILABLE_INSIGHT",
    "Attempt",
    "DisplayFeed",
    "DownloadResult",
    "DownloadTester",
    "HeuristicAnalyzer",
    "HistoryBuffer",
    "HistoryStore",
    "HttpInsightAnalyzer",
    "InsightError",
    "InsightService",
    "LatencyResult",
    "LatencyTester",
    "NetworkInsight",
    "ProbeEngine",
    "ProbeScheduler",
    "SpeedResult",
    "UploadResult",
    "UploadTester",
    "build_payload",
    "calculate_jitter",
    "calculate_mean",
    "create_insight_service",
    "format_latency",
    "format_speed",
    "secure_fill",
    "throughput_mbps",
]
