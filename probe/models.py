"""
Value objects shared by the engine, the scheduler and the insight client.

``SpeedResult`` is the single sample a probe cycle produces,
``NetworkInsight`` is the status/summary/recommendations triple returned by
an analyzer, and ``Attempt`` is the outcome of one network operation.
"""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

# last representable day for datetime, with room for local UTC offsets
MAX_TIMESTAMP_MS = 253_402_214_400_000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _finite(value: float) -> float:
    """Coerce *value* to a finite, non-negative float (0.0 otherwise)."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def epoch_ms() -> int:
    """Wall-clock milliseconds since the epoch."""
    return int(time.time() * 1000)


def _number(data: Dict[str, Any], key: str) -> float:
    """Finite, non-negative number stored under *key*, else ``ValueError``."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Field {key!r} must be a number, got {value!r}")
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise ValueError(f"Field {key!r} must be finite, got {value!r}")
    if value < 0:
        raise ValueError(f"Field {key!r} must not be negative, got {value!r}")
    return value


def _timestamp(data: Dict[str, Any]) -> int:
    timestamp = int(_number(data, "timestamp"))
    if timestamp > MAX_TIMESTAMP_MS:
        raise ValueError(f"Timestamp {timestamp} is out of range")
    return timestamp


# ---------------------------------------------------------------------------
# Attempt
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Attempt:
    """Outcome of a single latency, download or upload request."""

    value: float = 0.0
    success: bool = True
    error: Optional[str] = None

    @classmethod
    def ok(cls, value: float) -> Attempt:
        return cls(value=value, success=True)

    @classmethod
    def failed(cls, error: str) -> Attempt:
        return cls(value=0.0, success=False, error=error)


# ---------------------------------------------------------------------------
# SpeedResult
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SpeedResult:
    """One completed probe cycle."""

    timestamp: int
    download: float
    upload: float
    latency: float
    jitter: float

    @classmethod
    def create(
        cls,
        timestamp: int,
        download: float,
        upload: float,
        latency: float,
        jitter: float,
    ) -> SpeedResult:
        """Build a sample with the canonical rounding applied."""
        return cls(
            timestamp=int(timestamp),
            download=round(_finite(download), 2),
            upload=round(_finite(upload), 2),
            latency=round(_finite(latency), 1),
            jitter=round(_finite(jitter), 1),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SpeedResult:
        if not isinstance(data, dict):
            raise ValueError(f"Expected an object, got {type(data).__name__}")
        return cls(
            timestamp=_timestamp(data),
            download=float(_number(data, "download")),
            upload=float(_number(data, "upload")),
            latency=float(_number(data, "latency")),
            jitter=float(_number(data, "jitter")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "download": self.download,
            "upload": self.upload,
            "latency": self.latency,
            "jitter": self.jitter,
        }


# ---------------------------------------------------------------------------
# NetworkInsight
# ---------------------------------------------------------------------------

INSIGHT_STATUSES = ("excellent", "good", "fair", "poor")


@dataclass(frozen=True)
class NetworkInsight:
    """Qualitative verdict on the recent history."""

    status: str
    summary: str
    recommendations: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Any) -> NetworkInsight:
        """Validate an analyzer payload.  Raises ``ValueError`` if malformed."""
        if not isinstance(data, dict):
            raise ValueError("Insight payload must be a JSON object")

        status = data.get("status")
        if status not in INSIGHT_STATUSES:
            raise ValueError(f"Unknown insight status: {status!r}")

        summary = data.get("summary")
        if not isinstance(summary, str):
            raise ValueError("Insight summary must be a string")

        recs = data.get("recommendations")
        if not isinstance(recs, list) or not all(isinstance(r, str) for r in recs):
            raise ValueError("Insight recommendations must be a list of strings")

        return cls(status=status, summary=summary, recommendations=tuple(recs))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "summary": self.summary,
            "recommendations": list(self.recommendations),
        }


INSUFFICIENT_DATA_INSIGHT = NetworkInsight(
    status="fair",
    summary="Insufficient data to analyze.",
    recommendations=("Keep monitoring to gather trends.",),
)

UNAVAILABLE_INSIGHT = NetworkInsight(
    status="good",
    summary="Unable to connect to AI analyzer at the moment.",
    recommendations=("Verify your ISP plan if speeds seem low.",),
)
