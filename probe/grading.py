"""
Connection grading and comparison helpers.

Maps measured speeds onto the insight status scale, and computes deltas
against the previous sample.
"""
from __future__ import annotations

from typing import Dict, Optional, Sequence

from .models import SpeedResult


# ---------------------------------------------------------------------------
# Grading
# ---------------------------------------------------------------------------

# (minimum download Mbps, maximum jitter ms, status)
_THRESHOLDS = [
    (100.0, 10.0, "excellent"),
    (25.0,  30.0, "good"),
    (5.0,   80.0, "fair"),
    (0.0,   float("inf"), "poor"),
]

STATUS_COLORS = {
    "excellent": "green",
    "good": "blue",
    "fair": "yellow",
    "poor": "red",
}


def grade_connection(download_mbps: float, jitter_ms: float) -> str:
    """Return the best status whose download floor and jitter ceiling both hold."""
    for min_download, max_jitter, status in _THRESHOLDS:
        if download_mbps >= min_download and jitter_ms <= max_jitter:
            return status
    return "poor"


# ---------------------------------------------------------------------------
# Delta comparison
# ---------------------------------------------------------------------------

def compare_with_previous(
    current: SpeedResult,
    history: Sequence[SpeedResult],
) -> Optional[Dict[str, float]]:
    """
    Compare *current* with the most recent entry in *history* that is not
    *current* itself.

    Returns a dict with delta values, or None if there is nothing to compare.
    Keys: latency_delta, download_delta, upload_delta (native units).
    """
    previous = list(history)
    if previous and previous[-1] == current:
        previous.pop()
    if not previous:
        return None

    prev = previous[-1]
    return {
        "latency_delta": current.latency - prev.latency,
        "download_delta": current.download - prev.download,
        "upload_delta": current.upload - prev.upload,
        "prev_latency": prev.latency,
        "prev_download": prev.download,
        "prev_upload": prev.upload,
    }


def format_delta(value: float, unit: str, invert: bool = False) -> str:
    """
    Format a delta value with a +/- prefix and color hint.

    *invert*: True for metrics where lower is better (latency).
    """
    if abs(value) < 0.01:
        return "[dim](same)[/dim]"

    sign = "+" if value > 0 else ""
    # For latency, negative is good; for speed, positive is good
    is_good = (value < 0) if invert else (value > 0)
    color = "green" if is_good else "red"

    return f"[{color}]{sign}{value:.1f} {unit}[/{color}]"
