"""
Network measurement statistics.

Pure functions -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from typing import Sequence

from .constants import BITS_PER_MEGABIT


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def calculate_mean(samples: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for no samples."""
    if not samples:
        return 0.0
    return statistics.mean(samples)


def calculate_jitter(samples: Sequence[float]) -> float:
    """Spread of the samples: max minus min."""
    if len(samples) < 2:
        return 0.0
    return max(samples) - min(samples)


def throughput_mbps(bytes_transferred: int, duration_seconds: float) -> float:
    """Megabits per second for *bytes_transferred* over *duration_seconds*."""
    if duration_seconds <= 0 or bytes_transferred <= 0:
        return 0.0
    return (bytes_transferred * 8) / BITS_PER_MEGABIT / duration_seconds


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float) -> str:
    """Human-readable speed string."""
    if speed_mbps >= 1000:
        return f"{speed_mbps / 1000:.2f} Gbps"
    return f"{speed_mbps:.2f} Mbps"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms:.1f} ms"
