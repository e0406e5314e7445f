"""
Fallback substitution policies.

Each phase recovers from a failed attempt in its own way:

* latency  -- replace the sample with a synthetic value in [20, 30) ms
* download -- count the attempt as 0 and leave it out of the average
* upload   -- estimate from the download average (``download * 0.4``)

Keeping the policies here, apart from the transport code, lets them be
tested without a network.
"""
from __future__ import annotations

import random
from typing import Optional, Sequence

from .constants import (
    SYNTHETIC_LATENCY_MIN,
    SYNTHETIC_LATENCY_SPAN,
    UPLOAD_TO_DOWNLOAD_RATIO,
)
from .models import Attempt


# ---------------------------------------------------------------------------
# Latency
# ---------------------------------------------------------------------------

def synthetic_latency(rng: Optional[random.Random] = None) -> float:
    """Plausible stand-in round-trip time for a failed ping."""
    source = rng if rng is not None else random
    return SYNTHETIC_LATENCY_MIN + source.random() * SYNTHETIC_LATENCY_SPAN


def resolve_latency(attempt: Attempt, rng: Optional[random.Random] = None) -> float:
    if attempt.success:
        return attempt.value
    return synthetic_latency(rng)


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------

def average_download(attempts: Sequence[Attempt]) -> float:
    """
    Mean throughput over the attempts that measured something.

    Failed attempts contribute 0 to the sum and are dropped from the
    denominator; the denominator never goes below 1, so a phase where
    everything failed averages to 0.
    """
    speeds = [a.value if a.success else 0.0 for a in attempts]
    counted = sum(1 for s in speeds if s > 0)
    return sum(speeds) / max(1, counted)


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

def estimate_upload(download_mbps: float) -> float:
    """Upload estimate derived from the measured download speed."""
    return download_mbps * UPLOAD_TO_DOWNLOAD_RATIO


def resolve_upload(attempt: Attempt, download_mbps: float) -> float:
    if attempt.success:
        return attempt.value
    return estimate_upload(download_mbps)
