"""
HTTP round-trip latency measurement.

Each sample is a cache-bypassing GET of a tiny, highly available resource
timed from request issue to response.  Any HTTP status counts as a
completed round-trip; only transport errors are failures, and those are
replaced with a synthetic value so the phase always yields exactly
``LATENCY_ATTEMPTS`` samples.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import aiohttp

from .constants import LATENCY_ATTEMPTS, LATENCY_URL
from .fallback import resolve_latency
from .models import Attempt
from .stats import calculate_jitter, calculate_mean

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class LatencyResult:
    """Latency samples for one cycle, after fallback substitution."""

    samples: List[float] = field(default_factory=list)
    attempts: List[Attempt] = field(default_factory=list)
    latency_ms: float = 0.0
    jitter_ms: float = 0.0

    @property
    def failures(self) -> int:
        return sum(1 for a in self.attempts if not a.success)

    def calculate(self) -> None:
        """Derive mean latency and jitter (range) from the samples."""
        self.latency_ms = calculate_mean(self.samples)
        self.jitter_ms = calculate_jitter(self.samples)

    def to_dict(self) -> dict:
        return {
            "samples": [round(s, 1) for s in self.samples],
            "latency_ms": round(self.latency_ms, 1),
            "jitter_ms": round(self.jitter_ms, 1),
            "failures": self.failures,
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class LatencyTester:
    """Sequential round-trip timing against a single URL."""

    def __init__(
        self,
        url: str = LATENCY_URL,
        count: int = LATENCY_ATTEMPTS,
        rng: Optional[random.Random] = None,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.url = url
        self.count = count
        self.rng = rng
        self.timer = timer

    async def test(self, session: aiohttp.ClientSession) -> LatencyResult:
        result = LatencyResult()

        for i in range(self.count):
            attempt = await self._ping_once(session)
            if not attempt.success:
                LOGGER.warning("Latency probe %d/%d failed: %s", i + 1, self.count, attempt.error)
            result.attempts.append(attempt)
            result.samples.append(resolve_latency(attempt, self.rng))

        result.calculate()
        LOGGER.debug(
            "Latency phase: mean %.1f ms, jitter %.1f ms (%d substituted)",
            result.latency_ms,
            result.jitter_ms,
            result.failures,
        )
        return result

    async def _ping_once(self, session: aiohttp.ClientSession) -> Attempt:
        """Issue one GET and time it in milliseconds."""
        start = self.timer()
        try:
            async with session.get(self.url) as resp:
                await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            return Attempt.failed(str(exc) or type(exc).__name__)
        return Attempt.ok((self.timer() - start) * 1000)
