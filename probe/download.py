"""
Download speed test module.

Fetches a static, publicly cached file a few times in a row, defeating
caches with a ``t=<epoch ms>`` query parameter.  Attempts run one after
another so they never compete for the bandwidth being measured.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import aiohttp

from .constants import DOWNLOAD_ATTEMPTS, DOWNLOAD_URL, READ_CHUNK_SIZE
from .fallback import average_download
from .models import Attempt, epoch_ms
from .stats import throughput_mbps

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class DownloadResult:
    """Download phase result."""

    attempts: List[Attempt] = field(default_factory=list)
    speed_mbps: float = 0.0
    bytes_total: int = 0

    @property
    def successes(self) -> int:
        return sum(1 for a in self.attempts if a.success)

    def calculate(self) -> None:
        self.speed_mbps = average_download(self.attempts)

    def to_dict(self) -> dict:
        return {
            "speed_mbps": round(self.speed_mbps, 2),
            "bytes_total": self.bytes_total,
            "samples": [round(a.value, 2) for a in self.attempts],
            "successes": self.successes,
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class DownloadTester:
    """Sequential whole-file download timing."""

    def __init__(
        self,
        url: str = DOWNLOAD_URL,
        count: int = DOWNLOAD_ATTEMPTS,
        clock: Optional[Callable[[], int]] = None,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.url = url
        self.count = count
        self.clock = clock or epoch_ms
        self.timer = timer

    async def test(self, session: aiohttp.ClientSession) -> DownloadResult:
        result = DownloadResult()

        for i in range(self.count):
            attempt, received = await self._fetch_once(session)
            if attempt.success:
                result.bytes_total += received
            else:
                LOGGER.warning("Download %d/%d failed: %s", i + 1, self.count, attempt.error)
            result.attempts.append(attempt)

        result.calculate()
        LOGGER.debug(
            "Download phase: %.2f Mbps over %d successful attempt(s)",
            result.speed_mbps,
            result.successes,
        )
        return result

    async def _fetch_once(self, session: aiohttp.ClientSession):
        """Download the file once.  Returns ``(attempt, bytes_received)``."""
        params = {"t": str(self.clock())}
        headers = {"Accept-Encoding": "identity"}
        received = 0

        start = self.timer()
        try:
            async with session.get(self.url, params=params, headers=headers) as resp:
                resp.raise_for_status()
                async for chunk in resp.content.iter_chunked(READ_CHUNK_SIZE):
                    received += len(chunk)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            return Attempt.failed(str(exc) or type(exc).__name__), 0

        duration = self.timer() - start
        return Attempt.ok(throughput_mbps(received, duration)), received
