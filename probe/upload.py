"""
Upload speed test module.

POSTs a fixed 1 MiB payload of random bytes to an echo endpoint.  A failed
POST (transport error or non-2xx status) is replaced with an estimate
derived from the download result.
"""
from __future__ import annotations

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, List

import aiohttp

from .constants import MAX_RANDOM_CHUNK, UPLOAD_ATTEMPTS, UPLOAD_PAYLOAD_SIZE, UPLOAD_URL
from .fallback import resolve_upload
from .models import Attempt
from .stats import calculate_mean, throughput_mbps

LOGGER = logging.getLogger(__name__)

FillRandom = Callable[[memoryview], None]


# ---------------------------------------------------------------------------
# Payload generation
# ---------------------------------------------------------------------------

def secure_fill(buffer: memoryview, max_chunk: int = MAX_RANDOM_CHUNK) -> None:
    """
    Fill *buffer* with cryptographically strong random bytes.

    Like browser ``getRandomValues``, a single call covers at most
    *max_chunk* bytes and raises ``ValueError`` for anything larger.
    """
    if len(buffer) > max_chunk:
        raise ValueError(f"Cannot fill {len(buffer)} bytes in one call (max {max_chunk})")
    buffer[:] = secrets.token_bytes(len(buffer))


def build_payload(
    size: int = UPLOAD_PAYLOAD_SIZE,
    fill_random: FillRandom = secure_fill,
    max_chunk: int = MAX_RANDOM_CHUNK,
) -> bytes:
    """Assemble *size* random bytes in slices no larger than *max_chunk*."""
    if max_chunk <= 0:
        raise ValueError("max_chunk must be positive")

    data = bytearray(size)
    view = memoryview(data)
    for offset in range(0, size, max_chunk):
        fill_random(view[offset:offset + max_chunk])
    return bytes(data)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class UploadResult:
    """Upload phase result, after fallback substitution."""

    attempts: List[Attempt] = field(default_factory=list)
    speeds: List[float] = field(default_factory=list)
    speed_mbps: float = 0.0
    payload_size: int = 0

    @property
    def failures(self) -> int:
        return sum(1 for a in self.attempts if not a.success)

    def calculate(self) -> None:
        self.speed_mbps = calculate_mean(self.speeds)

    def to_dict(self) -> dict:
        return {
            "speed_mbps": round(self.speed_mbps, 2),
            "payload_size": self.payload_size,
            "samples": [round(s, 2) for s in self.speeds],
            "failures": self.failures,
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class UploadTester:
    """Sequential fixed-size POST timing."""

    HEADERS = {"Content-Type": "application/octet-stream"}

    def __init__(
        self,
        url: str = UPLOAD_URL,
        count: int = UPLOAD_ATTEMPTS,
        payload_size: int = UPLOAD_PAYLOAD_SIZE,
        fill_random: FillRandom = secure_fill,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.url = url
        self.count = count
        self.payload_size = payload_size
        self.fill_random = fill_random
        self.timer = timer

    async def test(self, session: aiohttp.ClientSession, download_mbps: float) -> UploadResult:
        """Run the phase; *download_mbps* feeds the failure estimate."""
        payload = build_payload(self.payload_size, self.fill_random)
        result = UploadResult(payload_size=len(payload))

        for i in range(self.count):
            attempt = await self._post_once(session, payload)
            if not attempt.success:
                LOGGER.warning(
                    "Upload %d/%d failed (%s); estimating from download",
                    i + 1,
                    self.count,
                    attempt.error,
                )
            result.attempts.append(attempt)
            result.speeds.append(resolve_upload(attempt, download_mbps))

        result.calculate()
        LOGGER.debug(
            "Upload phase: %.2f Mbps (%d estimated)", result.speed_mbps, result.failures
        )
        return result

    async def _post_once(self, session: aiohttp.ClientSession, payload: bytes) -> Attempt:
        start = self.timer()
        try:
            async with session.post(self.url, data=payload, headers=self.HEADERS) as resp:
                resp.raise_for_status()
                await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            return Attempt.failed(str(exc) or type(exc).__name__)
        return Attempt.ok(throughput_mbps(len(payload), self.timer() - start))
