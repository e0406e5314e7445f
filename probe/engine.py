"""
Probe engine -- one complete measurement cycle.

Latency, download and upload phases run strictly one after another over a
shared ``aiohttp.ClientSession``.  Every phase absorbs its own network
failures, so :meth:`ProbeEngine.run` always returns a complete
:class:`~probe.models.SpeedResult`.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

import aiohttp

from .constants import COMMON_HEADERS
from .download import DownloadTester
from .latency import LatencyTester
from .models import SpeedResult, epoch_ms
from .upload import UploadTester

LOGGER = logging.getLogger(__name__)


class ProbeEngine:
    """
    Runs latency -> download -> upload and assembles the sample.

    If *session* is given it is used as-is and left open; otherwise a
    session is created for the duration of each cycle.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        latency_tester: Optional[LatencyTester] = None,
        download_tester: Optional[DownloadTester] = None,
        upload_tester: Optional[UploadTester] = None,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self._session = session
        self.latency_tester = latency_tester or LatencyTester()
        self.download_tester = download_tester or DownloadTester()
        self.upload_tester = upload_tester or UploadTester()
        self.clock = clock

    async def run(self) -> SpeedResult:
        if self._session is not None:
            return await self._run_phases(self._session)

        async with aiohttp.ClientSession(headers=COMMON_HEADERS) as session:
            return await self._run_phases(session)

    async def _run_phases(self, session: aiohttp.ClientSession) -> SpeedResult:
        LOGGER.debug("Probe cycle started")

        latency = await self.latency_tester.test(session)
        download = await self.download_tester.test(session)
        upload = await self.upload_tester.test(session, download.speed_mbps)

        result = SpeedResult.create(
            timestamp=self.clock(),
            download=download.speed_mbps,
            upload=upload.speed_mbps,
            latency=latency.latency_ms,
            jitter=latency.jitter_ms,
        )
        LOGGER.info(
            "Probe cycle complete: down %.2f Mbps / up %.2f Mbps / ping %.1f ms / jitter %.1f ms",
            result.download,
            result.upload,
            result.latency,
            result.jitter,
        )
        return result

