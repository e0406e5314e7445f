"""End-to-end tests for ProbeEngine over fake sessions."""

import math
import random
import unittest
from unittest import mock

from probe.download import DownloadResult, DownloadTester
from probe.engine import ProbeEngine
from probe.latency import LatencyResult, LatencyTester
from probe.models import SpeedResult
from probe.upload import UploadResult, UploadTester
from tests.helpers import FakeResponse, FakeSession, OutageSession, stepping_timer


class TestProbeEngine(unittest.IsolatedAsyncioTestCase):
    async def test_total_outage_still_yields_sample(self):
        engine = ProbeEngine(
            session=OutageSession(),
            latency_tester=LatencyTester(rng=random.Random(11)),
            clock=lambda: 1_700_000_000_000,
        )
        with self.assertLogs("probe", level="WARNING"):
            result = await engine.run()

        self.assertIsInstance(result, SpeedResult)
        self.assertEqual(result.timestamp, 1_700_000_000_000)
        self.assertEqual(result.download, 0.0)
        self.assertEqual(result.upload, 0.0)
        self.assertTrue(20.0 <= result.latency <= 30.0)
        self.assertLessEqual(result.jitter, 10.0)
        for value in (result.download, result.upload, result.latency, result.jitter):
            self.assertTrue(math.isfinite(value))
            self.assertGreaterEqual(value, 0.0)

    async def test_phase_order(self):
        session = FakeSession(default=FakeResponse(body=b"x" * 1024))
        engine = ProbeEngine(session=session)
        await engine.run()

        methods = [call[0] for call in session.calls]
        self.assertEqual(methods, ["GET"] * 8 + ["POST"] * 2)

    async def test_upload_estimate_uses_download(self):
        session = FakeSession(
            get=[FakeResponse()] * 5 + [FakeResponse(body=b"x" * 1_638_400)] * 3,
            post=[FakeResponse(status=500)] * 2,
        )
        timer = stepping_timer(0.125)
        engine = ProbeEngine(
            session=session,
            latency_tester=LatencyTester(timer=timer),
            download_tester=DownloadTester(timer=timer),
            upload_tester=UploadTester(timer=timer),
        )
        with self.assertLogs("probe.upload", level="WARNING"):
            result = await engine.run()

        self.assertAlmostEqual(result.download, 100.0)
        self.assertAlmostEqual(result.upload, 40.0)
        self.assertAlmostEqual(result.latency, 125.0)
        self.assertEqual(result.jitter, 0.0)

    async def test_rounding_of_phase_results(self):
        latency = mock.Mock(spec=LatencyTester)
        latency.test = mock.AsyncMock(
            return_value=LatencyResult(latency_ms=23.456, jitter_ms=4.444)
        )
        download = mock.Mock(spec=DownloadTester)
        download.test = mock.AsyncMock(return_value=DownloadResult(speed_mbps=87.6543))
        upload = mock.Mock(spec=UploadTester)
        upload.test = mock.AsyncMock(return_value=UploadResult(speed_mbps=12.3456))

        session = FakeSession()
        engine = ProbeEngine(
            session=session,
            latency_tester=latency,
            download_tester=download,
            upload_tester=upload,
            clock=lambda: 42,
        )
        result = await engine.run()

        upload.test.assert_awaited_once_with(session, 87.6543)
        self.assertEqual(result, SpeedResult(42, 87.65, 12.35, 23.5, 4.4))


if __name__ == "__main__":
    unittest.main()
