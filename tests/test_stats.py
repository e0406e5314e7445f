"""Unit tests for probe.stats and probe.fallback -- pure functions."""

import random
import unittest

from probe.fallback import (
    average_download,
    estimate_upload,
    resolve_latency,
    resolve_upload,
    synthetic_latency,
)
from probe.models import Attempt
from probe.stats import (
    calculate_jitter,
    calculate_mean,
    format_latency,
    format_speed,
    throughput_mbps,
)


class TestCalculateMean(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(calculate_mean([]), 0.0)

    def test_values(self):
        self.assertAlmostEqual(calculate_mean([10.0, 20.0, 15.0, 25.0, 12.0]), 16.4)


class TestCalculateJitter(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(calculate_jitter([]), 0.0)

    def test_single(self):
        self.assertEqual(calculate_jitter([10.0]), 0.0)

    def test_range(self):
        # max - min, not the consecutive-difference method
        self.assertAlmostEqual(calculate_jitter([10.0, 15.0, 10.0, 20.0]), 10.0)

    def test_constant(self):
        self.assertAlmostEqual(calculate_jitter([5.0, 5.0, 5.0]), 0.0)


class TestThroughput(unittest.TestCase):
    def test_binary_megabits(self):
        # 1 MiB in one second is 8 Mbps
        self.assertAlmostEqual(throughput_mbps(1024 * 1024, 1.0), 8.0)

    def test_hundred_mbps(self):
        self.assertAlmostEqual(throughput_mbps(1_638_400, 0.125), 100.0)

    def test_zero_duration(self):
        self.assertEqual(throughput_mbps(1000, 0), 0.0)

    def test_zero_bytes(self):
        self.assertEqual(throughput_mbps(0, 1.0), 0.0)


class TestFormatting(unittest.TestCase):
    def test_mbps(self):
        self.assertEqual(format_speed(50.0), "50.00 Mbps")

    def test_gbps(self):
        self.assertEqual(format_speed(1500.0), "1.50 Gbps")

    def test_latency_ms(self):
        self.assertEqual(format_latency(25.3), "25.3 ms")

    def test_latency_seconds(self):
        self.assertEqual(format_latency(1500.0), "1.50 s")


class TestLatencyFallback(unittest.TestCase):
    def test_synthetic_range(self):
        rng = random.Random(7)
        for _ in range(500):
            value = synthetic_latency(rng)
            self.assertGreaterEqual(value, 20.0)
            self.assertLess(value, 30.0)

    def test_default_rng(self):
        value = synthetic_latency()
        self.assertTrue(20.0 <= value < 30.0)

    def test_success_passes_through(self):
        self.assertEqual(resolve_latency(Attempt.ok(42.0)), 42.0)

    def test_failure_substituted(self):
        value = resolve_latency(Attempt.failed("boom"), random.Random(1))
        self.assertTrue(20.0 <= value < 30.0)


class TestDownloadFallback(unittest.TestCase):
    def test_all_failed_is_zero(self):
        attempts = [Attempt.failed("x")] * 3
        self.assertEqual(average_download(attempts), 0.0)

    def test_single_success_not_diluted(self):
        attempts = [Attempt.failed("x"), Attempt.ok(100.0), Attempt.failed("y")]
        self.assertAlmostEqual(average_download(attempts), 100.0)

    def test_all_succeed(self):
        attempts = [Attempt.ok(10.0), Attempt.ok(20.0), Attempt.ok(30.0)]
        self.assertAlmostEqual(average_download(attempts), 20.0)

    def test_two_of_three(self):
        attempts = [Attempt.ok(40.0), Attempt.failed("x"), Attempt.ok(60.0)]
        self.assertAlmostEqual(average_download(attempts), 50.0)

    def test_empty(self):
        self.assertEqual(average_download([]), 0.0)


class TestUploadFallback(unittest.TestCase):
    def test_estimate(self):
        self.assertAlmostEqual(estimate_upload(100.0), 40.0)

    def test_estimate_from_zero(self):
        self.assertEqual(estimate_upload(0.0), 0.0)

    def test_success_passes_through(self):
        self.assertEqual(resolve_upload(Attempt.ok(12.0), 100.0), 12.0)

    def test_failure_estimated(self):
        self.assertAlmostEqual(resolve_upload(Attempt.failed("403"), 50.0), 20.0)


if __name__ == "__main__":
    unittest.main()
