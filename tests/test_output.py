"""Tests for ui.output and ui.dashboard -- JSON, text, CSV and rendering."""

import io
import json
import os
import tempfile
import unittest
from unittest import mock

from rich.console import Console

from probe.models import NetworkInsight, SpeedResult
from probe.scheduler import DisplayFeed
from ui.dashboard import (
    build_dashboard,
    build_insight_panel,
    build_status_panel,
    format_time_remaining,
    print_history,
    print_hourly,
)
from ui.output import (
    append_csv,
    create_result_json,
    format_csv_header,
    format_csv_row,
    format_text_result,
    save_json,
)

SAMPLE = SpeedResult.create(1_700_000_000_000, 93.456, 21.2, 18.34, 4.2)
INSIGHT = NetworkInsight("good", "Solid.", ("Keep going.",))


def _render(renderable):
    out = io.StringIO()
    Console(file=out, width=100, color_system=None).print(renderable)
    return out.getvalue()


class TestResultJson(unittest.TestCase):
    def test_fields(self):
        data = create_result_json(SAMPLE)
        self.assertEqual(data["download"], 93.46)
        self.assertEqual(data["timestamp"], 1_700_000_000_000)
        self.assertTrue(data["time"].startswith("2023-11-14T22:13:20"))
        self.assertNotIn("insight", data)

    def test_with_insight(self):
        data = create_result_json(SAMPLE, INSIGHT)
        self.assertEqual(data["insight"]["status"], "good")
        self.assertEqual(data["insight"]["recommendations"], ["Keep going."])

    def test_serializable(self):
        json.dumps(create_result_json(SAMPLE, INSIGHT))

    def test_save_json(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "result.json")
            save_json(create_result_json(SAMPLE), path)
            with open(path, encoding="utf-8") as fh:
                self.assertEqual(json.load(fh)["upload"], 21.2)


class TestTextAndCsv(unittest.TestCase):
    def test_text(self):
        text = format_text_result(SAMPLE)
        self.assertIn("Download: 93.46 Mbps", text)
        self.assertIn("Latency: 18.3 ms (jitter: 4.2 ms)", text)

    def test_csv_row(self):
        row = format_csv_row(SAMPLE)
        self.assertEqual(row.split(",")[1:], ["93.46", "21.20", "18.3", "4.2"])
        self.assertEqual(len(row.split(",")), len(format_csv_header().split(",")))

    def test_append_csv_writes_header_once(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "log.csv")
            append_csv(path, SAMPLE)
            append_csv(path, SAMPLE)
            with open(path, encoding="utf-8") as fh:
                lines = fh.read().splitlines()
        self.assertEqual(lines[0], format_csv_header())
        self.assertEqual(len(lines), 3)


class TestDashboard(unittest.TestCase):
    def test_time_remaining(self):
        self.assertEqual(format_time_remaining(0), "0:00")
        self.assertEqual(format_time_remaining(605), "10:05")
        self.assertEqual(format_time_remaining(-3), "0:00")

    def test_empty_feed(self):
        feed = DisplayFeed(history=(), running=False, insight=None, time_remaining=600)
        text = _render(build_dashboard(feed))
        self.assertIn("Waiting for first measurement", text)
        self.assertIn("10:00", text)
        self.assertIn("No analysis yet", text)

    def test_running_feed(self):
        feed = DisplayFeed(history=(SAMPLE,), running=True, insight=INSIGHT, time_remaining=0)
        text = _render(build_status_panel(feed))
        self.assertIn("Testing...", text)
        self.assertIn("93.46 Mbps", text)

    def test_delta_row(self):
        prev = SpeedResult.create(1, 80.0, 20.0, 25.0, 3.0)
        feed = DisplayFeed(history=(prev, SAMPLE), running=False, insight=None, time_remaining=5)
        self.assertIn("vs last", _render(build_status_panel(feed)))

    def test_insight_panel(self):
        text = _render(build_insight_panel(INSIGHT))
        self.assertIn("GOOD", text)
        self.assertIn("Keep going.", text)

    def test_print_history_shows_average(self):
        out = io.StringIO()
        with mock.patch("ui.dashboard.console", Console(file=out, width=120, color_system=None)):
            print_history([SAMPLE, SpeedResult.create(1_700_000_600_000, 6.544, 0.8, 21.66, 1.0)])
        text = out.getvalue()
        self.assertIn("Average over 2 test(s)", text)
        self.assertIn("50.00 Mbps", text)

    def test_print_history_empty(self):
        with mock.patch("ui.dashboard.console") as console:
            print_history([])
            print_hourly([])
        self.assertEqual(console.print.call_count, 2)


if __name__ == "__main__":
    unittest.main()
