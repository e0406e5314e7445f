"""Tests for probe.config -- configuration persistence and validation."""

import os
import tempfile
import unittest
from unittest import mock

from probe.config import (
    DEFAULTS,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
    validate_config,
)


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("interval_minutes", "history_limit", "insight_window", "insight_url",
                    "insight_timeout", "history_file", "csv_file", "log_level", "log_file"):
            self.assertIn(key, DEFAULTS)

    def test_default_interval_is_ten_minutes(self):
        self.assertEqual(DEFAULTS["interval_minutes"], 10.0)
        self.assertEqual(DEFAULTS["history_limit"], 100)

    def test_defaults_are_valid(self):
        validate_config(dict(DEFAULTS))


class TestLoadSaveConfig(unittest.TestCase):
    def test_load_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("probe.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["history_limit"], 100)
                self.assertEqual(cfg["insight_url"], "")

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("probe.config._config_path", return_value=path):
                save_config({"interval_minutes": 5, "insight_url": "https://insight.test/"})
                cfg = load_config()
                self.assertEqual(cfg["interval_minutes"], 5)
                self.assertEqual(cfg["insight_url"], "https://insight.test/")
                # Defaults still present
                self.assertEqual(cfg["insight_window"], 20)

    def test_corrupt_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            with mock.patch("probe.config._config_path", return_value=path):
                with self.assertLogs("probe.config", level="WARNING"):
                    cfg = load_config()
                self.assertEqual(cfg["history_limit"], 100)

    def test_get_set_value(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("probe.config._config_path", return_value=path):
                set_config_value("log_level", "DEBUG")
                self.assertEqual(get_config_value("log_level"), "DEBUG")


class TestValidateConfig(unittest.TestCase):
    def _config(self, **overrides):
        cfg = dict(DEFAULTS)
        cfg.update(overrides)
        return cfg

    def test_interval_too_small(self):
        with self.assertRaises(ValueError):
            validate_config(self._config(interval_minutes=0.5))

    def test_interval_too_large(self):
        with self.assertRaises(ValueError):
            validate_config(self._config(interval_minutes=2000))

    def test_interval_not_number(self):
        with self.assertRaises(ValueError):
            validate_config(self._config(interval_minutes="ten"))

    def test_history_limit(self):
        with self.assertRaises(ValueError):
            validate_config(self._config(history_limit=0))

    def test_insight_window(self):
        with self.assertRaises(ValueError):
            validate_config(self._config(insight_window=0))

    def test_insight_timeout(self):
        with self.assertRaises(ValueError):
            validate_config(self._config(insight_timeout=0))

    def test_log_level(self):
        with self.assertRaises(ValueError):
            validate_config(self._config(log_level="LOUD"))

    def test_log_level_case_insensitive(self):
        validate_config(self._config(log_level="debug"))


if __name__ == "__main__":
    unittest.main()
