"""
User configuration file support.

Reads/writes ``~/.omnispeed/config.json``.

Supported keys::

    interval_minutes = 10      # minutes between scheduled cycles
    history_limit = 100        # samples kept in history
    insight_window = 20        # most recent samples sent to the analyzer
    insight_url = ""           # remote analyzer endpoint ("" = local heuristics)
    insight_timeout = 30.0     # seconds
    history_file = ""          # override for ~/.omnispeed/history.json
    csv_file = ""              # auto-append CSV path
    log_level = "INFO"
    log_file = ""              # rotating log file ("" = console only)
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .constants import (
    MAX_HISTORY_LIMIT,
    MAX_INTERVAL_MINUTES,
    MIN_HISTORY_LIMIT,
    MIN_INTERVAL_MINUTES,
)

LOGGER = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(Path.home(), ".omnispeed")
_CONFIG_FILE = "config.json"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "interval_minutes": 10.0,
    "history_limit": 100,
    "insight_window": 20,
    "insight_url": "",
    "insight_timeout": 30.0,
    "history_file": "",
    "csv_file": "",
    "log_level": "INFO",
    "log_file": "",
}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
        if isinstance(user, dict):
            config.update(user)
    except (json.JSONDecodeError, IOError) as exc:
        LOGGER.warning("Ignoring corrupt config file %s: %s", path, exc)

    return config


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path


def get_config_value(key: str) -> Any:
    """Get a single config value."""
    return load_config().get(key, DEFAULTS.get(key))


def set_config_value(key: str, value: Any) -> str:
    """Set a single config value and persist.  Returns file path."""
    config = load_config()
    config[key] = value
    return save_config(config)


def config_path() -> str:
    """Return the config file path (for display purposes)."""
    return _config_path()


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_config(config: Dict[str, Any]) -> None:
    """Raise ``ValueError`` if any value is out of range."""
    interval = config.get("interval_minutes")
    if not isinstance(interval, (int, float)) or not MIN_INTERVAL_MINUTES <= interval <= MAX_INTERVAL_MINUTES:
        raise ValueError(
            f"Interval must be between {MIN_INTERVAL_MINUTES:.0f} and {MAX_INTERVAL_MINUTES:.0f} minutes"
        )

    limit = config.get("history_limit")
    if not isinstance(limit, int) or not MIN_HISTORY_LIMIT <= limit <= MAX_HISTORY_LIMIT:
        raise ValueError(f"History limit must be between {MIN_HISTORY_LIMIT} and {MAX_HISTORY_LIMIT}")

    window = config.get("insight_window")
    if not isinstance(window, int) or window < 1:
        raise ValueError("Insight window must be a positive integer")

    timeout = config.get("insight_timeout")
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError("Insight timeout must be positive")

    level = str(config.get("log_level", "")).upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}")
