"""
Bounded measurement history, its durable store, and display helpers.

The in-memory :class:`HistoryBuffer` is the single owner of past samples.
Every append swaps in a new, already-trimmed tuple, so readers always see
either the old or the new history, never something in between.

:class:`HistoryStore` keeps a copy in ``~/.omnispeed/history.json``.  The
file holds a JSON array of ``SpeedResult`` objects, oldest first, and is
rewritten atomically (write-tmp then rename) on every change.
"""
from __future__ import annotations

import json
import logging
import os
import statistics
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import HISTORY_LIMIT
from .models import SpeedResult

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

_DEFAULT_DIR = os.path.join(Path.home(), ".omnispeed")
_DEFAULT_FILE = "history.json"


def _history_path() -> str:
    return os.path.join(_DEFAULT_DIR, _DEFAULT_FILE)


# ---------------------------------------------------------------------------
# Durable store
# ---------------------------------------------------------------------------

class HistoryStore:
    """JSON file holding the most recent *limit* samples."""

    def __init__(self, path: Optional[str] = None, limit: int = HISTORY_LIMIT) -> None:
        self.path = path or _history_path()
        self.limit = limit

    def load(self) -> List[SpeedResult]:
        """Return the persisted history, or ``[]`` if absent or unreadable."""
        if not os.path.isfile(self.path):
            return []

        try:
            with open(self.path, encoding="utf-8") as fh:
                raw = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            LOGGER.warning("Ignoring unreadable history file %s: %s", self.path, exc)
            return []

        if not isinstance(raw, list):
            LOGGER.warning("Ignoring history file %s: expected a list", self.path)
            return []

        results: List[SpeedResult] = []
        for entry in raw:
            try:
                results.append(SpeedResult.from_dict(entry))
            except ValueError as exc:
                LOGGER.debug("Skipping corrupt history entry %r: %s", entry, exc)

        results.sort(key=lambda r: r.timestamp)
        return results[-self.limit:]

    def save(self, results: Sequence[SpeedResult]) -> bool:
        """Write *results* atomically.  Returns False if the write failed."""
        directory = os.path.dirname(self.path) or "."
        tmp = os.path.join(directory, f".tmp_{os.path.basename(self.path)}")
        payload = [r.to_dict() for r in list(results)[-self.limit:]]

        try:
            os.makedirs(directory, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False)
            os.replace(tmp, self.path)
        except OSError as exc:
            LOGGER.error("Failed to save history to %s: %s", self.path, exc)
            try:
                os.unlink(tmp)
            except OSError:
                pass
            return False
        return True


# ---------------------------------------------------------------------------
# In-memory buffer
# ---------------------------------------------------------------------------

class HistoryBuffer:
    """Time-ordered, bounded sequence of samples."""

    def __init__(
        self,
        limit: int = HISTORY_LIMIT,
        initial: Iterable[SpeedResult] = (),
        store: Optional[HistoryStore] = None,
    ) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self.store = store
        self._lock = threading.Lock()
        ordered = sorted(initial, key=lambda r: r.timestamp)
        self._entries: Tuple[SpeedResult, ...] = tuple(ordered[-limit:])

    @classmethod
    def from_store(cls, store: HistoryStore, limit: int = HISTORY_LIMIT) -> HistoryBuffer:
        """Rehydrate from *store*; an unreadable file yields an empty buffer."""
        return cls(limit=limit, initial=store.load(), store=store)

    def append(self, result: SpeedResult) -> Tuple[SpeedResult, ...]:
        """Add *result*, evicting the oldest entries past the limit."""
        with self._lock:
            entries = (self._entries + (result,))[-self.limit:]
            self._entries = entries
            if self.store is not None:
                self.store.save(entries)
        return entries

    def snapshot(self) -> Tuple[SpeedResult, ...]:
        return self._entries

    @property
    def latest(self) -> Optional[SpeedResult]:
        entries = self._entries
        return entries[-1] if entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def format_history_table(results: Sequence[SpeedResult]) -> List[dict]:
    """
    Flatten samples into rows for tabular display.  Each row has:
    timestamp, download, upload, latency, jitter.
    """
    rows = []
    for r in results:
        ts = datetime.fromtimestamp(r.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
        rows.append({
            "timestamp": ts,
            "download": r.download,
            "upload": r.upload,
            "latency": r.latency,
            "jitter": r.jitter,
        })
    return rows


def sparkline(values: List[float]) -> str:
    """Single-line Unicode sparkline chart."""
    if not values:
        return ""
    bars = "▁▂▃▄▅▆▇█"
    lo, hi = min(values), max(values)
    span = hi - lo if hi > lo else 1.0
    return "".join(
        bars[min(int((v - lo) / span * (len(bars) - 1)), len(bars) - 1)]
        for v in values
    )


def summarize(results: Sequence[SpeedResult]) -> Dict[str, float]:
    """Mean of each metric over *results* plus the sample count."""
    if not results:
        return {"count": 0, "download": 0.0, "upload": 0.0, "latency": 0.0, "jitter": 0.0}
    return {
        "count": len(results),
        "download": statistics.mean(r.download for r in results),
        "upload": statistics.mean(r.upload for r in results),
        "latency": statistics.mean(r.latency for r in results),
        "jitter": statistics.mean(r.jitter for r in results),
    }


# ---------------------------------------------------------------------------
# Time-of-day analysis
# ---------------------------------------------------------------------------

def group_by_hour(results: Sequence[SpeedResult]) -> Dict[int, Dict[str, List[float]]]:
    """
    Group samples by local hour-of-day (0-23).

    Returns ``{hour: {"download": [...], "upload": [...], "latency": [...]}}``.
    """
    buckets: Dict[int, Dict[str, List[float]]] = {}

    for r in results:
        try:
            hour = datetime.fromtimestamp(r.timestamp / 1000).hour
        except (OverflowError, OSError, ValueError):
            continue

        bucket = buckets.setdefault(hour, {"download": [], "upload": [], "latency": []})
        bucket["download"].append(r.download)
        bucket["upload"].append(r.upload)
        bucket["latency"].append(r.latency)

    return buckets


def format_hourly_summary(buckets: Dict[int, Dict[str, List[float]]]) -> List[Dict[str, Any]]:
    """Format hourly buckets into rows with averages."""
    rows = []
    for hour in sorted(buckets.keys()):
        data = buckets[hour]
        rows.append({
            "hour": f"{hour:02d}:00",
            "tests": len(data["download"]),
            "avg_download": statistics.mean(data["download"]) if data["download"] else 0,
            "avg_upload": statistics.mean(data["upload"]) if data["upload"] else 0,
            "avg_latency": statistics.mean(data["latency"]) if data["latency"] else 0,
        })
    return rows
