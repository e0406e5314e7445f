"""
Output formatting -- JSON export, plain text, and CSV.
"""
from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from probe.models import NetworkInsight, SpeedResult


def create_result_json(
    result: SpeedResult,
    insight: Optional[NetworkInsight] = None,
) -> Dict[str, Any]:
    """Sample plus optional insight, with an ISO timestamp for readability."""
    data: Dict[str, Any] = result.to_dict()
    data["time"] = datetime.fromtimestamp(result.timestamp / 1000, tz=timezone.utc).isoformat()
    if insight is not None:
        data["insight"] = insight.to_dict()
    return data


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except OSError as exc:
        # Clean up partial temp file
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise IOError(f"Failed to save JSON to {filepath}: {exc}") from exc


# ---------------------------------------------------------------------------
# Plain-text / CSV helpers
# ---------------------------------------------------------------------------

def format_text_result(result: SpeedResult) -> str:
    sep = "=" * 50
    ts = datetime.fromtimestamp(result.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"{sep}\n"
        f"Speed Results ({ts})\n"
        f"{sep}\n"
        f"Latency: {result.latency:.1f} ms (jitter: {result.jitter:.1f} ms)\n"
        f"Download: {result.download:.2f} Mbps\n"
        f"Upload: {result.upload:.2f} Mbps\n"
        f"{sep}"
    )


def format_csv_header() -> str:
    return "timestamp,download_mbps,upload_mbps,latency_ms,jitter_ms"


def format_csv_row(result: SpeedResult) -> str:
    ts = datetime.fromtimestamp(result.timestamp / 1000, tz=timezone.utc).isoformat()
    return f"{ts},{result.download:.2f},{result.upload:.2f},{result.latency:.1f},{result.jitter:.1f}"


def append_csv(path: str, result: SpeedResult) -> None:
    """Append a single CSV row, writing the header if the file is new."""
    write_header = not os.path.isfile(path) or os.path.getsize(path) == 0
    with open(path, "a", encoding="utf-8") as fh:
        if write_header:
            fh.write(format_csv_header() + "\n")
        fh.write(format_csv_row(result) + "\n")
