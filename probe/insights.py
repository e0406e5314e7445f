"""
Network insight collaborator.

An *analyzer* is any coroutine function taking ``(history, latest)`` and
returning a :class:`~probe.models.NetworkInsight` (or a dict with the same
shape).  :class:`InsightService` wraps an analyzer and guarantees a usable
triple: empty history short-circuits to the "insufficient data" default,
and any analyzer failure degrades to the "unable to connect" default.
"""
from __future__ import annotations

import asyncio
import json
import logging
import statistics
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import aiohttp

from .constants import COMMON_HEADERS, INSIGHT_WINDOW
from .grading import grade_connection
from .models import (
    INSUFFICIENT_DATA_INSIGHT,
    UNAVAILABLE_INSIGHT,
    NetworkInsight,
    SpeedResult,
)

LOGGER = logging.getLogger(__name__)

Analyzer = Callable[[Sequence[SpeedResult], SpeedResult], Awaitable[Any]]


class InsightError(RuntimeError):
    """The analyzer could not be reached or returned unusable content."""


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

def build_prompt(history: Sequence[SpeedResult], latest: SpeedResult) -> str:
    """Instruction text sent along with the history payload."""
    return (
        "Analyze the following internet speed history and provide insights.\n"
        f"History: {json.dumps([r.to_dict() for r in history])}\n"
        f"Current speed: {latest.download} Mbps Download, {latest.upload} Mbps Upload.\n\n"
        "Please evaluate the stability, consistency, and potential issues.\n"
        "Consider time of day patterns if multiple timestamps are present.\n"
        'Reply with a JSON object: {"status": "excellent|good|fair|poor", '
        '"summary": "...", "recommendations": ["..."]}'
    )


# ---------------------------------------------------------------------------
# Analyzers
# ---------------------------------------------------------------------------

class HttpInsightAnalyzer:
    """POST the history to a remote text-analysis endpoint as JSON."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._session = session

    async def __call__(self, history: Sequence[SpeedResult], latest: SpeedResult) -> NetworkInsight:
        body = {
            "history": [r.to_dict() for r in history],
            "latest": latest.to_dict(),
            "prompt": build_prompt(history, latest),
        }

        if self._session is not None:
            return await self._post(self._session, body)

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(headers=COMMON_HEADERS, timeout=timeout) as session:
            return await self._post(session, body)

    async def _post(self, session: aiohttp.ClientSession, body: Dict[str, Any]) -> NetworkInsight:
        try:
            async with session.post(self.url, json=body) as resp:
                if resp.status >= 400:
                    raise InsightError(f"Analyzer returned HTTP {resp.status}")
                text = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            raise InsightError(f"Analyzer unreachable: {exc}") from exc

        if not text or not text.strip():
            raise InsightError("No text response received from analyzer")

        try:
            payload = json.loads(text.strip())
        except json.JSONDecodeError as exc:
            raise InsightError(f"Analyzer returned non-JSON content: {exc}") from exc

        try:
            return NetworkInsight.from_dict(payload)
        except ValueError as exc:
            raise InsightError(str(exc)) from exc


class HeuristicAnalyzer:
    """Offline analyzer used when no remote endpoint is configured."""

    async def __call__(self, history: Sequence[SpeedResult], latest: SpeedResult) -> NetworkInsight:
        return analyze_locally(history, latest)


def analyze_locally(history: Sequence[SpeedResult], latest: SpeedResult) -> NetworkInsight:
    """Rule-based status, summary and recommendations."""
    downloads = [r.download for r in history] or [latest.download]
    avg_download = statistics.mean(downloads)
    avg_jitter = statistics.mean(r.jitter for r in history) if history else latest.jitter
    status = grade_connection(avg_download, avg_jitter)

    spread = 0.0
    if len(downloads) >= 2 and avg_download > 0:
        spread = statistics.pstdev(downloads) / avg_download

    stability = "stable" if spread < 0.25 else "inconsistent"
    summary = (
        f"Average download {avg_download:.2f} Mbps over {len(downloads)} test(s); "
        f"latest {latest.download:.2f} Mbps down / {latest.upload:.2f} Mbps up "
        f"with {latest.latency:.1f} ms latency. Throughput looks {stability}."
    )

    recommendations: List[str] = []
    if spread >= 0.25:
        recommendations.append("Speeds vary a lot between tests; check for competing traffic or Wi-Fi interference.")
    if latest.latency > 100:
        recommendations.append("Latency is high; try a wired connection or a closer DNS resolver.")
    if avg_jitter > 30:
        recommendations.append("Jitter is elevated; real-time calls and gaming may stutter.")
    if latest.download > 0 and latest.upload < latest.download * 0.1:
        recommendations.append("Upload is far below download; confirm your plan's upload tier.")
    if not recommendations:
        recommendations.append("Connection looks healthy; keep monitoring for changes.")

    return NetworkInsight(status=status, summary=summary, recommendations=tuple(recommendations))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class InsightService:
    """Feeds the recent history to an analyzer and never fails."""

    def __init__(self, analyzer: Optional[Analyzer] = None, window: int = INSIGHT_WINDOW) -> None:
        self.analyzer = analyzer or HeuristicAnalyzer()
        self.window = window

    async def get_insights(self, history: Sequence[SpeedResult]) -> NetworkInsight:
        if not history:
            return INSUFFICIENT_DATA_INSIGHT

        recent = list(history)[-self.window:]
        latest = recent[-1]

        try:
            reply = await self.analyzer(recent, latest)
            if isinstance(reply, NetworkInsight):
                return reply
            return NetworkInsight.from_dict(reply)
        except (InsightError, ValueError) as exc:
            LOGGER.warning("Insight analyzer failed: %s", exc)
        except Exception:
            LOGGER.exception("Insight analyzer raised unexpectedly")
        return UNAVAILABLE_INSIGHT


def create_insight_service(url: str = "", timeout: float = 30.0, window: int = INSIGHT_WINDOW) -> InsightService:
    """Remote analyzer when *url* is set, otherwise the local heuristics."""
    analyzer: Analyzer = HttpInsightAnalyzer(url, timeout=timeout) if url else HeuristicAnalyzer()
    return InsightService(analyzer=analyzer, window=window)
