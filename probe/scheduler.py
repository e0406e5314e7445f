"""
Probe scheduling -- manual and interval-driven cycles over one event loop.

The scheduler is Idle or Running.  ``run_now`` starts a cycle only from
Idle; a trigger that arrives while a cycle is in flight (manual or from the
countdown) is dropped, not queued.  The running flag is checked and set
with no ``await`` in between, so on a single event loop no two cycles can
overlap.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Tuple

from .constants import DEFAULT_INTERVAL_SECONDS, TICK_SECONDS
from .engine import ProbeEngine
from .history import HistoryBuffer
from .insights import InsightService
from .models import NetworkInsight, SpeedResult

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisplayFeed:
    """Read-only view handed to the presentation layer."""

    history: Tuple[SpeedResult, ...]
    running: bool
    insight: Optional[NetworkInsight]
    time_remaining: float

    @property
    def latest(self) -> Optional[SpeedResult]:
        return self.history[-1] if self.history else None


CycleListener = Callable[[SpeedResult, DisplayFeed], None]


class ProbeScheduler:
    """Runs the probe engine on demand and every *interval* seconds."""

    def __init__(
        self,
        engine: ProbeEngine,
        history: HistoryBuffer,
        insights: InsightService,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        tick_seconds: float = TICK_SECONDS,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError("Interval must not be negative")
        self.engine = engine
        self.history = history
        self.insights = insights
        self.interval = interval
        self.tick_seconds = tick_seconds
        self.clock = clock
        self.sleep = sleep

        self.running = False
        self.insight: Optional[NetworkInsight] = None
        self.next_run = clock() + interval
        self.time_remaining = float(interval)
        self.cycles = 0
        self._listeners: List[CycleListener] = []

    # -- Listeners ----------------------------------------------------------

    def add_listener(self, listener: CycleListener) -> None:
        self._listeners.append(listener)

    def _notify(self, result: SpeedResult) -> None:
        feed = self.feed()
        for listener in list(self._listeners):
            try:
                listener(result, feed)
            except Exception:
                LOGGER.exception("Cycle listener %r failed", listener)

    # -- Triggers -----------------------------------------------------------

    async def run_now(self) -> Optional[SpeedResult]:
        """
        Run one probe cycle unless one is already running.

        Returns the new sample, or None when the trigger was ignored or the
        engine failed unexpectedly.
        """
        if self.running:
            LOGGER.debug("Cycle already in progress, ignoring trigger")
            return None
        self.running = True

        try:
            try:
                result = await self.engine.run()
            except Exception:
                LOGGER.exception("Probe cycle failed")
                self._rearm()
                return None

            self._rearm()
            snapshot = self.history.append(result)
            self.cycles += 1
            LOGGER.info("History now holds %d sample(s)", len(snapshot))

            self.insight = await self.insights.get_insights(snapshot)
            LOGGER.debug("Insight status: %s", self.insight.status)
        finally:
            self.running = False

        self._notify(result)
        return result

    async def tick(self) -> float:
        """Refresh the countdown and start a cycle when it reaches zero."""
        self.time_remaining = max(0.0, self.next_run - self.clock())
        if self.time_remaining <= 0 and not self.running:
            await self.run_now()
            self.time_remaining = max(0.0, self.next_run - self.clock())
        return self.time_remaining

    async def run_forever(self, stop: Optional[asyncio.Event] = None) -> None:
        """First cycle immediately, then tick until *stop* is set."""
        stop = stop or asyncio.Event()
        LOGGER.info("Scheduler started with interval %.0f s", self.interval)

        await self.run_now()
        while not stop.is_set():
            await self.sleep(self.tick_seconds)
            if stop.is_set():
                break
            await self.tick()

        LOGGER.info("Scheduler stopped after %d cycle(s)", self.cycles)

    # -- State --------------------------------------------------------------

    def _rearm(self) -> None:
        self.next_run = self.clock() + self.interval
        self.time_remaining = float(self.interval)

    def feed(self) -> DisplayFeed:
        return DisplayFeed(
            history=self.history.snapshot(),
            running=self.running,
            insight=self.insight,
            time_remaining=self.time_remaining,
        )
