#!/usr/bin/env python3
"""
OmniSpeed monitor -- continuous network performance probing from the terminal.

Usage::

    python monitor.py                      # live dashboard, test every 10 min
    python monitor.py --interval 5         # test every 5 minutes
    python monitor.py --once               # single cycle, rich output
    python monitor.py --once --json        # single cycle, JSON to stdout
    python monitor.py --once --simple      # single cycle, plain text
    python monitor.py --once -o out.json   # single cycle, save JSON to a file
    python monitor.py --history            # show stored results
    python monitor.py --hourly             # time-of-day averages
    python monitor.py --csv log.csv        # append a CSV row per cycle
    python monitor.py --insight-url URL    # remote analyzer endpoint
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

from rich.console import Console

from probe.config import load_config, validate_config
from probe.engine import ProbeEngine
from probe.history import HistoryBuffer, HistoryStore, format_hourly_summary, group_by_hour
from probe.insights import create_insight_service
from probe.logging_setup import configure_logging
from probe.models import SpeedResult
from probe.scheduler import DisplayFeed, ProbeScheduler
from ui.dashboard import (
    LiveDashboard,
    console,
    print_header,
    print_history,
    print_hourly,
    print_insight,
    print_result,
)
from ui.output import append_csv, create_result_json, format_text_result, save_json

LOGGER = logging.getLogger("monitor")

_REFRESH_SECONDS = 0.5


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------

def build_scheduler(config: Dict[str, Any]) -> ProbeScheduler:
    """Assemble engine, history and insight service from *config*."""
    store = HistoryStore(path=config["history_file"] or None, limit=config["history_limit"])
    history = HistoryBuffer.from_store(store, limit=config["history_limit"])
    LOGGER.info("Loaded %d sample(s) from %s", len(history), store.path)

    insights = create_insight_service(
        url=config["insight_url"],
        timeout=config["insight_timeout"],
        window=config["insight_window"],
    )
    return ProbeScheduler(
        engine=ProbeEngine(),
        history=history,
        insights=insights,
        interval=config["interval_minutes"] * 60,
    )


def _csv_listener(path: str):
    def _append(result: SpeedResult, feed: DisplayFeed) -> None:
        append_csv(path, result)
        LOGGER.debug("CSV row appended to %s", path)
    return _append


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------

async def run_once(
    config: Dict[str, Any],
    *,
    json_output: bool = False,
    simple: bool = False,
    output_file: Optional[str] = None,
) -> Optional[dict]:
    """Run a single cycle through the scheduler and print the outcome."""
    scheduler = build_scheduler(config)
    if config["csv_file"]:
        scheduler.add_listener(_csv_listener(config["csv_file"]))

    show_ui = not json_output and not simple
    if show_ui:
        print_header()
        with console.status("[bold]Measuring latency, download and upload...[/bold]"):
            result = await scheduler.run_now()
    else:
        result = await scheduler.run_now()

    if result is None:
        return None

    result_json = create_result_json(result, scheduler.insight)
    if json_output:
        print(json.dumps(result_json, indent=2))
    elif simple:
        print(format_text_result(result))
    else:
        print_result(result)
        if scheduler.insight is not None:
            print_insight(scheduler.insight)

    if output_file:
        save_json(result_json, output_file)
        if not json_output:
            console.print(f"\n[green]Results saved to:[/green] {output_file}")
    return result_json


async def run_monitor(config: Dict[str, Any]) -> None:
    """Live dashboard driven by the scheduler until interrupted."""
    scheduler = build_scheduler(config)
    if config["csv_file"]:
        scheduler.add_listener(_csv_listener(config["csv_file"]))

    dashboard = LiveDashboard()
    stop = asyncio.Event()

    async def _refresh() -> None:
        while not stop.is_set():
            dashboard.update(scheduler.feed())
            await asyncio.sleep(_REFRESH_SECONDS)

    dashboard.start(scheduler.feed())
    refresher = asyncio.create_task(_refresh())
    try:
        await scheduler.run_forever(stop)
    finally:
        stop.set()
        refresher.cancel()
        try:
            await refresher
        except asyncio.CancelledError:
            pass
        dashboard.stop()


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _apply_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    overrides = {
        "interval_minutes": args.interval,
        "insight_url": args.insight_url,
        "history_file": args.history_file,
        "csv_file": args.csv,
        "log_level": args.log_level,
        "log_file": args.log_file,
    }
    merged = dict(config)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="OmniSpeed -- continuous network performance monitor",
    )
    # Modes
    parser.add_argument("--once", action="store_true", help="Run a single test cycle and exit")
    parser.add_argument("--history", action="store_true", help="Show stored results and exit")
    parser.add_argument("--hourly", action="store_true", help="Show time-of-day averages and exit")

    # Output
    parser.add_argument("--json", "-j", action="store_true", help="Output the --once result as JSON")
    parser.add_argument("--simple", "-s", action="store_true", help="Plain text output for --once")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save the --once result to a JSON file")
    parser.add_argument("--csv", type=str, metavar="FILE", help="Append each result as a CSV row")

    # Scheduling / collaborators
    parser.add_argument("--interval", type=float, metavar="MINUTES", help="Minutes between tests (default: 10)")
    parser.add_argument("--insight-url", type=str, metavar="URL", help="Remote insight analyzer endpoint")
    parser.add_argument("--history-file", type=str, metavar="FILE", help="History file path")

    # Logging
    parser.add_argument("--log-level", type=str, metavar="LEVEL", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--log-file", type=str, metavar="FILE", help="Also log to a rotating file")

    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    config = _apply_overrides(load_config(), args)

    try:
        validate_config(config)
    except ValueError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    # keep stdout clean for JSON output
    log_console = Console(stderr=True) if args.json else console
    configure_logging(config["log_level"], config["log_file"] or None, console=log_console)

    if args.history or args.hourly:
        store = HistoryStore(path=config["history_file"] or None, limit=config["history_limit"])
        results = store.load()
        if args.history:
            print_history(results)
        if args.hourly:
            print_hourly(format_hourly_summary(group_by_hour(results)))
        return

    try:
        if args.once:
            result = asyncio.run(run_once(
                config,
                json_output=args.json,
                simple=args.simple,
                output_file=args.output,
            ))
            if result is None:
                sys.exit(1)
        else:
            asyncio.run(run_monitor(config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Monitoring stopped by user[/yellow]")
        sys.exit(1)


if __name__ == "__main__":
    main()
