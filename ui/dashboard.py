"""
Rich-based terminal dashboard for the probe's display feed.

All formatting helpers live in ``probe.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from probe.grading import STATUS_COLORS, compare_with_previous, format_delta
from probe.history import format_history_table, sparkline, summarize
from probe.models import NetworkInsight, SpeedResult
from probe.scheduler import DisplayFeed
from probe.stats import format_latency, format_speed

console = Console()


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_time_remaining(seconds: float) -> str:
    """``m:ss`` countdown string."""
    total = max(0, int(seconds))
    return f"{total // 60}:{total % 60:02d}"


# ---------------------------------------------------------------------------
# Renderables
# ---------------------------------------------------------------------------

def build_status_panel(feed: DisplayFeed) -> Panel:
    """Latest metrics, countdown and in-progress indicator."""
    latest = feed.latest

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold white")
    table.add_column(justify="right")

    if latest is None:
        table.add_row("Download", "[dim]---[/dim]")
        table.add_row("Upload", "[dim]---[/dim]")
        table.add_row("Latency", "[dim]---[/dim]")
        table.add_row("Jitter", "[dim]---[/dim]")
    else:
        table.add_row("Download", f"[bold green]{format_speed(latest.download)}[/bold green]")
        table.add_row("Upload", f"[bold blue]{format_speed(latest.upload)}[/bold blue]")
        table.add_row("Latency", f"[bold yellow]{format_latency(latest.latency)}[/bold yellow]")
        table.add_row("Jitter", f"[bold magenta]{format_latency(latest.jitter)}[/bold magenta]")

        delta = compare_with_previous(latest, feed.history)
        if delta:
            table.add_row(
                "vs last",
                f"DL {format_delta(delta['download_delta'], 'Mbps')}  "
                f"UL {format_delta(delta['upload_delta'], 'Mbps')}  "
                f"Ping {format_delta(delta['latency_delta'], 'ms', invert=True)}",
            )

    if feed.running:
        footer = "[bold cyan]Testing...[/bold cyan]"
    else:
        footer = f"[dim]Next automated test in[/dim] [cyan]{format_time_remaining(feed.time_remaining)}[/cyan]"

    samples = [r.download for r in feed.history]
    trend = f"[green]{sparkline(samples)}[/green]" if samples else "[dim]Waiting for first measurement...[/dim]"

    return Panel(
        Group(table, "", trend, footer),
        title="[bold]OmniSpeed[/bold]",
        border_style="cyan",
    )


def build_insight_panel(insight: Optional[NetworkInsight]) -> Panel:
    if insight is None:
        return Panel("[dim]No analysis yet[/dim]", title="[bold]Insights[/bold]", border_style="dim")

    color = STATUS_COLORS.get(insight.status, "white")
    lines = [f"[bold {color}]{insight.status.upper()}[/bold {color}]", "", insight.summary, ""]
    lines.extend(f"  - {rec}" for rec in insight.recommendations)
    return Panel("\n".join(lines), title="[bold]Insights[/bold]", border_style=color)


def build_dashboard(feed: DisplayFeed) -> Group:
    return Group(build_status_panel(feed), build_insight_panel(feed.insight))


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header() -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]OmniSpeed Monitor[/bold cyan]\n"
            "[dim]Continuous download, upload, latency and jitter tracking[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_result(result: SpeedResult) -> None:
    console.print(
        Panel.fit(
            f"[bold white]   Download:[/bold white]  [bold green]{format_speed(result.download)}[/bold green]\n"
            f"[bold white]   Upload:[/bold white]    [bold blue]{format_speed(result.upload)}[/bold blue]\n"
            f"[bold white]   Latency:[/bold white]   [bold yellow]{format_latency(result.latency)}[/bold yellow]  "
            f"[dim](jitter: {result.jitter:.1f} ms)[/dim]",
            title="[bold]Results[/bold]",
            border_style="cyan",
        )
    )


def print_insight(insight: NetworkInsight) -> None:
    console.print(build_insight_panel(insight))


def print_history(results: Sequence[SpeedResult]) -> None:
    if not results:
        console.print("[dim]No measurements recorded yet.[/dim]")
        return

    table = Table(title="Measurement History", box=box.ROUNDED)
    table.add_column("Time", style="dim")
    table.add_column("Download", justify="right", style="green")
    table.add_column("Upload", justify="right", style="blue")
    table.add_column("Latency", justify="right", style="yellow")
    table.add_column("Jitter", justify="right")

    for row in format_history_table(results):
        table.add_row(
            row["timestamp"],
            format_speed(row["download"]),
            format_speed(row["upload"]),
            format_latency(row["latency"]),
            format_latency(row["jitter"]),
        )
    console.print(table)

    stats = summarize(results)
    console.print(
        f"  Average over {stats['count']} test(s): "
        f"[green]{format_speed(stats['download'])}[/green] down, "
        f"[blue]{format_speed(stats['upload'])}[/blue] up, "
        f"[yellow]{format_latency(stats['latency'])}[/yellow] latency"
    )
    console.print(f"  Download trend: [green]{sparkline([r.download for r in results])}[/green]")


def print_hourly(rows: List[Dict[str, Any]]) -> None:
    if not rows:
        console.print("[dim]No measurements recorded yet.[/dim]")
        return

    table = Table(title="Time of Day", box=box.ROUNDED)
    table.add_column("Hour", style="dim")
    table.add_column("Tests", justify="right")
    table.add_column("Avg Download", justify="right", style="green")
    table.add_column("Avg Upload", justify="right", style="blue")
    table.add_column("Avg Latency", justify="right", style="yellow")

    for row in rows:
        table.add_row(
            row["hour"],
            str(row["tests"]),
            format_speed(row["avg_download"]),
            format_speed(row["avg_upload"]),
            format_latency(row["avg_latency"]),
        )
    console.print(table)


# ---------------------------------------------------------------------------
# Live display
# ---------------------------------------------------------------------------

class LiveDashboard:
    """Keeps a ``rich`` live view in sync with the scheduler feed."""

    def __init__(self) -> None:
        self._live: Optional[Live] = None

    def start(self, feed: DisplayFeed) -> None:
        self._live = Live(build_dashboard(feed), console=console, refresh_per_second=4)
        self._live.start()

    def update(self, feed: DisplayFeed) -> None:
        if self._live is None:
            return
        self._live.update(build_dashboard(feed))

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None
