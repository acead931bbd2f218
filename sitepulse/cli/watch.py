# ==============================================================================
# Watch Command
# ==============================================================================
"""
Live terminal dashboard driven by AnalyticsPoller.
"""

import time
from typing import Annotated, Optional

import typer
from rich.console import Group
from rich.live import Live
from rich.table import Table
from rich.text import Text

from sitepulse.cli.shared import analytics_source
from sitepulse.client.poller import AnalyticsPoller, DashboardState
from sitepulse.utils.config import get_settings


def render_dashboard(state: DashboardState) -> Group:
    """Build the renderable for one dashboard frame."""
    parts = []

    realtime = state.realtime
    summary = Table(title="Real-Time", show_header=True, header_style="bold")
    summary.add_column("Active", justify="right")
    summary.add_column("Page Views (24h)", justify="right")
    summary.add_column("Unique (24h)", justify="right")
    if realtime.data is not None:
        snap = realtime.data
        summary.add_row(
            f"{snap.active_visitors:,}",
            f"{snap.total_page_views_today:,}",
            f"{snap.unique_visitors_today:,}",
        )
    parts.append(summary)

    if realtime.data is not None and realtime.data.page_views_by_path:
        pages = Table(title="Top Pages", show_header=True, header_style="bold")
        pages.add_column("Path", justify="left")
        pages.add_column("Title", justify="left")
        pages.add_column("Views", justify="right")
        for page in realtime.data.page_views_by_path:
            pages.add_row(page.path, page.title, f"{page.count:,}")
        parts.append(pages)

    historical = state.historical
    if historical.data:
        days = Table(title="Daily Traffic", show_header=True, header_style="bold")
        days.add_column("Date", justify="left")
        days.add_column("Page Views", justify="right")
        days.add_column("Unique", justify="right")
        for bucket in historical.data[-7:]:
            days.add_row(bucket.date, f"{bucket.page_views:,}", f"{bucket.unique_visitors:,}")
        parts.append(days)

    for name in ("realtime", "historical", "sessions"):
        section = getattr(state, name)
        if section.error:
            parts.append(Text(f"{name}: {section.error}", style="red"))

    if realtime.updated_at is not None:
        parts.append(Text(f"Updated {realtime.updated_at:%H:%M:%S} UTC", style="dim"))

    return Group(*parts)


def watch(
    interval: Annotated[
        Optional[float], typer.Option("--interval", "-i", help="Refresh interval in seconds")
    ] = None,
    days: Annotated[int, typer.Option("--days", "-d", help="History look-back", min=1)] = 30,
    remote: Annotated[
        bool, typer.Option("--remote", "-r", help="Poll the HTTP API instead of the store")
    ] = False,
) -> None:
    """Show a live dashboard that refreshes every interval (Ctrl+C to quit).

    Examples:
        sitepulse watch
        sitepulse watch --interval 5 --remote
    """
    settings = get_settings()
    interval = interval or settings.client.poll_interval_seconds

    with analytics_source(remote) as source:
        poller = AnalyticsPoller(source, interval_seconds=interval, history_days=days)
        poller.start()
        try:
            with Live(render_dashboard(poller.state), refresh_per_second=2) as live:
                while True:
                    time.sleep(0.5)
                    live.update(render_dashboard(poller.state))
        except KeyboardInterrupt:
            pass
        finally:
            poller.stop()
