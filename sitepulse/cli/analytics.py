# ==============================================================================
# Analytics Commands
# ==============================================================================
"""
Analytics commands for the SitePulse CLI.

Reads the real-time snapshot, the daily rollup, the session listing and
single sessions, either straight from the configured store or from a running
API (--remote).
"""

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from sitepulse.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
    _section_header,
    analytics_source,
)
from sitepulse.services.analytics import AnalyticsQueryError

RemoteOption = Annotated[
    bool, typer.Option("--remote", "-r", help="Query the HTTP API instead of the store")
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON for scripting")]


def _print_error(message: str, json_output: bool) -> None:
    if json_output:
        print(json.dumps({"error": message}))
    else:
        print(f"\n{C.BRIGHT_RED}{I.CROSS} {message}{C.RESET}\n")


# ==============================================================================
# Commands
# ==============================================================================


def analytics_realtime(remote: RemoteOption = False, json_output: JsonOption = False) -> None:
    """Show real-time visitor metrics.

    Active visitors are sessions seen in the last 5 minutes; the "today"
    figures cover the last 24 hours.

    Examples:
        sitepulse analytics realtime
        sitepulse analytics realtime --json
    """
    with analytics_source(remote) as source:
        snapshot = source.get_real_time_analytics()

    if json_output:
        print(json.dumps(snapshot.model_dump(mode="json", by_alias=True), indent=2))
        return

    W = BOX_WIDTH
    print()
    print(_box_header("SITEPULSE REAL-TIME", W))
    print(_empty_line(W))
    print(_box_line(f"  {'Active visitors':<30}{snapshot.active_visitors:>12,}", W))
    print(_box_line(f"  {'Page views (24h)':<30}{snapshot.total_page_views_today:>12,}", W))
    print(_box_line(f"  {'Unique visitors (24h)':<30}{snapshot.unique_visitors_today:>12,}", W))
    print(_empty_line(W))

    print(_section_header("Top Pages", W))
    if not snapshot.page_views_by_path:
        print(_box_line(f"  {C.DIM}No page views yet{C.RESET}", W))
    for page in snapshot.page_views_by_path:
        label = page.path if len(page.path) <= 48 else page.path[:45] + "..."
        print(_box_line(f"  {label:<50}{page.count:>12,}", W))

    print(_section_header("Devices", W))
    for device, count in sorted(snapshot.device_breakdown.items()):
        print(_box_line(f"  {device:<30}{count:>12,}", W))

    print(_empty_line(W))
    updated = snapshot.last_updated.strftime("%Y-%m-%d %H:%M:%S %Z")
    print(_box_line(f"  {C.DIM}Updated {updated}{C.RESET}", W))
    print(_box_bottom(W))
    print()


def analytics_history(
    days: Annotated[int, typer.Option("--days", "-d", help="Look-back in days", min=1)] = 30,
    remote: RemoteOption = False,
    json_output: JsonOption = False,
) -> None:
    """Show page views and unique visitors per UTC day.

    Examples:
        sitepulse analytics history
        sitepulse analytics history --days 7 --json
    """
    try:
        with analytics_source(remote) as source:
            buckets = source.get_historical_analytics(days)
    except (AnalyticsQueryError, ValueError) as e:
        _print_error(str(e), json_output)
        raise typer.Exit(1)

    if json_output:
        print(json.dumps([b.model_dump(by_alias=True) for b in buckets], indent=2))
        return

    console = Console()
    table = Table(title=f"Daily Traffic (last {days} days)", show_header=True, header_style="bold")
    table.add_column("Date", justify="left")
    table.add_column("Page Views", justify="right")
    table.add_column("Unique Visitors", justify="right")

    for bucket in buckets:
        table.add_row(bucket.date, f"{bucket.page_views:,}", f"{bucket.unique_visitors:,}")

    print()
    console.print(table)
    print(f"  {C.BOLD}Days with traffic:{C.RESET}  {len(buckets)}")
    print(f"  {C.BOLD}Total page views:{C.RESET}   {sum(b.page_views for b in buckets):,}")
    print()


def analytics_sessions(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum sessions", min=1)] = 20,
    remote: RemoteOption = False,
    json_output: JsonOption = False,
) -> None:
    """List the most recently active visitor sessions.

    Examples:
        sitepulse analytics sessions
        sitepulse analytics sessions -n 50 --json
    """
    try:
        with analytics_source(remote) as source:
            sessions = source.get_visitor_sessions(limit)
    except (AnalyticsQueryError, ValueError) as e:
        _print_error(str(e), json_output)
        raise typer.Exit(1)

    if json_output:
        print(json.dumps([s.model_dump(mode="json") for s in sessions], indent=2))
        return

    console = Console()
    table = Table(title="Recent Sessions", show_header=True, header_style="bold")
    table.add_column("Session", justify="left")
    table.add_column("Last Seen (UTC)", justify="left")
    table.add_column("Views", justify="right")
    table.add_column("Device", justify="left")
    table.add_column("Browser", justify="left")
    table.add_column("OS", justify="left")

    for s in sessions:
        table.add_row(
            s.session_id,
            s.last_seen_at.strftime("%Y-%m-%d %H:%M:%S"),
            f"{s.total_page_views:,}",
            s.device_type or "—",
            s.browser or "—",
            s.os or "—",
        )

    print()
    console.print(table)
    print(f"  {C.BOLD}Sessions:{C.RESET}  {len(sessions)}")
    print()


def analytics_session(
    session_id: Annotated[str, typer.Argument(help="Session id to look up")],
    remote: RemoteOption = False,
    json_output: JsonOption = False,
) -> None:
    """Show the aggregate for one visitor session.

    Examples:
        sitepulse analytics session session_1718452800000_k3j9x0q2a
        sitepulse analytics session <id> --remote --json
    """
    try:
        with analytics_source(remote) as source:
            session = source.get_visitor_session(session_id)
    except AnalyticsQueryError as e:
        _print_error(str(e), json_output)
        raise typer.Exit(1)

    if session is None:
        _print_error(f"Session not found: {session_id}", json_output)
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(session.model_dump(mode="json"), indent=2))
        return

    W = BOX_WIDTH
    print()
    print(_box_header("SITEPULSE SESSION", W))
    print(_empty_line(W))
    print(_box_line(f"  {C.WHITE}{session.session_id}{C.RESET}", W))
    print(_empty_line(W))
    rows = [
        ("First seen (UTC)", session.first_seen_at.strftime("%Y-%m-%d %H:%M:%S")),
        ("Last seen (UTC)", session.last_seen_at.strftime("%Y-%m-%d %H:%M:%S")),
        ("Page views", f"{session.total_page_views:,}"),
        ("Visits", f"{session.total_visits:,}"),
        ("Device", session.device_type or "—"),
        ("Browser", session.browser or "—"),
        ("OS", session.os or "—"),
    ]
    for label, value in rows:
        print(_box_line(f"  {label:<24}{value}", W))
    print(_empty_line(W))
    print(_box_bottom(W))
    print()
