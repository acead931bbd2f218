# ==============================================================================
# Analytics Aggregations - Pure Domain Logic
# ==============================================================================
"""
Windowed aggregations over page-view events.

Everything here works on plain lists of PageViewEvent and an explicit
"now", so the metrics can be unit tested without a store or a clock:
- build_snapshot(): real-time dashboard metrics over rolling windows
- daily_buckets(): per-UTC-day page views and unique visitors

Window boundaries are inclusive: an event exactly `active_window` old still
counts as active.
"""

from collections import Counter
from datetime import UTC, datetime, timedelta

from sitepulse.core.models import DailyBucket, PageCount, PageViewEvent, RealTimeSnapshot

DEFAULT_ACTIVE_WINDOW = timedelta(minutes=5)
DEFAULT_TODAY_WINDOW = timedelta(hours=24)
DEFAULT_TOP_PAGES = 10


def in_window(event: PageViewEvent, start: datetime, end: datetime) -> bool:
    """True if start <= event.created_at <= end."""
    return start <= event.created_at <= end


def count_active_visitors(
    events: list[PageViewEvent],
    now: datetime,
    window: timedelta = DEFAULT_ACTIVE_WINDOW,
) -> int:
    """Distinct session ids with at least one event in [now - window, now]."""
    start = now - window
    return len({e.session_id for e in events if in_window(e, start, now)})


def top_pages(events: list[PageViewEvent], limit: int = DEFAULT_TOP_PAGES) -> list[PageCount]:
    """
    Count views per path and keep the most viewed pages.

    Each path is paired with the title of its most recent view, falling back
    to the path itself when that view has no title. Ties on count are broken
    by the most recent view, then by path.

    Args:
        events: Events to count (any order)
        limit: Maximum number of pages returned

    Returns:
        PageCount list sorted by count descending
    """
    counts: Counter[str] = Counter()
    latest: dict[str, PageViewEvent] = {}

    for event in events:
        path = event.page_path
        counts[path] += 1
        if path not in latest or event.created_at >= latest[path].created_at:
            latest[path] = event

    ranked = sorted(counts, key=lambda p: (-counts[p], -latest[p].created_at.timestamp(), p))
    return [
        PageCount(path=path, title=latest[path].page_title or path, count=counts[path])
        for path in ranked[:limit]
    ]


def device_breakdown(events: list[PageViewEvent]) -> dict[str, int]:
    """Map device type to number of events."""
    return dict(Counter(e.device_type.value for e in events))


def build_snapshot(
    events: list[PageViewEvent],
    now: datetime,
    active_window: timedelta = DEFAULT_ACTIVE_WINDOW,
    today_window: timedelta = DEFAULT_TODAY_WINDOW,
    top_limit: int = DEFAULT_TOP_PAGES,
) -> RealTimeSnapshot:
    """
    Compute the real-time dashboard snapshot.

    Events outside [now - today_window, now] are ignored, so callers may pass
    a superset of the window.

    Args:
        events: Candidate events, usually everything since now - today_window
        now: Reference time for all windows
        active_window: Window for active visitors (default 5 minutes)
        today_window: Rolling "today" window (default 24 hours)
        top_limit: Number of pages in page_views_by_path

    Returns:
        RealTimeSnapshot with last_updated set to now
    """
    today = [e for e in events if in_window(e, now - today_window, now)]

    return RealTimeSnapshot(
        active_visitors=count_active_visitors(today, now, active_window),
        total_page_views_today=len(today),
        unique_visitors_today=len({e.session_id for e in today}),
        page_views_by_path=top_pages(today, top_limit),
        device_breakdown=device_breakdown(today),
        last_updated=now,
    )


def utc_date_key(moment: datetime) -> str:
    """Calendar date of a timestamp in UTC, as YYYY-MM-DD."""
    # Naive timestamps are taken to be UTC already
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.date().isoformat()


def daily_buckets(events: list[PageViewEvent]) -> list[DailyBucket]:
    """
    Group events by UTC calendar date.

    Args:
        events: Events to bucket (any order)

    Returns:
        One DailyBucket per date that has events, in chronological order
    """
    views: Counter[str] = Counter()
    sessions: dict[str, set[str]] = {}

    for event in events:
        day = utc_date_key(event.created_at)
        views[day] += 1
        sessions.setdefault(day, set()).add(event.session_id)

    return [
        DailyBucket(date=day, page_views=views[day], unique_visitors=len(sessions[day]))
        for day in sorted(views)
    ]
