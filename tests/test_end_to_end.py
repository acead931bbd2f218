# ==============================================================================
# End-to-End Tests
# ==============================================================================
"""
Client tracker to dashboard read, wired in-process over fakeredis.

A client whose stored session id is S1 views /, /history and / again. The
store must then hold three events and one session, and the real-time
snapshot must rank / ahead of /history.
"""

from datetime import timedelta

import pytest

from sitepulse.client.identity import SESSION_ID_KEY, SessionIdentityManager
from sitepulse.client.poller import AnalyticsPoller
from sitepulse.client.tracker import PageViewTracker
from sitepulse.infrastructure.identity_store import FileIdentityStore
from sitepulse.services.analytics import AnalyticsService
from sitepulse.services.ingestion import InProcessTransport, IngestionService

MAC_CHROME = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@pytest.fixture()
def tracker(tmp_path, event_repo, clock):
    store = FileIdentityStore(tmp_path / "identity.json")
    store.set(SESSION_ID_KEY, "S1")
    transport = InProcessTransport(IngestionService(event_repo, clock=clock))
    tracker = PageViewTracker(SessionIdentityManager(store), transport, user_agent=MAC_CHROME)
    yield tracker
    tracker.close()


def test_three_page_views_one_session(tracker, event_repo, session_repo, clock, now):
    for path in ("/", "/history", "/"):
        tracker.track_page_view(path).result(timeout=5)
        clock.advance(seconds=10)

    events = event_repo.find_between(now - timedelta(hours=1), clock.now)
    assert len(events) == 3

    sessions = session_repo.list_recent(10)
    assert len(sessions) == 1
    assert sessions[0].session_id == "S1"
    assert sessions[0].total_page_views == 3
    assert sessions[0].device_type == "desktop"
    assert sessions[0].os == "macOS"

    analytics = AnalyticsService(event_repo, session_repo, clock=clock)
    snapshot = analytics.get_real_time_analytics()
    assert snapshot.active_visitors == 1
    assert [(p.path, p.count) for p in snapshot.page_views_by_path] == [("/", 2), ("/history", 1)]


def test_dashboard_poller_sees_tracked_views(tracker, event_repo, session_repo, clock):
    tracker.track_page_view("/").result(timeout=5)

    poller = AnalyticsPoller(AnalyticsService(event_repo, session_repo, clock=clock))
    poller.refresh_all()

    state = poller.state
    assert state.realtime.data.total_page_views_today == 1
    assert [b.page_views for b in state.historical.data] == [1]
    assert [s.session_id for s in state.sessions.data] == ["S1"]
