# ==============================================================================
# Tests for Page View Tracker
# ==============================================================================
"""
Tests for PageViewTracker.

Tests cover:
- A tracked view is delivered with the persisted session id
- A second call while one is in flight is dropped
- Tracking resumes once the in-flight send completes
- Transport errors are swallowed and release the guard
"""

import threading

import pytest

from sitepulse.base.transport import IngestTransport
from sitepulse.client.identity import SessionIdentityManager
from sitepulse.client.tracker import PageViewTracker
from sitepulse.infrastructure.identity_store import FileIdentityStore


class RecordingTransport(IngestTransport):
    """Collects requests; optionally blocks until released or raises."""

    def __init__(self, block: bool = False, error: Exception | None = None):
        self.requests = []
        self.started = threading.Event()
        self.release = threading.Event()
        self.block = block
        self.error = error

    def send(self, request):
        self.started.set()
        if self.block:
            self.release.wait(5)
        if self.error:
            raise self.error
        self.requests.append(request)


@pytest.fixture()
def identity(tmp_path):
    return SessionIdentityManager(FileIdentityStore(tmp_path / "identity.json"))


class TestTrackPageView:
    """Tests for PageViewTracker.track_page_view()."""

    def test_delivers_request(self, identity):
        transport = RecordingTransport()
        tracker = PageViewTracker(identity, transport, user_agent="UA", referrer="ref")

        future = tracker.track_page_view("/pricing", "Pricing")
        future.result(timeout=5)
        tracker.close()

        (request,) = transport.requests
        assert request.page_path == "/pricing"
        assert request.page_title == "Pricing"
        assert request.session_id == identity.get_or_create_session_id()
        assert request.user_agent == "UA"
        assert request.referrer == "ref"

    def test_drops_call_while_in_flight(self, identity):
        transport = RecordingTransport(block=True)
        tracker = PageViewTracker(identity, transport)

        first = tracker.track_page_view("/a")
        assert transport.started.wait(5)
        second = tracker.track_page_view("/b")

        assert second is None
        transport.release.set()
        first.result(timeout=5)
        tracker.close()

        assert [r.page_path for r in transport.requests] == ["/a"]

    def test_resumes_after_completion(self, identity):
        transport = RecordingTransport()
        tracker = PageViewTracker(identity, transport)

        tracker.track_page_view("/a").result(timeout=5)
        tracker.track_page_view("/b").result(timeout=5)
        tracker.close()

        assert [r.page_path for r in transport.requests] == ["/a", "/b"]

    def test_transport_error_is_swallowed(self, identity, caplog):
        transport = RecordingTransport(error=ConnectionError("offline"))
        tracker = PageViewTracker(identity, transport)

        future = tracker.track_page_view("/a")
        assert future.result(timeout=5) is None
        assert not tracker.in_flight
        assert "Failed to track page view /a" in caplog.text

        # Guard was released, so the next call is sent
        assert tracker.track_page_view("/b") is not None
        tracker.close()
