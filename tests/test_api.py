# ==============================================================================
# Tests for the HTTP API
# ==============================================================================
"""
Tests for the FastAPI application using TestClient and fakeredis stores.

Tests cover:
- POST /api/track is public and answers 202, even when storage fails
- Analytics reads require X-API-Key
- Read endpoints return camelCase read models
- Single-session lookup answers 404 for unknown ids
- Parameter validation (422) and store failures (503)
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from sitepulse.api.app import create_app
from sitepulse.utils.config import ApiSettings, Settings

IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
AUTH = {"X-API-Key": "test-key"}


@pytest.fixture()
def client(event_repo, session_repo, settings, clock):
    app = create_app(event_repo, session_repo, settings=settings, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def broken_client(settings, clock):
    """Client whose stores fail every call."""
    event_repo = MagicMock()
    event_repo.save.side_effect = ConnectionError("store down")
    event_repo.find_between.side_effect = ConnectionError("store down")
    session_repo = MagicMock()
    session_repo.list_recent.side_effect = ConnectionError("store down")
    session_repo.get.side_effect = ConnectionError("store down")
    app = create_app(event_repo, session_repo, settings=settings, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


# ==============================================================================
# Tracking
# ==============================================================================


class TestTrack:
    """Tests for POST /api/track."""

    def test_accepted(self, client, session_repo):
        response = client.post(
            "/api/track",
            json={"page_path": "/", "page_title": "Home", "session_id": "s1"},
            headers={"User-Agent": IPHONE, "Referer": "https://ref.example"},
        )

        assert response.status_code == 202
        assert response.json() == {"status": "accepted"}
        session = session_repo.get("s1")
        assert session.device_type == "mobile"
        assert session.os == "iOS"

    def test_invalid_body(self, client):
        response = client.post("/api/track", json={"page_path": "/"})
        assert response.status_code == 422

    def test_empty_path_rejected(self, client):
        response = client.post("/api/track", json={"page_path": "", "session_id": "s1"})
        assert response.status_code == 422

    def test_storage_failure_still_accepted(self, broken_client):
        response = broken_client.post("/api/track", json={"page_path": "/", "session_id": "s1"})
        assert response.status_code == 202


# ==============================================================================
# Analytics Reads
# ==============================================================================


class TestAuth:
    """Tests for the X-API-Key requirement."""

    @pytest.mark.parametrize(
        "path",
        [
            "/api/analytics/realtime",
            "/api/analytics/historical",
            "/api/analytics/sessions",
            "/api/analytics/sessions/s1",
        ],
    )
    def test_missing_key(self, client, path):
        assert client.get(path).status_code == 401

    def test_wrong_key(self, client):
        response = client.get("/api/analytics/realtime", headers={"X-API-Key": "nope"})
        assert response.status_code == 401

    def test_no_key_configured_rejects_reads(self, event_repo, session_repo, clock):
        settings = Settings(api=ApiSettings(read_key=None))
        app = create_app(event_repo, session_repo, settings=settings, clock=clock)
        with TestClient(app) as test_client:
            response = test_client.get("/api/analytics/realtime", headers=AUTH)
        assert response.status_code == 401


class TestReads:
    """Tests for the read endpoints."""

    def test_realtime(self, client):
        client.post("/api/track", json={"page_path": "/", "session_id": "s1"})
        client.post("/api/track", json={"page_path": "/docs", "session_id": "s1"})
        client.post("/api/track", json={"page_path": "/", "session_id": "s2"})

        data = client.get("/api/analytics/realtime", headers=AUTH).json()

        assert data["activeVisitors"] == 2
        assert data["totalPageViewsToday"] == 3
        assert data["uniqueVisitorsToday"] == 2
        assert data["pageViewsByPath"][0] == {"path": "/", "title": "/", "count": 2}
        assert data["deviceBreakdown"] == {"desktop": 3}
        assert "lastUpdated" in data

    def test_historical(self, client):
        client.post("/api/track", json={"page_path": "/", "session_id": "s1"})

        response = client.get("/api/analytics/historical", params={"days": 7}, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == [{"date": "2024-06-15", "pageViews": 1, "uniqueVisitors": 1}]

    @pytest.mark.parametrize("days", [0, 400])
    def test_historical_invalid_days(self, client, days):
        response = client.get("/api/analytics/historical", params={"days": days}, headers=AUTH)
        assert response.status_code == 422

    def test_sessions(self, client):
        client.post("/api/track", json={"page_path": "/", "session_id": "s1"})

        response = client.get("/api/analytics/sessions", params={"limit": 5}, headers=AUTH)

        (session,) = response.json()
        assert session["session_id"] == "s1"
        assert session["total_page_views"] == 1

    def test_session_detail(self, client):
        client.post("/api/track", json={"page_path": "/", "session_id": "s1"})
        client.post("/api/track", json={"page_path": "/docs", "session_id": "s1"})

        response = client.get("/api/analytics/sessions/s1", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["total_page_views"] == 2

    def test_session_detail_unknown(self, client):
        response = client.get("/api/analytics/sessions/nobody", headers=AUTH)
        assert response.status_code == 404

    def test_store_failures(self, broken_client):
        realtime = broken_client.get("/api/analytics/realtime", headers=AUTH)
        assert realtime.status_code == 200
        assert realtime.json()["totalPageViewsToday"] == 0

        historical = broken_client.get("/api/analytics/historical", headers=AUTH)
        assert historical.status_code == 503
        assert "store down" in historical.json()["detail"]

        sessions = broken_client.get("/api/analytics/sessions", headers=AUTH)
        assert sessions.status_code == 503

        detail = broken_client.get("/api/analytics/sessions/s1", headers=AUTH)
        assert detail.status_code == 503

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
