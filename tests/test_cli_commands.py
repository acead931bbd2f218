# ==============================================================================
# Tests for CLI Commands
# ==============================================================================
"""
Tests for CLI commands with the store replaced by fakeredis repositories.

Tests cover:
- analytics realtime/history/sessions/session in JSON and table modes
- Query failures exit with code 1
- config show --json
- track records a page view under the persisted session id
"""

import json
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from sitepulse.app import app
from sitepulse.services.analytics import AnalyticsQueryError, AnalyticsService
from sitepulse.services.ingestion import InProcessTransport, IngestionService

runner = CliRunner()


@pytest.fixture()
def local_source(monkeypatch, event_repo, session_repo, clock):
    """Route analytics commands to an AnalyticsService over fakeredis."""
    service = AnalyticsService(event_repo, session_repo, clock=clock)

    @contextmanager
    def fake_source(remote=False):
        yield service

    monkeypatch.setattr("sitepulse.cli.analytics.analytics_source", fake_source)
    return service


class TestAnalyticsCommands:
    """Tests for `sitepulse analytics ...`."""

    def test_realtime_json(self, local_source, event_repo, make_event):
        event_repo.save(make_event("/"))

        result = runner.invoke(app, ["analytics", "realtime", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["activeVisitors"] == 1
        assert data["pageViewsByPath"][0]["path"] == "/"

    def test_realtime_box(self, local_source, event_repo, make_event):
        event_repo.save(make_event("/pricing"))

        result = runner.invoke(app, ["analytics", "realtime"])

        assert result.exit_code == 0
        assert "SITEPULSE REAL-TIME" in result.output
        assert "/pricing" in result.output

    def test_history_json(self, local_source, event_repo, make_event):
        event_repo.save(make_event())

        result = runner.invoke(app, ["analytics", "history", "--days", "7", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {"date": "2024-06-15", "pageViews": 1, "uniqueVisitors": 1}
        ]

    def test_sessions_table(self, local_source, event_repo, make_event):
        event_repo.save(make_event(session_id="session_xyz"))

        result = runner.invoke(app, ["analytics", "sessions"])

        assert result.exit_code == 0
        assert "session_xyz" in result.output

    def test_query_error_exits_1(self, monkeypatch):
        source = MagicMock()
        source.get_visitor_sessions.side_effect = AnalyticsQueryError("store down")

        @contextmanager
        def fake_source(remote=False):
            yield source

        monkeypatch.setattr("sitepulse.cli.analytics.analytics_source", fake_source)
        result = runner.invoke(app, ["analytics", "sessions", "--json"])

        assert result.exit_code == 1
        assert json.loads(result.output) == {"error": "store down"}

    def test_session_json(self, local_source, event_repo, make_event):
        event_repo.save(make_event("/a", session_id="session_xyz"))
        event_repo.save(make_event("/b", session_id="session_xyz"))

        result = runner.invoke(app, ["analytics", "session", "session_xyz", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["total_page_views"] == 2

    def test_session_box(self, local_source, event_repo, make_event):
        event_repo.save(make_event(session_id="session_xyz"))

        result = runner.invoke(app, ["analytics", "session", "session_xyz"])

        assert result.exit_code == 0
        assert "SITEPULSE SESSION" in result.output
        assert "session_xyz" in result.output

    def test_unknown_session_exits_1(self, local_source):
        result = runner.invoke(app, ["analytics", "session", "nobody", "--json"])

        assert result.exit_code == 1
        assert json.loads(result.output) == {"error": "Session not found: nobody"}


class TestConfigShow:
    """Tests for `sitepulse config show`."""

    def test_json(self):
        result = runner.invoke(app, ["config", "show", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["store"]["backend"] in ("postgresql", "valkey")
        assert "active_window_minutes" in data["analytics"]


class TestTrack:
    """Tests for `sitepulse track`."""

    def test_records_page_view(self, monkeypatch, tmp_path, event_repo, session_repo, clock):
        from sitepulse.utils.config import ClientSettings, Settings

        settings = Settings(client=ClientSettings(identity_file=tmp_path / "identity.json"))
        monkeypatch.setattr("sitepulse.cli.track.get_settings", lambda: settings)

        @contextmanager
        def fake_transport(remote=False):
            yield InProcessTransport(IngestionService(event_repo, clock=clock))

        monkeypatch.setattr("sitepulse.cli.track.ingest_transport", fake_transport)

        result = runner.invoke(app, ["track", "/docs", "--title", "Docs"])

        assert result.exit_code == 0
        assert "Tracked" in result.output
        (session,) = session_repo.list_recent(10)
        assert session.session_id in result.output
        (event,) = event_repo.find_between(clock.now, clock.now)
        assert event.page_title == "Docs"


class TestStatusCommand:
    """Tests for `sitepulse status`."""

    @pytest.fixture()
    def checks(self, monkeypatch):
        results = {"postgresql": True, "valkey": False, "api": True}
        monkeypatch.setattr(
            "sitepulse.infrastructure.repositories.check_postgresql_connection",
            lambda settings=None: results["postgresql"],
        )
        monkeypatch.setattr(
            "sitepulse.infrastructure.repositories.check_valkey_connection",
            lambda settings=None: results["valkey"],
        )
        monkeypatch.setattr(
            "sitepulse.cli.status._check_api", lambda endpoint, timeout: results["api"]
        )
        return results

    @pytest.fixture()
    def pg_settings(self, monkeypatch):
        from sitepulse.utils.config import Settings, StoreSettings

        settings = Settings(store=StoreSettings(backend="postgresql"))
        monkeypatch.setattr("sitepulse.cli.status.get_settings", lambda: settings)
        return settings

    def test_json_reports_every_check(self, checks, pg_settings):
        result = runner.invoke(app, ["status", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["backend"] == "postgresql"
        assert data["checks"] == {"postgresql": True, "valkey": False, "api": True}
        assert data["healthy"] is True

    def test_unreachable_backend_exits_1(self, checks, pg_settings):
        checks["postgresql"] = False

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        assert "unreachable" in result.output
