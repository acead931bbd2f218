# ==============================================================================
# Tests for Database Utilities
# ==============================================================================
"""
Tests for schema rendering and the db CLI commands.

The Jinja2 template is rendered from the real schema/init.sql; commands that
would talk to PostgreSQL have their database calls patched out.
"""

from unittest.mock import MagicMock

from typer.testing import CliRunner

from sitepulse.app import app
from sitepulse.utils.config import PostgresSettings, Settings
from sitepulse.utils.db import get_schema_file, render_schema_sql

runner = CliRunner()


class TestRenderSchemaSql:
    """Tests for render_schema_sql()."""

    def test_schema_file_found(self):
        assert get_schema_file() is not None

    def test_uses_configured_schema_name(self):
        sql = render_schema_sql(Settings(postgres=PostgresSettings(schema_name="analytics")))

        assert "CREATE SCHEMA IF NOT EXISTS analytics;" in sql
        assert "analytics.page_views" in sql
        assert "analytics.visitor_sessions" in sql
        assert "{{" not in sql

    def test_grants_omitted_without_roles(self):
        settings = Settings(postgres=PostgresSettings(writer_role=None, reader_role=None))

        assert "GRANT" not in render_schema_sql(settings)

    def test_writer_role_cannot_read_page_views(self):
        settings = Settings(
            postgres=PostgresSettings(
                schema_name="sp", writer_role="tracker", reader_role="dashboard"
            )
        )
        sql = render_schema_sql(settings)

        assert "GRANT INSERT ON sp.page_views TO tracker;" in sql
        assert "GRANT SELECT ON sp.page_views TO dashboard;" in sql
        assert "GRANT SELECT ON sp.page_views TO tracker;" not in sql


class TestDbCommands:
    """Tests for `sitepulse db ...` with the database patched out."""

    def test_init_reports_created(self, monkeypatch):
        ensure = MagicMock(return_value=True)
        monkeypatch.setattr("sitepulse.utils.db.ensure_schema", ensure)

        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        ensure.assert_called_once()

    def test_reset_requires_confirmation(self, monkeypatch):
        reset = MagicMock()
        monkeypatch.setattr("sitepulse.utils.db.reset_schema", reset)

        result = runner.invoke(app, ["db", "reset"], input="n\n")

        reset.assert_not_called()
        assert result.exit_code == 1

    def test_reset_with_yes(self, monkeypatch):
        reset = MagicMock()
        monkeypatch.setattr("sitepulse.utils.db.reset_schema", reset)

        result = runner.invoke(app, ["db", "reset", "-y"])

        assert result.exit_code == 0
        reset.assert_called_once()
