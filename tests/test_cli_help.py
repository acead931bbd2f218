# ==============================================================================
# Tests for CLI Help Commands
# ==============================================================================
"""
Tests that all CLI help commands generate the expected output.

Verifies that every command and subcommand in the sitepulse CLI:
- Exits with code 0 when invoked with --help
- Contains the expected description text
- Lists the expected subcommands or options

These tests use the real app from sitepulse.app to ensure the full command
tree is wired up correctly and that Typer can introspect all command
function signatures without errors.
"""

import pytest
from typer.testing import CliRunner

from sitepulse.app import app

runner = CliRunner()


# ==============================================================================
# Root App
# ==============================================================================


class TestRootHelp:
    """Tests for the root `sitepulse --help` output."""

    def test_exit_code(self):
        """Root --help exits successfully."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_description(self):
        """Root --help shows the app description."""
        result = runner.invoke(app, ["--help"])
        assert "SitePulse real-time visitor analytics" in result.output

    def test_lists_all_subcommands(self):
        """Root --help lists every top-level command."""
        result = runner.invoke(app, ["--help"])
        for cmd in ["analytics", "config", "db", "serve", "status", "track", "watch"]:
            assert cmd in result.output, f"Missing command: {cmd}"


# ==============================================================================
# Command Groups
# ==============================================================================


class TestGroupHelp:
    """Tests for the sub-app help pages."""

    @pytest.mark.parametrize(
        "group, description, subcommands",
        [
            (
                "analytics",
                "Visitor analytics reads",
                ["realtime", "history", "sessions", "session"],
            ),
            ("db", "Database schema management", ["init", "reset"]),
            ("config", "Configuration management", ["show"]),
        ],
    )
    def test_group(self, group, description, subcommands):
        result = runner.invoke(app, [group, "--help"])
        assert result.exit_code == 0
        assert description in result.output
        for cmd in subcommands:
            assert cmd in result.output, f"Missing subcommand: {cmd}"


# ==============================================================================
# Commands
# ==============================================================================


class TestCommandHelp:
    """Tests for individual command help pages."""

    @pytest.mark.parametrize(
        "args, description, options",
        [
            (["analytics", "realtime"], "Show real-time visitor metrics", ["--remote", "--json"]),
            (["analytics", "history"], "Show page views and unique visitors", ["--days", "--json"]),
            (["analytics", "sessions"], "List the most recently active", ["--limit", "--json"]),
            (["analytics", "session"], "Show the aggregate for one", ["--remote", "--json"]),
            (["db", "init"], "Create the database and schema", []),
            (["db", "reset"], "Drop and recreate the PostgreSQL schema", ["--yes"]),
            (["config", "show"], "Display current configuration", ["--json"]),
            (["serve"], "Start the HTTP API", ["--host", "--port"]),
            (["status"], "Check connectivity", ["--json"]),
            (["track"], "Record one page view", ["--title", "--user-agent", "--remote"]),
            (["watch"], "Show a live dashboard", ["--interval", "--days", "--remote"]),
        ],
    )
    def test_command(self, args, description, options):
        result = runner.invoke(app, [*args, "--help"])
        assert result.exit_code == 0
        assert description in result.output
        for opt in options:
            assert opt in result.output, f"Missing option: {opt}"
