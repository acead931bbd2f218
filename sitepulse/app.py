# ==============================================================================
# SitePulse CLI
# ==============================================================================
"""
Command-line interface for the SitePulse visitor analytics engine.

Usage:
    sitepulse --help
    sitepulse serve
    sitepulse status
    sitepulse track /pricing --title "Pricing"
    sitepulse watch
    sitepulse analytics realtime
    sitepulse analytics history --days 7
    sitepulse analytics sessions --json
    sitepulse analytics session <id>
    sitepulse config show
    sitepulse db init
    sitepulse db reset -y
"""

import os

import typer

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="sitepulse",
    help="SitePulse real-time visitor analytics",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

analytics_app = typer.Typer(
    help="Visitor analytics reads",
    no_args_is_help=True,
)
app.add_typer(analytics_app, name="analytics")

# Register analytics commands from cli.analytics module
from sitepulse.cli.analytics import (
    analytics_history,
    analytics_realtime,
    analytics_session,
    analytics_sessions,
)

analytics_app.command("realtime")(analytics_realtime)
analytics_app.command("history")(analytics_history)
analytics_app.command("sessions")(analytics_sessions)
analytics_app.command("session")(analytics_session)

db_app = typer.Typer(
    help="Database schema management",
    no_args_is_help=True,
)
app.add_typer(db_app, name="db")

from sitepulse.cli.db import db_init, db_reset

db_app.command("init")(db_init)
db_app.command("reset")(db_reset)

config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

from sitepulse.cli.config import config_show

config_app.command("show")(config_show)

from sitepulse.cli.serve import serve
from sitepulse.cli.status import show_status
from sitepulse.cli.track import track
from sitepulse.cli.watch import watch

app.command("serve")(serve)
app.command("status")(show_status)
app.command("track")(track)
app.command("watch")(watch)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    from sitepulse.cli.shared import configure_logging

    configure_logging("WARNING")
    app()


if __name__ == "__main__":
    main()
