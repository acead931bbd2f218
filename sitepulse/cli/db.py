# ==============================================================================
# Database Commands
# ==============================================================================
"""
Database management commands for the SitePulse CLI.

Creates or recreates the PostgreSQL schema from schema/init.sql.
"""

from typing import Annotated

import psycopg2
import typer

from sitepulse.cli.shared import C, I
from sitepulse.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def db_init() -> None:
    """Create the database and schema if they do not exist.

    Waits for PostgreSQL to come up (retries with backoff).

    Examples:
        sitepulse db init
    """
    from sitepulse.utils.db import ensure_schema

    settings = get_settings()
    schema = settings.postgres.schema_name

    print()
    print(f"  Initializing PostgreSQL schema '{C.WHITE}{schema}{C.RESET}'...")
    try:
        created = ensure_schema(settings)
    except (RuntimeError, psycopg2.Error) as e:
        print(f"{C.BRIGHT_RED}{I.CROSS} {e}{C.RESET}")
        raise typer.Exit(1)

    if created:
        print(f"{C.BRIGHT_GREEN}{I.CHECK} Schema created{C.RESET}")
    else:
        print(f"{C.BRIGHT_GREEN}{I.CHECK} Schema already exists{C.RESET}")
    print()


def db_reset(
    confirm: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
) -> None:
    """Drop and recreate the PostgreSQL schema (deletes all page views and sessions).

    Examples:
        sitepulse db reset       # With confirmation prompt
        sitepulse db reset -y    # Skip confirmation
    """
    from sitepulse.utils.db import reset_schema

    settings = get_settings()
    schema = settings.postgres.schema_name

    if not confirm:
        typer.confirm(
            f"This will DELETE all data in schema '{schema}'. Are you sure?",
            abort=True,
        )

    print()
    print(f"  Resetting PostgreSQL schema '{C.WHITE}{schema}{C.RESET}'...")
    try:
        reset_schema(settings)
    except (RuntimeError, psycopg2.Error) as e:
        print(f"{C.BRIGHT_RED}{I.CROSS} {e}{C.RESET}")
        raise typer.Exit(1)

    print(f"{C.BRIGHT_GREEN}{I.CHECK} Schema reset{C.RESET}")
    print()
