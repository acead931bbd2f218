# ==============================================================================
# Database Utilities
# ==============================================================================
"""
Database utility functions for SitePulse.

Provides schema initialization and reset for the PostgreSQL store.
Includes retry logic with exponential backoff so `sitepulse db init` can be
run while the database is still starting.
"""

import logging
from pathlib import Path

import psycopg2
from jinja2 import Template

from sitepulse.utils.config import Settings, get_settings
from sitepulse.utils.paths import get_init_sql_path
from sitepulse.utils.retry import POSTGRES_RETRY_EXCEPTIONS, retry_light, retry_standard

logger = logging.getLogger(__name__)


def get_schema_file() -> Path | None:
    """Get the schema init.sql path, or None if not found."""
    path = get_init_sql_path()
    if path.exists():
        return path
    # Fallback to current directory
    cwd_path = Path.cwd() / "schema" / "init.sql"
    if cwd_path.exists():
        return cwd_path
    return None


def render_schema_sql(settings: Settings | None = None) -> str:
    """Render the schema SQL template for the configured schema and roles."""
    settings = settings or get_settings()
    schema_file = get_schema_file()
    if not schema_file:
        raise RuntimeError(
            "Schema file (schema/init.sql) not found. "
            "Make sure you're running from the project root."
        )

    template = Template(schema_file.read_text())
    return template.render(
        schema_name=settings.postgres.schema_name,
        writer_role=settings.postgres.writer_role,
        reader_role=settings.postgres.reader_role,
    )


@retry_standard(POSTGRES_RETRY_EXCEPTIONS, logger)
def ensure_database_exists(settings: Settings | None = None) -> None:
    """
    Ensure the target database exists, creating it if needed.

    Connects to the 'postgres' maintenance database to check and create the
    target database. Retries on connection errors with exponential backoff.

    Raises:
        RuntimeError: If database creation fails
    """
    settings = settings or get_settings()
    pg = settings.postgres
    admin_conn_string = (
        f"postgresql://{pg.user}:{pg.password}@{pg.host}:{pg.port}/postgres"
        f"?sslmode={pg.sslmode}"
    )

    conn = psycopg2.connect(admin_conn_string, connect_timeout=5)
    # CREATE DATABASE cannot run inside a transaction
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (pg.database,))
            if cur.fetchone() is None:
                logger.info("Creating database '%s'...", pg.database)
                cur.execute(f'CREATE DATABASE "{pg.database}"')
                logger.info("Database '%s' created.", pg.database)
    except psycopg2.DatabaseError as e:
        raise RuntimeError(f"Failed to ensure database exists: {e}") from e
    finally:
        conn.close()


@retry_light(POSTGRES_RETRY_EXCEPTIONS, logger)
def check_schema_exists(settings: Settings | None = None) -> bool:
    """Check if the page_views table exists in the configured schema."""
    settings = settings or get_settings()
    with psycopg2.connect(settings.postgres.connection_string, connect_timeout=5) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_schema = %s
                    AND table_name = 'page_views'
                )
                """,
                (settings.postgres.schema_name,),
            )
            result = cur.fetchone()
            return bool(result[0]) if result else False


def ensure_schema(settings: Settings | None = None) -> bool:
    """
    Ensure database schema exists, initializing if needed.

    Idempotent and safe to call multiple times. Creates the database first
    if it doesn't exist.

    Returns:
        True if the schema was created, False if it already existed

    Raises:
        RuntimeError: If schema file not found or initialization fails
    """
    settings = settings or get_settings()
    ensure_database_exists(settings)

    if check_schema_exists(settings):
        return False

    schema_name = settings.postgres.schema_name
    logger.info("Initializing database schema '%s'...", schema_name)

    schema_sql = render_schema_sql(settings)
    try:
        with psycopg2.connect(settings.postgres.connection_string) as conn:
            with conn.cursor() as cur:
                cur.execute(schema_sql)
            conn.commit()
    except psycopg2.DatabaseError as e:
        raise RuntimeError(f"Failed to initialize schema: {e}") from e

    logger.info("Database schema '%s' initialized.", schema_name)
    return True


def reset_schema(settings: Settings | None = None) -> None:
    """
    Drop and recreate the database schema.

    WARNING: This deletes all page views and sessions!
    """
    settings = settings or get_settings()
    schema_name = settings.postgres.schema_name

    schema_sql = render_schema_sql(settings)
    try:
        with psycopg2.connect(settings.postgres.connection_string) as conn:
            with conn.cursor() as cur:
                cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")
                cur.execute(schema_sql)
            conn.commit()
    except psycopg2.DatabaseError as e:
        raise RuntimeError(f"Failed to reset schema: {e}") from e
