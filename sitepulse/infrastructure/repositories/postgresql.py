# ==============================================================================
# PostgreSQL Repository Implementations
# ==============================================================================
"""
PostgreSQL implementations of the repository interfaces.

Provides:
- PostgreSQLEventRepository: Insert page views and upsert their session in
  one transaction; read event windows
- PostgreSQLSessionRepository: Read session aggregates

The session merge is a single INSERT ... ON CONFLICT (session_id) DO UPDATE
statement. The conflicting row is locked by PostgreSQL for the duration of
the transaction, so concurrent page views for one session id serialize on
that row while other sessions proceed in parallel.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import PoolError, ThreadedConnectionPool

from sitepulse.base.repositories import EventRepository, SessionRepository
from sitepulse.core.models import PageViewEvent, VisitorSession
from sitepulse.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

# Connection timeout
CONNECT_TIMEOUT = 10

EVENT_COLUMNS = (
    "id::text AS id, page_path, page_title, session_id, "
    "COALESCE(user_agent, '') AS user_agent, referrer, device_type, browser, os, "
    "country, city, created_at"
)

SESSION_COLUMNS = (
    "session_id, first_seen_at, last_seen_at, total_visits, total_page_views, "
    "device_type, browser, os, country, city, is_returning_visitor"
)


def _add_connect_timeout(conn_string: str) -> str:
    """Add connect_timeout to connection string if not present."""
    if "connect_timeout" not in conn_string:
        separator = "&" if "?" in conn_string else "?"
        return f"{conn_string}{separator}connect_timeout={CONNECT_TIMEOUT}"
    return conn_string


def insert_event_sql(schema: str) -> str:
    """INSERT statement for one page view."""
    return f"""
        INSERT INTO {schema}.page_views (
            id, page_path, page_title, session_id, user_agent, referrer,
            device_type, browser, os, country, city, created_at
        ) VALUES (
            %(id)s, %(page_path)s, %(page_title)s, %(session_id)s, %(user_agent)s,
            %(referrer)s, %(device_type)s, %(browser)s, %(os)s, %(country)s,
            %(city)s, %(created_at)s
        )
    """


def upsert_session_sql(schema: str) -> str:
    """
    Insert-or-update of the session row for one page view.

    Mirrors SessionResolver: new sessions start at one visit and one page
    view; existing sessions get +1 page view, a last_seen_at that never moves
    backward, and descriptive fields coalesced so empty values never erase
    recorded ones. total_visits and first_seen_at are not touched on update.
    """
    return f"""
        INSERT INTO {schema}.visitor_sessions (
            session_id, first_seen_at, last_seen_at, total_visits, total_page_views,
            device_type, browser, os, country, city, is_returning_visitor
        ) VALUES (
            %(session_id)s, %(created_at)s, %(created_at)s, 1, 1,
            NULLIF(%(device_type)s, ''), NULLIF(%(browser)s, ''), NULLIF(%(os)s, ''),
            NULLIF(%(country)s, ''), NULLIF(%(city)s, ''), FALSE
        )
        ON CONFLICT (session_id) DO UPDATE SET
            last_seen_at = GREATEST(visitor_sessions.last_seen_at, EXCLUDED.last_seen_at),
            total_page_views = visitor_sessions.total_page_views + 1,
            device_type = COALESCE(EXCLUDED.device_type, visitor_sessions.device_type),
            browser = COALESCE(EXCLUDED.browser, visitor_sessions.browser),
            os = COALESCE(EXCLUDED.os, visitor_sessions.os),
            country = COALESCE(EXCLUDED.country, visitor_sessions.country),
            city = COALESCE(EXCLUDED.city, visitor_sessions.city)
        RETURNING {SESSION_COLUMNS}
    """


class PostgreSQLRepository:
    """
    Shared connection handling for the PostgreSQL repositories.

    Uses a psycopg2 ThreadedConnectionPool: the API server handles requests
    on a thread pool and each request needs its own transaction. The pool
    raises as soon as it is exhausted, so borrows are gated by a semaphore
    sized to pool_max_connections and callers wait for a free connection.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize the repository.

        Args:
            settings: Application settings. If None, uses get_settings().
        """
        self._settings = settings or get_settings()
        self._pool: ThreadedConnectionPool | None = None
        self._slots: threading.BoundedSemaphore | None = None
        self._schema = self._settings.postgres.schema_name

    @property
    def schema(self) -> str:
        """Get the database schema name."""
        return self._schema

    def connect(self) -> None:
        """Create the connection pool."""
        pg = self._settings.postgres
        conn_string = _add_connect_timeout(pg.connection_string)
        self._pool = ThreadedConnectionPool(
            pg.pool_min_connections, pg.pool_max_connections, conn_string
        )
        self._slots = threading.BoundedSemaphore(pg.pool_max_connections)
        logger.info("%s connected (schema=%s)", type(self).__name__, self._schema)

    @contextmanager
    def _cursor(self) -> Iterator[RealDictCursor]:
        """
        Borrow a pooled connection and run one transaction on it.

        Waits up to pool_timeout_seconds for a free connection. Commits on
        success, rolls back and re-raises on error.

        Raises:
            PoolError: If no connection frees up in time
        """
        pool, slots = self._pool, self._slots
        if pool is None or slots is None:
            raise RuntimeError("PostgreSQL connection not established. Call connect() first.")

        timeout = self._settings.postgres.pool_timeout_seconds
        if not slots.acquire(timeout=timeout):
            raise PoolError(f"no free connection after {timeout:g}s")
        try:
            conn = pool.getconn()
            try:
                with conn.cursor(cursor_factory=RealDictCursor) as cur:
                    yield cur
                conn.commit()
            except Exception:
                if not conn.closed:
                    conn.rollback()
                raise
            finally:
                pool.putconn(conn, close=bool(conn.closed))
        finally:
            slots.release()

    def close(self) -> None:
        """Close all pooled connections."""
        if self._pool:
            try:
                self._pool.closeall()
                logger.info("%s connection pool closed", type(self).__name__)
            except psycopg2.Error as e:
                logger.warning("Error closing connection pool: %s", e)
            finally:
                self._pool = None
                self._slots = None


class PostgreSQLEventRepository(PostgreSQLRepository, EventRepository):
    """
    PostgreSQL implementation of EventRepository.

    save() runs the page_views INSERT and the visitor_sessions upsert in one
    transaction, so an event is never committed without its session update.
    """

    def save(self, event: PageViewEvent) -> VisitorSession:
        """
        Persist one event and upsert its session.

        Args:
            event: Enriched event with id and created_at assigned

        Returns:
            Session row as returned by the upsert
        """
        record = event.to_db_record()
        with self._cursor() as cur:
            cur.execute(insert_event_sql(self._schema), record)
            cur.execute(upsert_session_sql(self._schema), record)
            row = cur.fetchone()

        logger.debug("Inserted page view %s for session %s", event.id, event.session_id)
        return VisitorSession.model_validate(dict(row))

    def find_between(self, start: datetime, end: datetime) -> list[PageViewEvent]:
        """Events with start <= created_at <= end, oldest first."""
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {EVENT_COLUMNS}
                FROM {self._schema}.page_views
                WHERE created_at >= %s AND created_at <= %s
                ORDER BY created_at ASC
                """,
                (start, end),
            )
            rows = cur.fetchall()
        return [PageViewEvent.model_validate(dict(row)) for row in rows]


class PostgreSQLSessionRepository(PostgreSQLRepository, SessionRepository):
    """PostgreSQL implementation of SessionRepository (read side)."""

    def get(self, session_id: str) -> VisitorSession | None:
        """Fetch one session by id."""
        with self._cursor() as cur:
            cur.execute(
                f"SELECT {SESSION_COLUMNS} FROM {self._schema}.visitor_sessions "
                "WHERE session_id = %s",
                (session_id,),
            )
            row = cur.fetchone()
        return VisitorSession.model_validate(dict(row)) if row else None

    def list_recent(self, limit: int) -> list[VisitorSession]:
        """Most recently active sessions first."""
        with self._cursor() as cur:
            cur.execute(
                f"""
                SELECT {SESSION_COLUMNS}
                FROM {self._schema}.visitor_sessions
                ORDER BY last_seen_at DESC
                LIMIT %s
                """,
                (limit,),
            )
            rows = cur.fetchall()
        return [VisitorSession.model_validate(dict(row)) for row in rows]


def check_postgresql_connection(settings: Settings | None = None) -> bool:
    """
    Check if PostgreSQL is reachable.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        True if connection successful, False otherwise
    """
    try:
        settings = settings or get_settings()
        conn_string = _add_connect_timeout(settings.postgres.connection_string)
        conn = psycopg2.connect(conn_string)
        conn.close()
        return True
    except psycopg2.Error:
        return False
