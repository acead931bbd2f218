# ==============================================================================
# Valkey Repository Implementations
# ==============================================================================
"""
Valkey/Redis implementations of the repository interfaces.

Key layout (all keys share the configured prefix):

    {prefix}:events               sorted set, member = event JSON,
                                  score = created_at in Unix ms
    {prefix}:session:{id}         hash with the session aggregate
    {prefix}:sessions:last_seen   sorted set, member = session id,
                                  score = last_seen_at in Unix ms

save() WATCHes the session hash, reads it, folds the event in with
SessionResolver and writes event, session and recency index in one
MULTI/EXEC. A concurrent write to the same session aborts the EXEC and
redis-py re-runs the read-merge-write, so same-session saves serialize
without blocking other sessions.
"""

import logging
from datetime import UTC, datetime

import redis

from sitepulse.base.repositories import EventRepository, SessionRepository
from sitepulse.core.models import PageViewEvent, VisitorSession
from sitepulse.core.session_resolver import SessionResolver
from sitepulse.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

EVENTS_KEY = "events"
SESSION_KEY = "session"
RECENCY_KEY = "sessions:last_seen"


def get_valkey_client(settings: Settings | None = None) -> redis.Redis:
    """
    Get a Valkey/Redis client connection.

    Configured with 10 second socket timeouts and a health check interval
    to keep pooled connections alive. No command-level retries: a failed
    write is reported to the caller once.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        redis.Redis client instance
    """
    settings = settings or get_settings()
    return redis.from_url(
        settings.valkey.url,
        decode_responses=True,
        socket_timeout=10,
        socket_connect_timeout=10,
        health_check_interval=30,
    )


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _from_ms(value: str) -> datetime:
    return datetime.fromtimestamp(int(value) / 1000, tz=UTC)


def _serialize_session(session: VisitorSession) -> dict:
    """Serialize a session for hash storage. None is stored as ''."""
    return {
        "session_id": session.session_id,
        "first_seen_at": str(_to_ms(session.first_seen_at)),
        "last_seen_at": str(_to_ms(session.last_seen_at)),
        "total_visits": str(session.total_visits),
        "total_page_views": str(session.total_page_views),
        "device_type": session.device_type or "",
        "browser": session.browser or "",
        "os": session.os or "",
        "country": session.country or "",
        "city": session.city or "",
        "is_returning_visitor": "1" if session.is_returning_visitor else "0",
    }


def _parse_session(data: dict) -> VisitorSession | None:
    """Parse raw hash data into a session; None for a missing hash."""
    if not data:
        return None
    return VisitorSession(
        session_id=data["session_id"],
        first_seen_at=_from_ms(data["first_seen_at"]),
        last_seen_at=_from_ms(data["last_seen_at"]),
        total_visits=int(data.get("total_visits", 1)),
        total_page_views=int(data.get("total_page_views", 1)),
        device_type=data.get("device_type") or None,
        browser=data.get("browser") or None,
        os=data.get("os") or None,
        country=data.get("country") or None,
        city=data.get("city") or None,
        is_returning_visitor=data.get("is_returning_visitor") == "1",
    )


class ValkeyRepository:
    """Shared client handling and key naming for the Valkey repositories."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        settings: Settings | None = None,
        key_prefix: str | None = None,
    ):
        """
        Initialize the repository.

        Args:
            client: Redis client instance. If None, one is created on connect().
            settings: Application settings. If None, uses get_settings().
            key_prefix: Key namespace. Defaults to settings.valkey.key_prefix.
        """
        self._settings = settings or get_settings()
        self._client = client
        self._owns_client = client is None
        self._prefix = key_prefix or self._settings.valkey.key_prefix

    @property
    def client(self) -> redis.Redis:
        """Get the underlying Redis client."""
        if self._client is None:
            raise RuntimeError("Valkey connection not established. Call connect() first.")
        return self._client

    @property
    def events_key(self) -> str:
        return f"{self._prefix}:{EVENTS_KEY}"

    @property
    def recency_key(self) -> str:
        return f"{self._prefix}:{RECENCY_KEY}"

    def session_key(self, session_id: str) -> str:
        """Generate the key for a session hash."""
        return f"{self._prefix}:{SESSION_KEY}:{session_id}"

    def connect(self) -> None:
        """Create the client if needed and verify the server answers."""
        if self._client is None:
            self._client = get_valkey_client(self._settings)
        self._client.ping()
        logger.info("%s connected (prefix=%s)", type(self).__name__, self._prefix)

    def close(self) -> None:
        """Close the client if this repository created it."""
        if self._client is not None and self._owns_client:
            try:
                self._client.close()
            except redis.RedisError as e:
                logger.warning("Error closing Valkey client: %s", e)
            finally:
                self._client = None


class ValkeyEventRepository(ValkeyRepository, EventRepository):
    """Valkey implementation of EventRepository."""

    def __init__(
        self,
        client: redis.Redis | None = None,
        settings: Settings | None = None,
        key_prefix: str | None = None,
        resolver: SessionResolver | None = None,
    ):
        super().__init__(client=client, settings=settings, key_prefix=key_prefix)
        self._resolver = resolver or SessionResolver()

    def save(self, event: PageViewEvent) -> VisitorSession:
        """
        Persist one event and upsert its session in a single transaction.

        Args:
            event: Enriched event with id and created_at assigned

        Returns:
            Session as written by the transaction
        """
        session_key = self.session_key(event.session_id)

        def apply(pipe: redis.client.Pipeline) -> VisitorSession:
            # Immediate mode after WATCH: reads return values directly
            current = _parse_session(pipe.hgetall(session_key))
            session = self._resolver.resolve(current, event)
            pipe.multi()
            pipe.zadd(self.events_key, {event.to_json(): event.created_at_ms})
            pipe.hset(session_key, mapping=_serialize_session(session))
            pipe.zadd(self.recency_key, {session.session_id: _to_ms(session.last_seen_at)})
            return session

        session = self.client.transaction(apply, session_key, value_from_callable=True)
        logger.debug("Stored page view %s for session %s", event.id, event.session_id)
        return session

    def find_between(self, start: datetime, end: datetime) -> list[PageViewEvent]:
        """Events with start <= created_at <= end, oldest first."""
        members = self.client.zrangebyscore(
            self.events_key, _to_ms(start) - 1, _to_ms(end) + 1
        )
        events = [PageViewEvent.from_json(member) for member in members]
        # Scores are ms-truncated; the JSON keeps full precision
        return [e for e in events if start <= e.created_at <= end]


class ValkeySessionRepository(ValkeyRepository, SessionRepository):
    """Valkey implementation of SessionRepository (read side)."""

    def get(self, session_id: str) -> VisitorSession | None:
        """Fetch one session by id."""
        return _parse_session(self.client.hgetall(self.session_key(session_id)))

    def list_recent(self, limit: int) -> list[VisitorSession]:
        """Most recently active sessions first, via the recency index."""
        if limit <= 0:
            return []

        session_ids = self.client.zrevrange(self.recency_key, 0, limit - 1)
        if not session_ids:
            return []

        pipe = self.client.pipeline(transaction=False)
        for session_id in session_ids:
            pipe.hgetall(self.session_key(session_id))
        results = pipe.execute()

        sessions = []
        for data in results:
            session = _parse_session(data)
            if session is not None:
                sessions.append(session)
        return sessions


def check_valkey_connection(settings: Settings | None = None) -> bool:
    """
    Check if Valkey is reachable.

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        True if connection successful, False otherwise
    """
    try:
        client = get_valkey_client(settings)
        client.ping()
        client.close()
        return True
    except redis.RedisError:
        return False
