# ==============================================================================
# Repository Abstract Base Classes
# ==============================================================================
"""
Repository ABCs for page-view and session persistence.

These define the "what" (record a page view, read windows of events, list
sessions) not the "how" (SQL upsert vs. Valkey transaction). Concrete
implementations live in infrastructure/repositories/.

Includes:
- EventRepository: append-only page views, plus the session upsert that
  must be applied atomically with each write
- SessionRepository: read access to the session aggregates
"""

from abc import ABC, abstractmethod
from datetime import datetime

from sitepulse.core.models import PageViewEvent, VisitorSession


class EventRepository(ABC):
    """Repository for page-view events."""

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data store."""
        ...

    @abstractmethod
    def save(self, event: PageViewEvent) -> VisitorSession:
        """
        Persist one event and fold it into its session.

        The event insert and the session insert-or-update happen in a single
        store transaction. Concurrent saves for the same session id are
        serialized by the store; saves for different session ids are not.

        Args:
            event: Fully enriched event with id and created_at assigned

        Returns:
            The session aggregate after this event
        """
        ...

    @abstractmethod
    def find_between(self, start: datetime, end: datetime) -> list[PageViewEvent]:
        """
        Events with start <= created_at <= end.

        Args:
            start: Inclusive lower bound
            end: Inclusive upper bound

        Returns:
            Events ordered by created_at ascending
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        ...


class SessionRepository(ABC):
    """Repository for visitor session aggregates."""

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the data store."""
        ...

    @abstractmethod
    def get(self, session_id: str) -> VisitorSession | None:
        """
        Fetch one session.

        Args:
            session_id: Session token

        Returns:
            The session, or None if no event was recorded for it
        """
        ...

    @abstractmethod
    def list_recent(self, limit: int) -> list[VisitorSession]:
        """
        Most recently active sessions.

        Args:
            limit: Maximum number of sessions

        Returns:
            Sessions ordered by last_seen_at descending
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close connection and release resources."""
        ...
