# ==============================================================================
# Client Transport Abstract Base Classes
# ==============================================================================
"""
Interfaces the client side talks to.

- IngestTransport: delivers one tracking request to the ingestion endpoint
- AnalyticsSource: the dashboard read operations and a single-session lookup

Both have an in-process implementation (services/) and an HTTP one
(client/http.py), so trackers and pollers work the same either way.
"""

from abc import ABC, abstractmethod

from sitepulse.core.models import DailyBucket, RealTimeSnapshot, TrackRequest, VisitorSession


class IngestTransport(ABC):
    """Delivers page views to the ingestion endpoint."""

    @abstractmethod
    def send(self, request: TrackRequest) -> None:
        """
        Deliver one tracking request.

        Raises on delivery failure; the tracker decides what to do with it.
        """
        ...

    def close(self) -> None:
        """Release resources. No-op by default."""


class AnalyticsSource(ABC):
    """Dashboard read operations."""

    @abstractmethod
    def get_real_time_analytics(self) -> RealTimeSnapshot:
        """Current real-time snapshot."""
        ...

    @abstractmethod
    def get_historical_analytics(self, days: int = 30) -> list[DailyBucket]:
        """Per-day page views and unique visitors over the last `days` days."""
        ...

    @abstractmethod
    def get_visitor_sessions(self, limit: int | None = None) -> list[VisitorSession]:
        """Most recently active sessions."""
        ...

    @abstractmethod
    def get_visitor_session(self, session_id: str) -> VisitorSession | None:
        """One session by id, or None if it has never been seen."""
        ...
