# ==============================================================================
# Analytics Service
# ==============================================================================
"""
Read side: real-time snapshot, historical rollup, session listing and lookup.

Every call reads the store fresh and computes the result with the pure
functions in core/aggregations.py. Nothing is cached between calls.

Failure handling differs per operation:
- Real-time: logged, an all-zero snapshot is returned
- Historical, sessions and session lookup: AnalyticsQueryError with the underlying reason
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sitepulse.base.repositories import EventRepository, SessionRepository
from sitepulse.base.transport import AnalyticsSource
from sitepulse.core.aggregations import build_snapshot, daily_buckets
from sitepulse.core.models import DailyBucket, RealTimeSnapshot, VisitorSession
from sitepulse.services.ingestion import utc_now
from sitepulse.utils.config import AnalyticsSettings

logger = logging.getLogger(__name__)


class AnalyticsQueryError(RuntimeError):
    """A historical or session read could not be completed."""


class AnalyticsService(AnalyticsSource):
    """Computes dashboard read models from the event and session stores."""

    def __init__(
        self,
        event_repo: EventRepository,
        session_repo: SessionRepository,
        settings: AnalyticsSettings | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the service.

        Args:
            event_repo: Connected event repository
            session_repo: Connected session repository
            settings: Windows and limits. Defaults to AnalyticsSettings().
            clock: Reference time source for all windows
        """
        self._event_repo = event_repo
        self._session_repo = session_repo
        self._settings = settings or AnalyticsSettings()
        self._clock = clock

    @property
    def settings(self) -> AnalyticsSettings:
        return self._settings

    def get_real_time_analytics(self) -> RealTimeSnapshot:
        """
        Snapshot of the last 24 hours relative to now.

        Returns:
            RealTimeSnapshot; all zeros if the store could not be read
        """
        now = self._clock()
        today_window = timedelta(hours=self._settings.today_window_hours)
        try:
            events = self._event_repo.find_between(now - today_window, now)
        except Exception as e:
            logger.error("Real-time analytics query failed: %s", e)
            return RealTimeSnapshot.empty(now)

        return build_snapshot(
            events,
            now,
            active_window=timedelta(minutes=self._settings.active_window_minutes),
            today_window=today_window,
            top_limit=self._settings.top_pages_limit,
        )

    def get_historical_analytics(self, days: int | None = None) -> list[DailyBucket]:
        """
        Per-UTC-date page views and unique visitors over the last `days` days.

        Args:
            days: Look-back in days, 1..max_history_days. Defaults to
                default_history_days.

        Returns:
            Buckets in chronological order; dates without events are omitted

        Raises:
            ValueError: If days is out of range
            AnalyticsQueryError: If the store could not be read
        """
        if days is None:
            days = self._settings.default_history_days
        if not 1 <= days <= self._settings.max_history_days:
            raise ValueError(
                f"days must be between 1 and {self._settings.max_history_days}, got {days}"
            )

        now = self._clock()
        try:
            events = self._event_repo.find_between(now - timedelta(days=days), now)
        except Exception as e:
            logger.error("Historical analytics query failed (days=%d): %s", days, e)
            raise AnalyticsQueryError(f"Historical analytics query failed: {e}") from e

        return daily_buckets(events)

    def get_visitor_sessions(self, limit: int | None = None) -> list[VisitorSession]:
        """
        Most recently active sessions.

        Args:
            limit: Maximum number of sessions. Defaults to sessions_limit.

        Raises:
            ValueError: If limit is not positive
            AnalyticsQueryError: If the store could not be read
        """
        if limit is None:
            limit = self._settings.sessions_limit
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        try:
            return self._session_repo.list_recent(limit)
        except Exception as e:
            logger.error("Session listing failed: %s", e)
            raise AnalyticsQueryError(f"Session listing failed: {e}") from e

    def get_visitor_session(self, session_id: str) -> VisitorSession | None:
        """
        Look up one session aggregate.

        Raises:
            AnalyticsQueryError: If the store could not be read
        """
        try:
            return self._session_repo.get(session_id)
        except Exception as e:
            logger.error("Session lookup failed for %s: %s", session_id, e)
            raise AnalyticsQueryError(f"Session lookup failed: {e}") from e
