# ==============================================================================
# Dashboard Poller
# ==============================================================================
"""
Keeps a dashboard's view of the analytics fresh.

Each of the three sections (realtime, historical, sessions) tracks its data,
a loading flag, the last error and when it was last updated. Requests are
numbered per section and a result is applied only if no later request for
that section has been applied already, so a slow response can never
overwrite a newer one.

start() performs a full refresh and then refreshes the real-time section
every interval on a daemon thread. stop() ends the loop and bumps a
generation counter: results of requests issued before stop() are discarded.
"""

import copy
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sitepulse.base.transport import AnalyticsSource

logger = logging.getLogger(__name__)

SECTIONS = ("realtime", "historical", "sessions")


@dataclass
class Section:
    """State of one dashboard section."""

    data: Any = None
    loading: bool = False
    error: str | None = None
    updated_at: datetime | None = None


@dataclass
class DashboardState:
    """State of the whole dashboard."""

    realtime: Section = field(default_factory=Section)
    historical: Section = field(default_factory=Section)
    sessions: Section = field(default_factory=Section)


class AnalyticsPoller:
    """Polls an AnalyticsSource and keeps a DashboardState current."""

    def __init__(
        self,
        source: AnalyticsSource,
        interval_seconds: float = 30.0,
        history_days: int = 30,
        sessions_limit: int | None = None,
    ):
        """
        Initialize the poller.

        Args:
            source: In-process AnalyticsService or HttpAnalyticsClient
            interval_seconds: Real-time refresh interval
            history_days: Look-back used by refresh_historical() by default
            sessions_limit: Limit passed to the session listing
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self._source = source
        self._interval = interval_seconds
        self._history_days = history_days
        self._sessions_limit = sessions_limit

        self._state = DashboardState()
        self._lock = threading.Lock()
        self._issued = dict.fromkeys(SECTIONS, 0)
        self._applied = dict.fromkeys(SECTIONS, 0)
        self._generation = 0

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ==========================================================================
    # State
    # ==========================================================================

    @property
    def state(self) -> DashboardState:
        """Consistent copy of the current dashboard state."""
        with self._lock:
            return copy.deepcopy(self._state)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _begin(self, name: str) -> tuple[int, int]:
        with self._lock:
            self._issued[name] += 1
            getattr(self._state, name).loading = True
            return self._issued[name], self._generation

    def _finish(
        self,
        name: str,
        seq: int,
        generation: int,
        data: Any = None,
        error: str | None = None,
    ) -> bool:
        with self._lock:
            if generation != self._generation or seq <= self._applied[name]:
                logger.debug("Discarding stale %s result (request %d)", name, seq)
                return False

            self._applied[name] = seq
            section = getattr(self._state, name)
            section.loading = self._issued[name] > seq
            if error is None:
                section.data = data
                section.error = None
                section.updated_at = datetime.now(UTC)
            else:
                # Previous data stays visible next to the error
                section.error = error
            return True

    def _refresh(self, name: str, fetch: Callable[[], Any]) -> bool:
        seq, generation = self._begin(name)
        try:
            data = fetch()
        except Exception as e:
            logger.warning("Refreshing %s failed: %s", name, e)
            return self._finish(name, seq, generation, error=str(e) or type(e).__name__)
        return self._finish(name, seq, generation, data=data)

    # ==========================================================================
    # Refresh Operations
    # ==========================================================================

    def refresh_realtime(self) -> bool:
        """
        Fetch the real-time snapshot.

        Returns:
            True if the result was applied, False if it was superseded
        """
        return self._refresh("realtime", self._source.get_real_time_analytics)

    def refresh_historical(self, days: int | None = None) -> bool:
        """Fetch the historical rollup for `days` (default: history_days)."""
        days = days or self._history_days
        return self._refresh("historical", lambda: self._source.get_historical_analytics(days))

    def refresh_sessions(self) -> bool:
        """Fetch the session listing."""
        return self._refresh(
            "sessions", lambda: self._source.get_visitor_sessions(self._sessions_limit)
        )

    def refresh_all(self) -> None:
        """Refresh all three sections."""
        self.refresh_realtime()
        self.refresh_historical()
        self.refresh_sessions()

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def start(self) -> None:
        """Start polling on a daemon thread. No-op if already running."""
        if self.running:
            return

        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stop_event,),
            name="sitepulse-poller",
            daemon=True,
        )
        self._thread.start()
        logger.info("Dashboard poller started (interval=%.1fs)", self._interval)

    def _run(self, stop_event: threading.Event) -> None:
        self.refresh_all()
        while not stop_event.wait(self._interval):
            self.refresh_realtime()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop polling. Results of requests still in flight are discarded.

        Args:
            timeout: Seconds to wait for the polling thread to exit
        """
        with self._lock:
            self._generation += 1
            for name in SECTIONS:
                getattr(self._state, name).loading = False

        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Dashboard poller stopped")
