# ==============================================================================
# Page View Tracker
# ==============================================================================
"""
Fire-and-forget page view tracking.

track_page_view() returns immediately: the send runs on a background
executor. At most one send is in flight per tracker; a call made while one
is in flight is dropped. Delivery errors are logged and swallowed so they
never reach the host application.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from sitepulse.base.transport import IngestTransport
from sitepulse.client.identity import SessionIdentityManager
from sitepulse.core.models import TrackRequest

logger = logging.getLogger(__name__)


class PageViewTracker:
    """Sends page views for one client through an IngestTransport."""

    def __init__(
        self,
        identity: SessionIdentityManager,
        transport: IngestTransport,
        user_agent: str = "",
        referrer: str = "",
        executor: ThreadPoolExecutor | None = None,
    ):
        """
        Initialize the tracker.

        Args:
            identity: Provides the session id attached to every view
            transport: Delivers requests to the ingestion endpoint
            user_agent: User agent reported for this client
            referrer: Referrer reported for this client
            executor: Executor for sends. If None, a single-worker pool is
                created and shut down by close().
        """
        self._identity = identity
        self._transport = transport
        self._user_agent = user_agent
        self._referrer = referrer
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="sitepulse-tracker"
        )
        self._in_flight = threading.Lock()

    @property
    def in_flight(self) -> bool:
        """True while a send is running."""
        return self._in_flight.locked()

    def track_page_view(self, page_path: str, page_title: str = "") -> Future | None:
        """
        Record a page view without blocking the caller.

        Args:
            page_path: Path of the viewed page
            page_title: Document title

        Returns:
            Future of the background send, or None if the call was dropped
        """
        if not self._in_flight.acquire(blocking=False):
            logger.debug("Tracking already in flight, dropping view of %s", page_path)
            return None

        try:
            request = TrackRequest(
                page_path=page_path,
                page_title=page_title or None,
                session_id=self._identity.get_or_create_session_id(),
                referrer=self._referrer or None,
                user_agent=self._user_agent or None,
            )
            return self._executor.submit(self._send, request)
        except Exception as e:
            self._in_flight.release()
            logger.error("Failed to track page view %s: %s", page_path, e)
            return None

    def _send(self, request: TrackRequest) -> None:
        try:
            self._transport.send(request)
        except Exception as e:
            logger.error("Failed to track page view %s: %s", request.page_path, e)
        finally:
            self._in_flight.release()

    def close(self) -> None:
        """Wait for the in-flight send, then release executor and transport."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        self._transport.close()
