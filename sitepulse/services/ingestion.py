# ==============================================================================
# Ingestion Service
# ==============================================================================
"""
Server-side handling of one tracked page view.

Enriches the request from its user agent, assigns id and timestamp, and hands
the event to the EventRepository, which stores it and upserts the session in
one transaction.

A storage failure is logged and swallowed: the event is lost and is not
retried. The caller (HTTP endpoint or in-process transport) still reports the
request as accepted.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from sitepulse.base.repositories import EventRepository
from sitepulse.base.transport import IngestTransport
from sitepulse.core.models import PageViewEvent, TrackRequest
from sitepulse.core.user_agent import enrich

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class IngestionService:
    """Turns tracking requests into stored page-view events."""

    def __init__(self, event_repo: EventRepository, clock: Callable[[], datetime] = utc_now):
        """
        Initialize the service.

        Args:
            event_repo: Connected event repository
            clock: Source of server timestamps
        """
        self._event_repo = event_repo
        self._clock = clock

    def build_event(
        self,
        request: TrackRequest,
        user_agent: str | None = None,
        referrer: str | None = None,
    ) -> PageViewEvent:
        """
        Build the enriched event for a request.

        Values in the request body take precedence over the transport-level
        user agent and referrer.
        """
        ua = request.user_agent or user_agent or ""
        return PageViewEvent(
            id=str(uuid.uuid4()),
            page_path=request.page_path,
            page_title=request.page_title or None,
            session_id=request.session_id,
            user_agent=ua,
            referrer=request.referrer or referrer or "",
            created_at=self._clock(),
            **enrich(ua),
        )

    def ingest(
        self,
        request: TrackRequest,
        user_agent: str | None = None,
        referrer: str | None = None,
    ) -> PageViewEvent | None:
        """
        Record one page view.

        Args:
            request: Validated tracking request
            user_agent: User-Agent header, used when the body has none
            referrer: Referer header, used when the body has none

        Returns:
            The stored event, or None if storing it failed
        """
        event = self.build_event(request, user_agent, referrer)
        try:
            self._event_repo.save(event)
        except Exception as e:
            logger.error(
                "Dropped page view %s for session %s: %s", event.page_path, event.session_id, e
            )
            return None

        logger.debug("Recorded page view %s (%s)", event.page_path, event.device_type.value)
        return event


class InProcessTransport(IngestTransport):
    """IngestTransport that calls an IngestionService directly."""

    def __init__(self, service: IngestionService, user_agent: str | None = None):
        self._service = service
        self._user_agent = user_agent

    def send(self, request: TrackRequest) -> None:
        self._service.ingest(request, user_agent=self._user_agent)
