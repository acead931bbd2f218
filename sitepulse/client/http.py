# ==============================================================================
# HTTP Client Adapters
# ==============================================================================
"""
requests-based adapters for talking to a running SitePulse API.

- HttpIngestTransport: POST /api/track
- HttpAnalyticsClient: the analytics reads, authenticated with the
  X-API-Key header
"""

import logging
from urllib.parse import quote

import requests

from sitepulse.base.transport import AnalyticsSource, IngestTransport
from sitepulse.core.models import DailyBucket, RealTimeSnapshot, TrackRequest, VisitorSession
from sitepulse.services.analytics import AnalyticsQueryError

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


class HttpIngestTransport(IngestTransport):
    """Posts tracking requests to /api/track."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self._url = f"{endpoint.rstrip('/')}/api/track"
        self._timeout = timeout
        self._session = session or requests.Session()

    def send(self, request: TrackRequest) -> None:
        response = self._session.post(
            self._url,
            json=request.model_dump(exclude_none=True),
            timeout=self._timeout,
        )
        response.raise_for_status()

    def close(self) -> None:
        self._session.close()


class HttpAnalyticsClient(AnalyticsSource):
    """
    AnalyticsSource backed by the HTTP API.

    Real-time reads mirror the server: a failed request yields an all-zero
    snapshot. Historical and session reads raise AnalyticsQueryError.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self._base_url = endpoint.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        if api_key:
            self._session.headers[API_KEY_HEADER] = api_key

    def _get(self, path: str, params: dict | None = None):
        try:
            response = self._session.get(
                f"{self._base_url}{path}", params=params, timeout=self._timeout
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            detail = _error_detail(e.response)
            raise AnalyticsQueryError(f"GET {path} failed: {detail}") from e
        except requests.RequestException as e:
            raise AnalyticsQueryError(f"GET {path} failed: {e}") from e

    def get_real_time_analytics(self) -> RealTimeSnapshot:
        try:
            return RealTimeSnapshot.model_validate(self._get("/api/analytics/realtime"))
        except AnalyticsQueryError as e:
            logger.error("Real-time analytics request failed: %s", e)
            return RealTimeSnapshot.empty()

    def get_historical_analytics(self, days: int = 30) -> list[DailyBucket]:
        data = self._get("/api/analytics/historical", {"days": days})
        return [DailyBucket.model_validate(item) for item in data]

    def get_visitor_sessions(self, limit: int | None = None) -> list[VisitorSession]:
        params = {"limit": limit} if limit is not None else None
        data = self._get("/api/analytics/sessions", params)
        return [VisitorSession.model_validate(item) for item in data]

    def get_visitor_session(self, session_id: str) -> VisitorSession | None:
        try:
            response = self._session.get(
                f"{self._base_url}/api/analytics/sessions/{quote(session_id, safe='')}",
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise AnalyticsQueryError(f"GET session {session_id} failed: {e}") from e
        if response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            detail = _error_detail(e.response)
            raise AnalyticsQueryError(f"GET session {session_id} failed: {detail}") from e
        return VisitorSession.model_validate(response.json())

    def close(self) -> None:
        self._session.close()


def _error_detail(response: requests.Response | None) -> str:
    if response is None:
        return "no response"
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    return f"{response.status_code} {detail or response.reason}"
