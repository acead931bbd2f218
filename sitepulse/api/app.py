# ==============================================================================
# HTTP API
# ==============================================================================
"""
FastAPI application exposing ingestion and the analytics reads.

Endpoints:
- POST /api/track                   public, records one page view (202)
- GET  /api/analytics/realtime      X-API-Key required
- GET  /api/analytics/historical    X-API-Key required, ?days=N
- GET  /api/analytics/sessions      X-API-Key required, ?limit=N
- GET  /api/analytics/sessions/{id} X-API-Key required, 404 if unknown
- GET  /health

Endpoints are plain (sync) functions so FastAPI runs them in its threadpool;
the store adapters are blocking.
"""

import logging
import secrets
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware

from sitepulse.base.repositories import EventRepository, SessionRepository
from sitepulse.core.models import DailyBucket, RealTimeSnapshot, TrackRequest, VisitorSession
from sitepulse.services.analytics import AnalyticsQueryError, AnalyticsService
from sitepulse.services.factory import create_repositories
from sitepulse.services.ingestion import IngestionService, utc_now
from sitepulse.utils.config import Settings, get_settings
from sitepulse.utils.versions import get_sitepulse_version

logger = logging.getLogger(__name__)


def create_app(
    event_repo: EventRepository | None = None,
    session_repo: SessionRepository | None = None,
    settings: Settings | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Build the API application.

    Repositories are connected on startup and closed on shutdown.

    Args:
        event_repo: Event store. If None, both stores come from create_repositories().
        session_repo: Session store. If None, both stores come from create_repositories().
        settings: Application settings. If None, uses get_settings().
        clock: Server time source

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    if event_repo is None or session_repo is None:
        event_repo, session_repo = create_repositories(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        event_repo.connect()
        session_repo.connect()
        if not settings.api.read_key:
            logger.warning("API_READ_KEY is not set; analytics reads will be rejected")
        logger.info(
            "SitePulse API %s started (store=%s)",
            get_sitepulse_version(),
            settings.store.backend,
        )
        try:
            yield
        finally:
            event_repo.close()
            session_repo.close()
            logger.info("SitePulse API stopped")

    app = FastAPI(title="SitePulse", version=get_sitepulse_version(), lifespan=lifespan)
    app.state.settings = settings
    app.state.ingestion = IngestionService(event_repo, clock=clock)
    app.state.analytics = AnalyticsService(
        event_repo, session_repo, settings.analytics, clock=clock
    )

    # Tracking is posted cross-origin from the instrumented site
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    _register_routes(app)
    return app


# ==============================================================================
# Dependencies
# ==============================================================================


def get_ingestion(request: Request) -> IngestionService:
    return request.app.state.ingestion


def get_analytics(request: Request) -> AnalyticsService:
    return request.app.state.analytics


def require_api_key(
    request: Request,
    x_api_key: Annotated[str | None, Header()] = None,
) -> None:
    """Reject analytics reads without the configured X-API-Key."""
    expected = request.app.state.settings.api.read_key
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid API key",
        )


# ==============================================================================
# Routes
# ==============================================================================


def _register_routes(app: FastAPI) -> None:
    @app.post("/api/track", status_code=status.HTTP_202_ACCEPTED)
    def track(
        payload: TrackRequest,
        ingestion: Annotated[IngestionService, Depends(get_ingestion)],
        user_agent: Annotated[str | None, Header()] = None,
        referer: Annotated[str | None, Header()] = None,
    ) -> dict:
        """Record a page view. Storage failures are logged, never reported."""
        ingestion.ingest(payload, user_agent=user_agent, referrer=referer)
        return {"status": "accepted"}

    @app.get(
        "/api/analytics/realtime",
        response_model=RealTimeSnapshot,
        dependencies=[Depends(require_api_key)],
    )
    def realtime(analytics: Annotated[AnalyticsService, Depends(get_analytics)]):
        return analytics.get_real_time_analytics()

    @app.get(
        "/api/analytics/historical",
        response_model=list[DailyBucket],
        dependencies=[Depends(require_api_key)],
    )
    def historical(
        analytics: Annotated[AnalyticsService, Depends(get_analytics)],
        days: Annotated[int | None, Query(ge=1)] = None,
    ):
        try:
            return analytics.get_historical_analytics(days)
        except ValueError as e:
            raise HTTPException(422, detail=str(e)) from e
        except AnalyticsQueryError as e:
            raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    @app.get(
        "/api/analytics/sessions",
        response_model=list[VisitorSession],
        dependencies=[Depends(require_api_key)],
    )
    def sessions(
        analytics: Annotated[AnalyticsService, Depends(get_analytics)],
        limit: Annotated[int | None, Query(ge=1, le=1000)] = None,
    ):
        try:
            return analytics.get_visitor_sessions(limit)
        except AnalyticsQueryError as e:
            raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    @app.get(
        "/api/analytics/sessions/{session_id}",
        response_model=VisitorSession,
        dependencies=[Depends(require_api_key)],
    )
    def session_detail(
        session_id: str,
        analytics: Annotated[AnalyticsService, Depends(get_analytics)],
    ):
        try:
            session = analytics.get_visitor_session(session_id)
        except AnalyticsQueryError as e:
            raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
        if session is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Session not found")
        return session

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "version": get_sitepulse_version()}
