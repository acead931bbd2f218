# ==============================================================================
# Core Domain Logic
# ==============================================================================
"""
Pure domain logic with no external dependencies.

This module contains:
- Domain models (PageViewEvent, VisitorSession, read models)
- User-agent enrichment
- Session merge rule (SessionResolver)
- Windowed aggregations for the real-time and historical engines

All code here is framework-agnostic and easily unit-testable.
"""

from sitepulse.core.aggregations import build_snapshot, daily_buckets
from sitepulse.core.models import (
    DailyBucket,
    DeviceType,
    PageCount,
    PageViewEvent,
    RealTimeSnapshot,
    TrackRequest,
    VisitorSession,
)
from sitepulse.core.session_resolver import SessionResolver
from sitepulse.core.user_agent import enrich

__all__ = [
    "DailyBucket",
    "DeviceType",
    "PageCount",
    "PageViewEvent",
    "RealTimeSnapshot",
    "SessionResolver",
    "TrackRequest",
    "VisitorSession",
    "build_snapshot",
    "daily_buckets",
    "enrich",
]
