# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the ports of the ports-and-adapters layout.

Adapters for these live in infrastructure/ (stores) and client/ (transports).
"""

from sitepulse.base.identity_store import IdentityStore
from sitepulse.base.repositories import EventRepository, SessionRepository
from sitepulse.base.transport import AnalyticsSource, IngestTransport

__all__ = [
    "AnalyticsSource",
    "EventRepository",
    "IdentityStore",
    "IngestTransport",
    "SessionRepository",
]
