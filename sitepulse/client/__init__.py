# ==============================================================================
# Tracking and Dashboard Client
# ==============================================================================
"""
Client-side components.

- SessionIdentityManager: stable session token per client
- PageViewTracker: fire-and-forget page view tracking
- HttpIngestTransport / HttpAnalyticsClient: talk to a running API
- AnalyticsPoller: keeps dashboard state fresh
"""

from sitepulse.client.http import HttpAnalyticsClient, HttpIngestTransport
from sitepulse.client.identity import SessionIdentityManager, generate_session_id
from sitepulse.client.poller import AnalyticsPoller, DashboardState, Section
from sitepulse.client.tracker import PageViewTracker

__all__ = [
    "AnalyticsPoller",
    "DashboardState",
    "HttpAnalyticsClient",
    "HttpIngestTransport",
    "PageViewTracker",
    "Section",
    "SessionIdentityManager",
    "generate_session_id",
]
