# ==============================================================================
# Application Services
# ==============================================================================
"""
Use cases composed from the core logic and the repository ports.

- IngestionService: enrich and record page views
- AnalyticsService: real-time, historical and session reads
- create_repositories: store selection from configuration
"""

from sitepulse.services.analytics import AnalyticsQueryError, AnalyticsService
from sitepulse.services.factory import create_repositories
from sitepulse.services.ingestion import InProcessTransport, IngestionService, utc_now

__all__ = [
    "AnalyticsQueryError",
    "AnalyticsService",
    "InProcessTransport",
    "IngestionService",
    "create_repositories",
    "utc_now",
]
