# ==============================================================================
# SitePulse Utilities
# ==============================================================================
"""
Shared utilities: configuration, schema management, paths and versions.
"""

from sitepulse.utils.config import (
    AnalyticsSettings,
    ApiSettings,
    ClientSettings,
    PostgresSettings,
    Settings,
    StoreSettings,
    ValkeySettings,
    get_settings,
)
from sitepulse.utils.db import (
    ensure_schema,
    reset_schema,
)

__all__ = [
    # Config
    "AnalyticsSettings",
    "ApiSettings",
    "ClientSettings",
    "PostgresSettings",
    "Settings",
    "StoreSettings",
    "ValkeySettings",
    "get_settings",
    # Database
    "ensure_schema",
    "reset_schema",
]
