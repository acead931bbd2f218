# ==============================================================================
# Store Factory
# ==============================================================================
"""
Factory function for creating the event and session repositories.

Uses STORE_BACKEND (via config) to determine which implementation to use.
"""

from sitepulse.base.repositories import EventRepository, SessionRepository
from sitepulse.utils.config import Settings, get_settings


def create_repositories(
    settings: Settings | None = None,
) -> tuple[EventRepository, SessionRepository]:
    """
    Get unconnected repository instances based on configuration.

    The backend is determined by the STORE_BACKEND environment variable:
    - "postgresql" (default): page_views/visitor_sessions tables
    - "valkey": sorted sets and hashes under VALKEY_KEY_PREFIX

    Args:
        settings: Application settings. If None, uses get_settings().

    Returns:
        (event repository, session repository); call connect() on both

    Raises:
        ValueError: If unknown backend is configured
    """
    settings = settings or get_settings()
    backend = settings.store.backend

    match backend:
        case "postgresql":
            from sitepulse.infrastructure.repositories.postgresql import (
                PostgreSQLEventRepository,
                PostgreSQLSessionRepository,
            )

            return PostgreSQLEventRepository(settings), PostgreSQLSessionRepository(settings)
        case "valkey":
            from sitepulse.infrastructure.repositories.valkey import (
                ValkeyEventRepository,
                ValkeySessionRepository,
            )

            return (
                ValkeyEventRepository(settings=settings),
                ValkeySessionRepository(settings=settings),
            )
        case _:
            raise ValueError(
                f"Unknown store backend: '{backend}'.\n"
                "Valid options are: postgresql, valkey"
            )
