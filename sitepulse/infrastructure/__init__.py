# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Adapters for external services (ports-and-adapters architecture).

- repositories/ - Event and session stores (PostgreSQL, Valkey)
- identity_store.py - Client-local session token storage (JSON file)
"""

from sitepulse.infrastructure.identity_store import FileIdentityStore
from sitepulse.infrastructure.repositories import (
    PostgreSQLEventRepository,
    PostgreSQLSessionRepository,
    ValkeyEventRepository,
    ValkeySessionRepository,
    check_postgresql_connection,
    check_valkey_connection,
    get_valkey_client,
)

__all__ = [
    # Identity
    "FileIdentityStore",
    # Repositories
    "PostgreSQLEventRepository",
    "PostgreSQLSessionRepository",
    "ValkeyEventRepository",
    "ValkeySessionRepository",
    "check_postgresql_connection",
    "check_valkey_connection",
    "get_valkey_client",
]
