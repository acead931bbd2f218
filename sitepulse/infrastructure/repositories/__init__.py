# ==============================================================================
# Event and Session Store Adapters
# ==============================================================================
"""
Store adapters implementing the repository interfaces from base/repositories.py.

Currently supported:
- PostgreSQL (postgresql.py): INSERT ... ON CONFLICT session upsert
- Valkey (valkey.py): WATCH/MULTI session upsert
"""

from sitepulse.infrastructure.repositories.postgresql import (
    PostgreSQLEventRepository,
    PostgreSQLSessionRepository,
    check_postgresql_connection,
)
from sitepulse.infrastructure.repositories.valkey import (
    ValkeyEventRepository,
    ValkeySessionRepository,
    check_valkey_connection,
    get_valkey_client,
)

__all__ = [
    "PostgreSQLEventRepository",
    "PostgreSQLSessionRepository",
    "ValkeyEventRepository",
    "ValkeySessionRepository",
    "check_postgresql_connection",
    "check_valkey_connection",
    "get_valkey_client",
]
