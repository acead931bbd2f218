# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for SitePulse.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- analytics.py: realtime / history / sessions reads
- db.py, config.py, status.py: operator tasks
- serve.py, track.py, watch.py: API server, manual tracking, live dashboard
"""

from sitepulse.cli.shared import (
    # Constants
    BOX_WIDTH,
    # Classes
    Box,
    Colors,
    Icons,
    # Aliases
    B,
    C,
    I,
    # Helpers
    analytics_source,
    configure_logging,
    ingest_transport,
)

__all__ = [
    "BOX_WIDTH",
    "B",
    "Box",
    "C",
    "Colors",
    "I",
    "Icons",
    "analytics_source",
    "configure_logging",
    "ingest_transport",
]
