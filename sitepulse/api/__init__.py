# ==============================================================================
# HTTP API
# ==============================================================================
"""FastAPI application factory."""

from sitepulse.api.app import create_app

__all__ = ["create_app"]
