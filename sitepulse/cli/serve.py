# ==============================================================================
# Serve Command
# ==============================================================================
"""
Runs the SitePulse HTTP API with uvicorn.
"""

import logging
from typing import Annotated, Optional

import typer

from sitepulse.cli.shared import configure_logging
from sitepulse.utils.config import get_settings
from sitepulse.utils.versions import get_package_version, get_sitepulse_version

logger = logging.getLogger(__name__)


def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port")] = None,
) -> None:
    """Start the HTTP API (tracking and analytics endpoints).

    Examples:
        sitepulse serve
        sitepulse serve --host 0.0.0.0 --port 8080
    """
    import uvicorn

    from sitepulse.api.app import create_app

    settings = get_settings()
    configure_logging(settings.log_level)

    host = host or settings.api.host
    port = port or settings.api.port
    logger.info(
        "Starting SitePulse %s on %s:%d (fastapi %s, store=%s)",
        get_sitepulse_version(),
        host,
        port,
        get_package_version("fastapi"),
        settings.store.backend,
    )

    uvicorn.run(create_app(settings=settings), host=host, port=port, log_config=None)
