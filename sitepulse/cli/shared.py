# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared utilities, constants, and helper functions used across CLI command modules.

This module provides:
- ANSI color codes and box-drawing characters
- Logging setup for CLI entry points
- Context managers that open an analytics source or ingest transport,
  either in-process (store from configuration) or over HTTP (--remote)
- Box drawing helpers for formatted output
"""

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager

import psycopg2
import redis
import typer

from sitepulse.base.transport import AnalyticsSource, IngestTransport
from sitepulse.utils.config import get_settings

# ==============================================================================
# Constants
# ==============================================================================

# Box drawing width (unified for all commands)
BOX_WIDTH = 68

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are noisy at INFO
NOISY_LOGGERS = ("urllib3", "httpx", "uvicorn.access")


# ==============================================================================
# ANSI Colors and Box Drawing
# ==============================================================================


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Colors
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Bright colors
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


class Box:
    """Unicode box-drawing characters."""

    H = "─"  # horizontal
    V = "│"  # vertical
    TL = "┌"  # top-left
    TR = "┐"  # top-right
    BL = "└"  # bottom-left
    BR = "┘"  # bottom-right
    LT = "├"  # left-tee
    RT = "┤"  # right-tee


class Icons:
    """Status icons using Unicode symbols."""

    CHECK = "✓"
    CROSS = "✗"
    WARN = "!"
    BULLET = "•"
    ARROW = "→"
    DATABASE = "◆"


# Module-level aliases for convenience
C, B, I = Colors, Box, Icons


# ==============================================================================
# Logging
# ==============================================================================


def configure_logging(level: str = "WARNING") -> None:
    """
    Configure root logging for a CLI entry point.

    Args:
        level: Log level name (e.g. "INFO")
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# ==============================================================================
# Store / API Access
# ==============================================================================

STORE_ERRORS = (psycopg2.Error, redis.RedisError)


def _fail(message: str) -> None:
    print(f"{C.BRIGHT_RED}{I.CROSS} {message}{C.RESET}")
    raise typer.Exit(1)


@contextmanager
def open_stores():
    """Connected (event repository, session repository) from configuration."""
    from sitepulse.services.factory import create_repositories

    settings = get_settings()
    event_repo, session_repo = create_repositories(settings)
    try:
        event_repo.connect()
        session_repo.connect()
    except STORE_ERRORS as e:
        event_repo.close()
        session_repo.close()
        _fail(f"Cannot connect to {settings.store.backend}: {e}")

    try:
        yield event_repo, session_repo
    finally:
        event_repo.close()
        session_repo.close()


@contextmanager
def analytics_source(remote: bool = False) -> Iterator[AnalyticsSource]:
    """
    Open an AnalyticsSource for a command.

    Args:
        remote: Use the HTTP API at CLIENT_ENDPOINT instead of the store
    """
    settings = get_settings()

    if remote:
        from sitepulse.client.http import HttpAnalyticsClient

        client = HttpAnalyticsClient(
            settings.client.endpoint,
            api_key=settings.client.api_key,
            timeout=settings.client.request_timeout_seconds,
        )
        try:
            yield client
        finally:
            client.close()
        return

    from sitepulse.services.analytics import AnalyticsService

    with open_stores() as (event_repo, session_repo):
        yield AnalyticsService(event_repo, session_repo, settings.analytics)


@contextmanager
def ingest_transport(remote: bool = False) -> Iterator[IngestTransport]:
    """
    Open an IngestTransport for a command.

    Args:
        remote: POST to the HTTP API at CLIENT_ENDPOINT instead of the store
    """
    settings = get_settings()

    if remote:
        from sitepulse.client.http import HttpIngestTransport

        transport = HttpIngestTransport(
            settings.client.endpoint, timeout=settings.client.request_timeout_seconds
        )
        try:
            yield transport
        finally:
            transport.close()
        return

    from sitepulse.services.ingestion import InProcessTransport, IngestionService

    with open_stores() as (event_repo, _):
        yield InProcessTransport(IngestionService(event_repo))


# ==============================================================================
# Box Drawing Helpers
# ==============================================================================

# Regex pattern for stripping ANSI escape codes
_ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")


def _visible_len(s: str) -> int:
    """Calculate visible length of string, ignoring ANSI escape codes."""
    return len(_ANSI_ESCAPE_PATTERN.sub("", s))


def _box_header(title: str, width: int = BOX_WIDTH) -> str:
    """Create a single-line box header."""
    inner_width = width - 2
    title_padded = f" {title} "
    left_bar = (inner_width - len(title_padded)) // 2
    right_bar = inner_width - left_bar - len(title_padded)
    return (
        f"{C.CYAN}{B.TL}{B.H * left_bar}{C.BOLD}{C.WHITE}{title_padded}"
        f"{C.RESET}{C.CYAN}{B.H * right_bar}{B.TR}{C.RESET}"
    )


def _section_header(title: str, width: int = BOX_WIDTH) -> str:
    """Create a section divider with a title."""
    inner_width = width - 2
    title_padded = f" {title} "
    bar_len = inner_width - len(title_padded) - 1  # -1 for the first H after LT
    return (
        f"{C.CYAN}{B.LT}{B.H}{C.BOLD}{title_padded}{C.RESET}{C.CYAN}{B.H * bar_len}{B.RT}{C.RESET}"
    )


def _box_line(content: str, width: int = BOX_WIDTH) -> str:
    """Create a line inside the box with proper padding to right border."""
    inner_width = width - 2
    padding = max(inner_width - _visible_len(content), 0)
    return f"{C.CYAN}{B.V}{C.RESET}{content}{' ' * padding}{C.CYAN}{B.V}{C.RESET}"


def _empty_line(width: int = BOX_WIDTH) -> str:
    """Create an empty line inside the box."""
    return f"{C.CYAN}{B.V}{' ' * (width - 2)}{B.V}{C.RESET}"


def _box_bottom(width: int = BOX_WIDTH) -> str:
    """Create a box bottom border."""
    return f"{C.CYAN}{B.BL}{B.H * (width - 2)}{B.BR}{C.RESET}"
