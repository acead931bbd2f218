# ==============================================================================
# Status Command
# ==============================================================================
"""
Shows whether the configured stores and the API are reachable.
"""

import json
from typing import Annotated

import requests
import typer

from sitepulse.cli.shared import (
    BOX_WIDTH,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
)
from sitepulse.utils.config import get_settings


def _check_api(endpoint: str, timeout: float) -> bool:
    try:
        response = requests.get(f"{endpoint.rstrip('/')}/health", timeout=timeout)
        return response.ok
    except requests.RequestException:
        return False


def show_status(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output as JSON for scripting")
    ] = False,
) -> None:
    """Check connectivity to PostgreSQL, Valkey and the API.

    Exits with code 1 if the configured store backend is unreachable.

    Examples:
        sitepulse status
        sitepulse status --json
    """
    from sitepulse.infrastructure.repositories import (
        check_postgresql_connection,
        check_valkey_connection,
    )

    settings = get_settings()
    checks = {
        "postgresql": check_postgresql_connection(settings),
        "valkey": check_valkey_connection(settings),
        "api": _check_api(settings.client.endpoint, settings.client.request_timeout_seconds),
    }
    backend = settings.store.backend
    healthy = checks[backend]

    if json_output:
        print(json.dumps({"backend": backend, "checks": checks, "healthy": healthy}, indent=2))
    else:
        W = BOX_WIDTH
        print()
        print(_box_header("SITEPULSE STATUS", W))
        print(_empty_line(W))
        for name, ok in checks.items():
            icon = f"{C.BRIGHT_GREEN}{I.CHECK}" if ok else f"{C.BRIGHT_RED}{I.CROSS}"
            label = f"{name} (store)" if name == backend else name
            state = "reachable" if ok else "unreachable"
            print(_box_line(f"  {icon}{C.RESET} {label:<24}{state}", W))
        print(_empty_line(W))
        print(_box_bottom(W))
        print()

    if not healthy:
        raise typer.Exit(1)
