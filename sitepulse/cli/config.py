# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the SitePulse CLI.
"""

import json
from typing import Annotated

import typer

from sitepulse.cli.shared import C
from sitepulse.utils.config import get_settings


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    if json_output:
        config = {
            "store": {
                "backend": settings.store.backend,
            },
            "postgresql": {
                "host": settings.postgres.host,
                "port": settings.postgres.port,
                "database": settings.postgres.database,
                "schema": settings.postgres.schema_name,
                "user": settings.postgres.user,
                "password": settings.postgres.password,
                "sslmode": settings.postgres.sslmode,
                "pool_max_connections": settings.postgres.pool_max_connections,
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
                "key_prefix": settings.valkey.key_prefix,
            },
            "analytics": settings.analytics.model_dump(),
            "api": {
                "host": settings.api.host,
                "port": settings.api.port,
                "read_key": settings.api.read_key,
                "cors_origins": settings.api.cors_origins,
            },
            "client": {
                "endpoint": settings.client.endpoint,
                "api_key": settings.client.api_key,
                "identity_file": str(settings.client.identity_file),
                "poll_interval_seconds": settings.client.poll_interval_seconds,
            },
        }
        print(json.dumps(config, indent=2))
        return

    a = settings.analytics

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Store{C.RESET}")
    print(f"  Backend:    {C.WHITE}{settings.store.backend}{C.RESET}")
    print()

    print(f"{C.CYAN}PostgreSQL{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.postgres.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.postgres.port}{C.RESET}")
    print(f"  Database:   {C.WHITE}{settings.postgres.database}{C.RESET}")
    print(f"  Schema:     {C.WHITE}{settings.postgres.schema_name}{C.RESET}")
    print(f"  User:       {C.WHITE}{settings.postgres.user}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{settings.postgres.sslmode}{C.RESET}")
    print()

    print(f"{C.CYAN}Valkey{C.RESET}")
    print(f"  Host:       {C.WHITE}{settings.valkey.host}{C.RESET}")
    print(f"  Port:       {C.WHITE}{settings.valkey.port}{C.RESET}")
    print(f"  SSL:        {C.WHITE}{'enabled' if settings.valkey.ssl else 'disabled'}{C.RESET}")
    print(f"  Prefix:     {C.WHITE}{settings.valkey.key_prefix}{C.RESET}")
    print()

    print(f"{C.CYAN}Analytics{C.RESET}")
    print(f"  Active:     {C.WHITE}{a.active_window_minutes} minutes{C.RESET}")
    print(f"  Today:      {C.WHITE}{a.today_window_hours} hours (rolling){C.RESET}")
    print(f"  Top pages:  {C.WHITE}{a.top_pages_limit}{C.RESET}")
    history = f"{a.default_history_days} days (max {a.max_history_days})"
    print(f"  History:    {C.WHITE}{history}{C.RESET}")
    print()

    print(f"{C.CYAN}API{C.RESET}")
    print(f"  Listen:     {C.WHITE}{settings.api.host}:{settings.api.port}{C.RESET}")
    read_key = "set" if settings.api.read_key else "not set (reads rejected)"
    print(f"  Read key:   {C.WHITE}{read_key}{C.RESET}")
    print()

    print(f"{C.CYAN}Client{C.RESET}")
    print(f"  Endpoint:   {C.WHITE}{settings.client.endpoint}{C.RESET}")
    print(f"  Identity:   {C.WHITE}{settings.client.identity_file}{C.RESET}")
    print(f"  Poll every: {C.WHITE}{settings.client.poll_interval_seconds:g}s{C.RESET}")
    print()
