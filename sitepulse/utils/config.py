# ==============================================================================
# Application Configuration
# ==============================================================================
"""
Configuration management using pydantic-settings.

All configuration is loaded from environment variables, with support for
.env files via python-dotenv.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file before any settings are instantiated
load_dotenv()


class PostgresSettings(BaseSettings):
    """PostgreSQL connection settings."""

    model_config = SettingsConfigDict(env_prefix="PG_")

    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="postgres", description="PostgreSQL username")
    password: str = Field(default="postgres", description="PostgreSQL password")
    database: str = Field(default="sitepulse", description="Database name")
    schema_name: str = Field(default="sitepulse", description="Schema name")
    sslmode: str = Field(default="prefer", description="SSL mode")

    # Connection pool bounds for the API server
    pool_min_connections: int = Field(default=1, description="Minimum pooled connections")
    pool_max_connections: int = Field(default=10, description="Maximum pooled connections")
    pool_timeout_seconds: float = Field(
        default=30.0, description="Seconds to wait for a free pooled connection"
    )

    # Optional roles for the public-insert / privileged-read grants in schema/init.sql
    writer_role: Optional[str] = Field(
        default=None, description="Role allowed to insert page views and sessions"
    )
    reader_role: Optional[str] = Field(
        default=None, description="Role allowed to read analytics tables"
    )

    @property
    def connection_string(self) -> str:
        """Build PostgreSQL connection string."""
        return (
            f"postgresql://{self.user}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?sslmode={self.sslmode}"
        )


class ValkeySettings(BaseSettings):
    """Valkey (Redis-compatible) connection settings."""

    model_config = SettingsConfigDict(env_prefix="VALKEY_")

    host: str = Field(default="localhost", description="Valkey host")
    port: int = Field(default=6379, description="Valkey port")
    password: Optional[str] = Field(default=None, description="Valkey password")
    db: int = Field(default=0, description="Valkey database number")
    ssl: bool = Field(default=False, description="Use SSL/TLS connection")
    key_prefix: str = Field(default="sitepulse", description="Prefix for all Valkey keys")

    @property
    def url(self) -> str:
        """Build Valkey connection URL."""
        scheme = "rediss" if self.ssl else "redis"
        if self.password:
            return f"{scheme}://:{self.password}@{self.host}:{self.port}/{self.db}"
        return f"{scheme}://{self.host}:{self.port}/{self.db}"


class StoreSettings(BaseSettings):
    """Selects the backing store for events and sessions."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    backend: Literal["postgresql", "valkey"] = Field(
        default="postgresql",
        description="Event/session store implementation (postgresql, valkey)",
    )


class AnalyticsSettings(BaseSettings):
    """Windows and limits used by the real-time and historical engines."""

    model_config = SettingsConfigDict(env_prefix="ANALYTICS_")

    active_window_minutes: int = Field(
        default=5, description="Window for counting currently active visitors"
    )
    today_window_hours: int = Field(
        default=24, description="Rolling window for the 'today' metrics"
    )
    top_pages_limit: int = Field(default=10, description="Number of top pages reported")
    sessions_limit: int = Field(default=100, description="Sessions returned by the listing")
    default_history_days: int = Field(default=30, description="Default look-back in days")
    max_history_days: int = Field(default=365, description="Largest accepted look-back")


class ApiSettings(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    read_key: Optional[str] = Field(
        default=None, description="API key required for analytics reads (X-API-Key)"
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Origins allowed to post page views"
    )


class ClientSettings(BaseSettings):
    """Settings for the tracking client and dashboard poller."""

    model_config = SettingsConfigDict(env_prefix="CLIENT_")

    endpoint: str = Field(default="http://127.0.0.1:8000", description="SitePulse API base URL")
    api_key: Optional[str] = Field(default=None, description="API key sent on analytics reads")
    identity_file: Path = Field(
        default=Path.home() / ".sitepulse" / "identity.json",
        description="Client-local storage for the session token",
    )
    poll_interval_seconds: float = Field(
        default=30.0, description="Real-time dashboard refresh interval"
    )
    request_timeout_seconds: float = Field(default=10.0, description="HTTP request timeout")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    # Nested settings
    postgres: PostgresSettings = Field(default_factory=PostgresSettings)
    valkey: ValkeySettings = Field(default_factory=ValkeySettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    analytics: AnalyticsSettings = Field(default_factory=AnalyticsSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)

    # General settings
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and cached for subsequent calls.
    """
    return Settings()
