# ==============================================================================
# Visitor Analytics Domain Models
# ==============================================================================
"""
Pydantic models for page-view events, visitor sessions and analytics reads.

These models are used for:
- Validating tracking requests at the HTTP edge
- Serializing/deserializing store records (PostgreSQL rows, Valkey entries)
- Shaping the real-time and historical read models returned to dashboards

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DeviceType(str, Enum):
    """Device classes derived from the user agent."""

    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"


class TrackRequest(BaseModel):
    """
    A page view as sent by a tracking client.

    The server attaches the timestamp and enrichment; the client only says
    which page was viewed and under which session token.
    """

    page_path: str = Field(..., min_length=1, max_length=2048, description="Viewed path")
    page_title: str | None = Field(None, max_length=1024, description="Document title")
    session_id: str = Field(..., min_length=1, max_length=128, description="Client session token")
    referrer: str | None = Field(None, max_length=2048, description="Referring URL")
    user_agent: str | None = Field(None, max_length=1024, description="Browser user agent")


class PageViewEvent(BaseModel):
    """
    One immutable page-view fact.

    Attributes:
        id: Server-generated identifier (UUID string)
        page_path: Path of the viewed page
        page_title: Page title, if the client sent one
        session_id: Session token the view belongs to
        user_agent: Raw user agent string
        referrer: Referring URL, empty when unknown
        device_type: Derived device class
        browser: Derived browser name, "Unknown" when unmatched
        os: Derived operating system name, "Unknown" when unmatched
        country: Country, when an upstream collaborator supplies it
        city: City, when an upstream collaborator supplies it
        created_at: Server-assigned UTC timestamp
    """

    model_config = ConfigDict(frozen=True)

    id: str
    page_path: str
    page_title: str | None = None
    session_id: str
    user_agent: str = ""
    referrer: str = ""
    device_type: DeviceType = DeviceType.DESKTOP
    browser: str = "Unknown"
    os: str = "Unknown"
    country: str | None = None
    city: str | None = None
    created_at: datetime

    @property
    def created_at_ms(self) -> int:
        """Creation time as Unix milliseconds."""
        return int(self.created_at.timestamp() * 1000)

    def to_db_record(self) -> dict:
        """Convert the event to database record format."""
        return {
            "id": self.id,
            "page_path": self.page_path,
            "page_title": self.page_title,
            "session_id": self.session_id,
            "user_agent": self.user_agent,
            "referrer": self.referrer,
            "device_type": self.device_type.value,
            "browser": self.browser,
            "os": self.os,
            "country": self.country,
            "city": self.city,
            "created_at": self.created_at,
        }

    def to_json(self) -> str:
        """Serialize the event for key-value storage."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> "PageViewEvent":
        """Deserialize an event written by to_json()."""
        return cls.model_validate(json.loads(data))


class VisitorSession(BaseModel):
    """
    Aggregate of all page views sharing one session id.

    `total_page_views` always equals the number of events recorded for the
    session. `total_visits` is set to 1 on creation and never incremented.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    first_seen_at: datetime
    last_seen_at: datetime
    total_visits: int = 1
    total_page_views: int = 1
    device_type: str | None = None
    browser: str | None = None
    os: str | None = None
    country: str | None = None
    city: str | None = None
    is_returning_visitor: bool = False


# ==============================================================================
# Read Models
# ==============================================================================


class ReadModel(BaseModel):
    """Base for dashboard read models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageCount(ReadModel):
    """Views of one page within the real-time window."""

    path: str
    title: str
    count: int


class RealTimeSnapshot(ReadModel):
    """Real-time dashboard metrics computed relative to `last_updated`."""

    active_visitors: int = 0
    total_page_views_today: int = 0
    unique_visitors_today: int = 0
    page_views_by_path: list[PageCount] = Field(default_factory=list)
    device_breakdown: dict[str, int] = Field(default_factory=dict)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def empty(cls, now: datetime | None = None) -> "RealTimeSnapshot":
        """All-zero snapshot, returned for no traffic and for failed reads alike."""
        return cls(last_updated=now or datetime.now(UTC))


class DailyBucket(ReadModel):
    """Page views and distinct sessions for one UTC calendar date."""

    date: str
    page_views: int
    unique_visitors: int
