# ==============================================================================
# Session Resolver - Pure Domain Logic
# ==============================================================================
"""
Pure session merge logic with no external dependencies.

This module contains the rule that folds one page-view event into the
session aggregate for its session id:
- First event for a session id creates the session
- Later events bump the page-view count and move last_seen_at forward
- Descriptive fields are coalesced: non-empty incoming values win,
  empty values never erase what is already recorded

Store adapters are responsible for applying the result atomically
(see infrastructure/repositories). The PostgreSQL adapter expresses the
same rule as an INSERT ... ON CONFLICT statement; the Valkey adapter calls
resolve() inside a WATCH/MULTI transaction.
"""

from sitepulse.core.models import PageViewEvent, VisitorSession

# Fields copied from the event and coalesced on every update
COALESCED_FIELDS = ("device_type", "browser", "os", "country", "city")


def _event_value(event: PageViewEvent, field: str) -> str | None:
    value = getattr(event, field)
    if hasattr(value, "value"):
        value = value.value
    return value or None


class SessionResolver:
    """
    Folds page-view events into visitor sessions.

    Works with immutable VisitorSession models and returns a new session
    for every event; nothing is mutated in place.
    """

    def create_session(self, event: PageViewEvent) -> VisitorSession:
        """
        Create the session for the first event seen with its session id.

        Args:
            event: The first page view of the session

        Returns:
            New session with one visit and one page view
        """
        return VisitorSession(
            session_id=event.session_id,
            first_seen_at=event.created_at,
            last_seen_at=event.created_at,
            total_visits=1,
            total_page_views=1,
            is_returning_visitor=False,
            **{field: _event_value(event, field) for field in COALESCED_FIELDS},
        )

    def update_session(self, session: VisitorSession, event: PageViewEvent) -> VisitorSession:
        """
        Merge a subsequent event into an existing session.

        last_seen_at never moves backward, so events delivered out of order
        leave it at the latest timestamp seen. total_visits is left as is.

        Args:
            session: Current session aggregate
            event: Event for the same session id

        Returns:
            Updated copy of the session
        """
        if event.session_id != session.session_id:
            raise ValueError(
                f"Event for session '{event.session_id}' cannot update session "
                f"'{session.session_id}'"
            )

        updates: dict = {
            "last_seen_at": max(session.last_seen_at, event.created_at),
            "total_page_views": session.total_page_views + 1,
        }
        for field in COALESCED_FIELDS:
            value = _event_value(event, field)
            if value:
                updates[field] = value

        return session.model_copy(update=updates)

    def resolve(self, session: VisitorSession | None, event: PageViewEvent) -> VisitorSession:
        """
        Insert-or-update: the single entry point used by store adapters.

        Args:
            session: Existing session for the event's session id, or None
            event: Newly recorded event

        Returns:
            The session as it must be stored after this event
        """
        if session is None:
            return self.create_session(event)
        return self.update_session(session, event)
