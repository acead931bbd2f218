# ==============================================================================
# Track Command
# ==============================================================================
"""
Records a page view from the command line, using this machine's persisted
session id. Delivery errors are logged by the tracker, not reported here.
"""

from typing import Annotated

import typer

from sitepulse.cli.shared import C, I, ingest_transport
from sitepulse.utils.config import get_settings


def track(
    page_path: Annotated[str, typer.Argument(help="Path of the viewed page, e.g. /pricing")],
    title: Annotated[str, typer.Option("--title", "-t", help="Page title")] = "",
    user_agent: Annotated[
        str, typer.Option("--user-agent", "-u", help="User agent to report")
    ] = "",
    remote: Annotated[
        bool, typer.Option("--remote", "-r", help="POST to the HTTP API instead of the store")
    ] = False,
) -> None:
    """Record one page view under this client's session id.

    Examples:
        sitepulse track /
        sitepulse track /pricing --title "Pricing" --remote
    """
    from sitepulse.client.identity import SessionIdentityManager
    from sitepulse.client.tracker import PageViewTracker
    from sitepulse.infrastructure.identity_store import FileIdentityStore

    settings = get_settings()
    identity = SessionIdentityManager(FileIdentityStore(settings.client.identity_file))

    with ingest_transport(remote) as transport:
        tracker = PageViewTracker(identity, transport, user_agent=user_agent)
        future = tracker.track_page_view(page_path, title)
        tracker.close()

    if future is None:
        print(f"{C.BRIGHT_RED}{I.CROSS} Page view was dropped{C.RESET}")
        raise typer.Exit(1)

    session_id = identity.get_or_create_session_id()
    print(
        f"{C.BRIGHT_GREEN}{I.CHECK} Tracked {C.WHITE}{page_path}{C.RESET}"
        f"{C.BRIGHT_GREEN} for session {C.WHITE}{session_id}{C.RESET}"
    )
