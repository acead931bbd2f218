# ==============================================================================
# Client Session Identity
# ==============================================================================
"""
Stable per-client session token.

The first call mints an id of the form ``session_<unix ms>_<9 base-36 chars>``
and persists it in the client's IdentityStore; every later call returns the
stored value. There is no expiry and no network round trip.
"""

import logging
import secrets
import string
import threading
import time

from sitepulse.base.identity_store import IdentityStore

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "sitepulse_session_id"

_BASE36 = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 9


def generate_session_id() -> str:
    """New collision-resistant session id (time component plus random suffix)."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(_SUFFIX_LENGTH))
    return f"session_{int(time.time() * 1000)}_{suffix}"


class SessionIdentityManager:
    """Owns the session token of one client."""

    def __init__(self, store: IdentityStore, key: str = SESSION_ID_KEY):
        self._store = store
        self._key = key
        self._lock = threading.Lock()

    def get_or_create_session_id(self) -> str:
        """
        Return the persisted session id, creating it on first use.

        Returns:
            Session id, identical across calls within the same store
        """
        with self._lock:
            session_id = self._store.get(self._key)
            if session_id:
                return session_id

            session_id = generate_session_id()
            self._store.set(self._key, session_id)
            logger.info("Created new session id %s", session_id)
            return session_id
