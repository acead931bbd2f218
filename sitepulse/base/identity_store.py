# ==============================================================================
# Identity Store Abstract Base Class
# ==============================================================================
"""
Abstract interface for client-local durable storage.

The tracking client keeps its session token here between page loads (or
process restarts). This is client state, never server state.

Implementations: FileIdentityStore (JSON document on disk).
"""

from abc import ABC, abstractmethod


class IdentityStore(ABC):
    """Small string key-value store scoped to one client."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Read a stored value.

        Args:
            key: Storage key

        Returns:
            Stored value, or None if absent
        """
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Durably store a value.

        Args:
            key: Storage key
            value: Value to store
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a value.

        Args:
            key: Storage key

        Returns:
            True if the key was present
        """
        ...
