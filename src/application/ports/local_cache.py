"""Port for the best-effort local snapshot cache."""

from typing import Protocol


def cache_key(namespace: str, user_id: str) -> str:
    """Return the cache key for a user's snapshot."""
    return f"{namespace}_{user_id}"


class LocalCachePort(Protocol):
    """Key-value byte-string store surviving restarts.

    Its content is never authoritative: a delivery from the persistence
    collaborator always wins.
    """

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or None when missing."""

    def set(self, key: str, value: bytes) -> None:
        """Store or replace a value."""

    def delete(self, key: str) -> None:
        """Remove a value if present."""

    def dispose(self) -> None:
        """Release the resources held by the cache."""


__all__ = ["LocalCachePort", "cache_key"]
