"""Cache storage protocol.

Defines the interface for any backend that persists the two cache tiers:
the exact-match response store and the semantic store.

Implementations:
- JSON files guarded by file locks (default)
- Redis hash + list
"""

from typing import Protocol, runtime_checkable

from decision_cache.entities import CacheEntryEntity, SemanticCacheEntryEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed. Expiry is decided by the service;
    backends only filter by the cutoff timestamp they are given.
    """

    def get_exact(self, key: str) -> CacheEntryEntity | None:
        """Read an exact entry without side effects.

        Args:
            key: The cache key

        Returns:
            The stored entry, expired or not, or None
        """
        ...

    def put_exact(self, entry: CacheEntryEntity) -> None:
        """Insert or overwrite an exact entry.

        Args:
            entry: The entry to store under entry.key
        """
        ...

    def increment_access(self, key: str) -> CacheEntryEntity | None:
        """Add one to an entry's access count.

        Args:
            key: The cache key

        Returns:
            The updated entry, or None if the key vanished
        """
        ...

    def list_exact(self) -> list[CacheEntryEntity]:
        """Return every exact entry."""
        ...

    def append_semantic(self, entry: SemanticCacheEntryEntity) -> None:
        """Append a semantic entry after all existing ones.

        Args:
            entry: The entry to append
        """
        ...

    def list_semantic(self) -> list[SemanticCacheEntryEntity]:
        """Return every semantic entry in stored order."""
        ...

    def remove_older_than(self, cutoff: float) -> tuple[int, int]:
        """Delete entries whose timestamp is strictly below cutoff.

        Args:
            cutoff: Unix timestamp; entries at or after it are kept untouched

        Returns:
            Tuple (exact_removed, semantic_removed)
        """
        ...

    def clear_all(self) -> tuple[int, int]:
        """Delete every entry in both stores.

        Returns:
            Tuple (exact_removed, semantic_removed)
        """
        ...

    def health_check(self) -> bool:
        """Check if the backend is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...

    def get_stats(self) -> dict:
        """Get backend-specific details (location, backend name)."""
        ...
