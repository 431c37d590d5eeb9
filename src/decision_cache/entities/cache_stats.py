"""Cleanup and statistics entities."""

from dataclasses import dataclass
from enum import Enum


class CleanupMode(str, Enum):
    EXPIRED = "expired"
    ALL = "all"


@dataclass(frozen=True)
class CleanupResultEntity:
    """Number of entries removed from each store by a cleanup."""

    mode: CleanupMode
    exact_removed: int
    semantic_removed: int

    @property
    def total_removed(self) -> int:
        return self.exact_removed + self.semantic_removed


@dataclass(frozen=True)
class CacheStatsEntity:
    exact_entry_count: int
    semantic_entry_count: int
    total_access_count: int

    @property
    def avg_accesses_per_entry(self) -> float:
        """Average hits per exact entry, 0.0 for an empty store."""
        if self.exact_entry_count == 0:
            return 0.0
        return self.total_access_count / self.exact_entry_count
