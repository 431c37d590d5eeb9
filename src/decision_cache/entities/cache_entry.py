"""Cache entry domain entities."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for an exact-match response cache entry.

    Attributes:
        key: Unique cache key
        response: The cached payload (any JSON-compatible value)
        timestamp: Unix time the entry was stored
        access_count: Number of times the entry has been returned, starting at 1
    """

    key: str
    response: Any
    timestamp: float
    access_count: int = 1


@dataclass(frozen=True)
class SemanticCacheEntryEntity:
    """Domain entity for a similarity-matched cache entry.

    Attributes:
        key: Caller-supplied key, not required to be unique
        query: The query text the embedding was computed from
        embedding: The query's embedding vector
        response: The cached payload
        timestamp: Unix time the entry was stored
    """

    key: str
    query: str
    embedding: list[float]
    response: Any
    timestamp: float
