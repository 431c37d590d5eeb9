"""Semantic cache match domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SemanticMatchEntity:
    """Domain entity for a semantic cache hit.

    Attributes:
        key: Key of the matched entry
        query: The cached query that matched
        response: The cached response
        similarity: Similarity score between the lookup query and the entry (1 = identical)
        cached_at: Timestamp when the entry was stored (Unix timestamp)
    """

    key: str
    query: str
    response: Any
    similarity: float
    cached_at: float
