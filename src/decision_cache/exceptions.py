"""Exception hierarchy for the decision cache.

Cache misses and expired entries are not errors; lookups return ``None`` for
them. The exceptions below cover rejected input, unreadable persisted data and
embedding transport failures.
"""


class DecisionCacheError(Exception):
    """Base exception for all decision cache errors."""


class InvalidArgumentError(DecisionCacheError, ValueError):
    """Raised for arguments rejected before any I/O (empty key, negative TTL)."""


class MalformedStoreError(DecisionCacheError):
    """Raised when a persisted store cannot be parsed.

    Repositories catch this themselves and fall back to an empty store.
    """

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Malformed store at {location}: {reason}")


class EmbeddingProviderError(DecisionCacheError):
    """Raised when an embedding provider cannot produce a vector."""
