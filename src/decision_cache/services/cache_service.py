"""Cache service for core business logic.

This service orchestrates the two cache tiers by coordinating the
repository (data access) and embedding provider (vector generation).
Expiry is lazy: lookups skip entries older than the TTL but never
delete them; only cleanup() removes entries.
"""

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from decision_cache.config import settings
from decision_cache.entities import (
    CacheEntryEntity,
    CacheStatsEntity,
    CleanupMode,
    CleanupResultEntity,
    SemanticCacheEntryEntity,
    SemanticMatchEntity,
)
from decision_cache.exceptions import EmbeddingProviderError, InvalidArgumentError
from decision_cache.protocols import CacheStore, EmbeddingProvider
from decision_cache.similarity import SimilarityFn, cosine_similarity

logger = logging.getLogger(__name__)


def _require_text(name: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(f"{name} must be a non-empty string")


class CacheService:
    """Core cache orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - CacheStore: JSON files, Redis, ...
    - EmbeddingProvider: feature hashing, sentence-transformers, Ollama, ...

    Example:
        ```python
        from decision_cache.repositories import HashingEmbeddingProvider, JsonFileCacheRepository
        from decision_cache.services import CacheService

        cache = CacheService.create(
            repository=JsonFileCacheRepository.create(),
            embedding_provider=HashingEmbeddingProvider.create(),
        )
        cache.store_exact("/orchestrate status", "all green")
        hit = cache.lookup_exact("/orchestrate status")
        ```
    """

    def __init__(
        self,
        repository: CacheStore,
        embedding_provider: EmbeddingProvider,
        similarity_threshold: float | None = None,
        ttl: int | None = None,
        similarity_fn: SimilarityFn = cosine_similarity,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache service.

        Args:
            repository: Cache storage backend (required).
            embedding_provider: Embedding generation service (required).
            similarity_threshold: Minimum similarity for a semantic hit (0-1). Defaults to settings.
            ttl: Time-to-live for entries in seconds. Defaults to settings.
            similarity_fn: Scores two embeddings; higher is closer.
            clock: Source of the current Unix time.

        Raises:
            InvalidArgumentError: If ttl is negative or the threshold is outside [0, 1]
        """
        threshold = settings.cache_similarity_threshold if similarity_threshold is None else similarity_threshold
        ttl = settings.cache_ttl if ttl is None else ttl
        if ttl < 0:
            raise InvalidArgumentError(f"ttl must be >= 0, got {ttl}")
        if not 0 <= threshold <= 1:
            raise InvalidArgumentError(f"similarity threshold must be between 0 and 1, got {threshold}")

        self._repository = repository
        self._embeddings = embedding_provider
        self._threshold = threshold
        self._ttl = ttl
        self._similarity = similarity_fn
        self._clock = clock

    @classmethod
    def create(
        cls,
        repository: CacheStore,
        embedding_provider: EmbeddingProvider,
        similarity_threshold: float | None = None,
        ttl: int | None = None,
    ) -> "CacheService":
        """Factory method to create CacheService with settings defaults.

        Args:
            repository: Cache storage backend (required).
            embedding_provider: Embedding generation service (required).
            similarity_threshold: Min similarity for semantic hits. If None, uses settings.
            ttl: Time-to-live in seconds. If None, uses settings.

        Returns:
            Configured CacheService instance
        """
        return cls(
            repository=repository,
            embedding_provider=embedding_provider,
            similarity_threshold=similarity_threshold,
            ttl=ttl,
        )

    def _is_fresh(self, timestamp: float, now: float) -> bool:
        return now - timestamp <= self._ttl

    # === Exact (response) cache ===

    def lookup_exact(self, key: str) -> CacheEntryEntity | None:
        """Look up a response by exact key.

        A hit increments the entry's access count. Expired entries are
        reported as misses and left in place for cleanup().

        Args:
            key: The cache key (non-empty)

        Returns:
            The entry with its updated access count, or None on miss/expiry
        """
        _require_text("key", key)

        entry = self._repository.get_exact(key)
        if entry is None:
            logger.debug("Response cache MISS: %s", key)
            return None

        if not self._is_fresh(entry.timestamp, self._clock()):
            logger.debug("Response cache EXPIRED: %s", key)
            return None

        updated = self._repository.increment_access(key)
        logger.debug("Response cache HIT: %s", key)
        return updated or entry

    def store_exact(self, key: str, response: Any) -> CacheEntryEntity:
        """Store a response under a key, replacing any previous entry.

        Args:
            key: The cache key (non-empty)
            response: JSON-compatible payload

        Returns:
            The stored entry (timestamp = now, access_count = 1)
        """
        _require_text("key", key)

        entry = CacheEntryEntity(key=key, response=response, timestamp=self._clock(), access_count=1)
        self._repository.put_exact(entry)
        logger.debug("Stored in response cache: %s", key)
        return entry

    # === Semantic cache ===

    def lookup_semantic(self, query: str, threshold: float | None = None) -> SemanticMatchEntity | None:
        """Find the most similar non-expired entry for a query.

        Business logic:
        1. Embed the query
        2. Score every non-expired entry against it
        3. Keep the maximum (the earliest stored entry wins ties)
        4. Hit only if the maximum reaches the threshold

        Args:
            query: The query text (non-empty)
            threshold: Override the similarity threshold for this lookup

        Returns:
            SemanticMatchEntity on hit, None otherwise
        """
        _require_text("query", query)
        threshold = self._threshold if threshold is None else threshold

        entries = self._repository.list_semantic()
        now = self._clock()
        candidates = [e for e in entries if self._is_fresh(e.timestamp, now)]
        if not candidates:
            logger.debug("Semantic cache MISS (no live entries)")
            return None

        vector = self._embeddings.encode(query)

        best: SemanticCacheEntryEntity | None = None
        best_similarity = float("-inf")
        for entry in candidates:
            similarity = self._similarity(vector, entry.embedding)
            if similarity > best_similarity:
                best, best_similarity = entry, similarity

        if best is None or best_similarity < threshold:
            logger.debug("Semantic cache MISS (best: %.3f, threshold: %.3f)", best_similarity, threshold)
            return None

        logger.debug("Semantic cache HIT (similarity: %.3f) -> %s", best_similarity, best.key)
        return SemanticMatchEntity(
            key=best.key,
            query=best.query,
            response=best.response,
            similarity=best_similarity,
            cached_at=best.timestamp,
        )

    def store_semantic(self, query: str, key: str, response: Any) -> SemanticCacheEntryEntity:
        """Append a query/response pair to the semantic cache.

        Near-duplicates are not merged: storing a paraphrase adds a new entry.

        Args:
            query: The query text to embed (non-empty)
            key: Caller's key for the entry (non-empty)
            response: JSON-compatible payload

        Returns:
            The stored entry
        """
        _require_text("query", query)
        _require_text("key", key)

        entry = SemanticCacheEntryEntity(
            key=key,
            query=query,
            embedding=self._embeddings.encode(query),
            response=response,
            timestamp=self._clock(),
        )
        self._repository.append_semantic(entry)
        logger.debug("Stored in semantic cache: %s", key)
        return entry

    # === Combined flow ===

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], Any],
        query: str | None = None,
        store: bool = True,
    ) -> tuple[Any, bool]:
        """Return a cached response, or compute and optionally cache it.

        Tries the exact cache, then (when a query is given) the semantic cache.
        An embedding provider failure is logged and treated as a semantic miss.
        On a miss, calls compute() and, if store is true, writes the result to
        the exact cache and, when a query is given, to the semantic cache.

        Args:
            key: The exact cache key
            compute: Produces the response on a miss
            query: Query text for the semantic tier
            store: Write the computed response back

        Returns:
            Tuple (response, from_cache)
        """
        entry = self.lookup_exact(key)
        if entry is not None:
            return entry.response, True

        if query:
            try:
                match = self.lookup_semantic(query)
            except EmbeddingProviderError as e:
                logger.warning("Semantic lookup unavailable, treating as miss: %s", e)
                match = None
            if match is not None:
                return match.response, True

        response = compute()
        if store:
            self.store_exact(key, response)
            if query:
                try:
                    self.store_semantic(query, key, response)
                except EmbeddingProviderError as e:
                    logger.warning("Semantic store skipped for %s: %s", key, e)
        return response, False

    def warmup(self, pairs: Iterable[tuple[str, Any]]) -> int:
        """Pre-load the exact cache from (key, response) pairs.

        Args:
            pairs: Keys and responses to store

        Returns:
            Number of entries stored; pairs with an invalid key are skipped
        """
        count = 0
        for key, response in pairs:
            try:
                self.store_exact(key, response)
                count += 1
            except InvalidArgumentError as e:
                logger.warning("Skipping warmup pair: %s", e)
        return count

    # === Maintenance ===

    def cleanup(self, mode: CleanupMode | str = CleanupMode.EXPIRED) -> CleanupResultEntity:
        """Remove expired entries, or everything.

        Args:
            mode: "expired" removes entries with now - timestamp > ttl; "all" empties both stores

        Returns:
            Per-store removal counts

        Raises:
            InvalidArgumentError: For an unknown mode
        """
        try:
            mode = CleanupMode(mode)
        except ValueError as e:
            raise InvalidArgumentError(
                f"Unknown cleanup mode: {mode!r} (valid modes: expired, all)"
            ) from e

        if mode is CleanupMode.ALL:
            exact_removed, semantic_removed = self._repository.clear_all()
        else:
            cutoff = self._clock() - self._ttl
            exact_removed, semantic_removed = self._repository.remove_older_than(cutoff)

        result = CleanupResultEntity(
            mode=mode,
            exact_removed=exact_removed,
            semantic_removed=semantic_removed,
        )
        logger.info(
            "Cache cleanup (%s): removed %d response and %d semantic entries",
            mode.value,
            exact_removed,
            semantic_removed,
        )
        return result

    def stats(self) -> CacheStatsEntity:
        """Count entries and accesses. Pure read."""
        exact_entries = self._repository.list_exact()
        return CacheStatsEntity(
            exact_entry_count=len(exact_entries),
            semantic_entry_count=len(self._repository.list_semantic()),
            total_access_count=sum(entry.access_count for entry in exact_entries),
        )

    def get_stats(self) -> dict:
        """Statistics plus configuration, for reporting surfaces."""
        stats = self.stats()
        details = self._repository.get_stats()
        details.update(
            {
                "exact_entry_count": stats.exact_entry_count,
                "semantic_entry_count": stats.semantic_entry_count,
                "total_access_count": stats.total_access_count,
                "avg_accesses_per_entry": stats.avg_accesses_per_entry,
                "similarity_threshold": self._threshold,
                "ttl": self._ttl,
                "embedding_model": self._embeddings.model_name,
            }
        )
        return details

    def is_healthy(self) -> bool:
        """Check if both the repository and the embedding provider are usable."""
        return self._repository.health_check() and self._embeddings.is_available()

    def set_threshold(self, threshold: float) -> None:
        """Update the similarity threshold.

        Args:
            threshold: New threshold value (0-1, higher = more strict)
        """
        if not 0 <= threshold <= 1:
            raise InvalidArgumentError("Threshold must be between 0 and 1")
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        """Get current similarity threshold."""
        return self._threshold

    @property
    def ttl(self) -> int:
        """Get entry time-to-live in seconds."""
        return self._ttl

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        """Get the underlying embedding provider (for testing)."""
        return self._embeddings
