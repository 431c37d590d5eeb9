"""HTTP handlers for cache operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging
import time

from fastapi import HTTPException, status

from decision_cache.dto import (
    CacheStatsResponse,
    CleanupRequest,
    CleanupResponse,
    ExactLookupRequest,
    ExactLookupResponse,
    ExactStoreRequest,
    HealthCheckResponse,
    SemanticLookupRequest,
    SemanticLookupResponse,
    SemanticStoreRequest,
    StoreResponse,
    WarmupRequest,
    WarmupResponse,
)
from decision_cache.exceptions import DecisionCacheError, InvalidArgumentError
from decision_cache.services import CacheService

logger = logging.getLogger(__name__)


def _http_error(action: str, e: Exception) -> HTTPException:
    if isinstance(e, InvalidArgumentError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    logger.exception("Failed to %s", action)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {e}",
    )


class CacheHandler:
    """HTTP handlers for cache operations.

    This handler delegates business logic to CacheService
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses
    """

    def __init__(self, cache_service: CacheService) -> None:
        """Initialize the cache handler.

        Args:
            cache_service: The cache service for business logic (required).
        """
        self._cache = cache_service

    def lookup_exact(self, request: ExactLookupRequest) -> ExactLookupResponse:
        """Handle POST /cache/exact/lookup requests."""
        try:
            entry = self._cache.lookup_exact(request.key)
        except (DecisionCacheError, OSError) as e:
            raise _http_error("look up entry", e) from e

        if entry is None:
            return ExactLookupResponse(key=request.key, found=False)
        return ExactLookupResponse(
            key=entry.key,
            found=True,
            response=entry.response,
            access_count=entry.access_count,
            cached_at=entry.timestamp,
        )

    def store_exact(self, request: ExactStoreRequest) -> StoreResponse:
        """Handle PUT /cache/exact requests."""
        try:
            entry = self._cache.store_exact(request.key, request.response)
        except (DecisionCacheError, OSError) as e:
            raise _http_error("store entry", e) from e

        return StoreResponse(success=True, key=entry.key, message="Entry stored successfully")

    def lookup_semantic(self, request: SemanticLookupRequest) -> SemanticLookupResponse:
        """Handle POST /cache/semantic/lookup requests."""
        try:
            start_time = time.time()
            match = self._cache.lookup_semantic(request.query, threshold=request.threshold)
            lookup_time_ms = (time.time() - start_time) * 1000
        except (DecisionCacheError, OSError) as e:
            raise _http_error("check semantic cache", e) from e

        if match is None:
            return SemanticLookupResponse(query=request.query, found=False, lookup_time_ms=lookup_time_ms)
        return SemanticLookupResponse(
            query=request.query,
            found=True,
            key=match.key,
            matched_query=match.query,
            response=match.response,
            similarity=match.similarity,
            cached_at=match.cached_at,
            lookup_time_ms=lookup_time_ms,
        )

    def store_semantic(self, request: SemanticStoreRequest) -> StoreResponse:
        """Handle PUT /cache/semantic requests."""
        try:
            entry = self._cache.store_semantic(request.query, request.key, request.response)
        except (DecisionCacheError, OSError) as e:
            raise _http_error("store semantic entry", e) from e

        return StoreResponse(success=True, key=entry.key, message="Semantic entry stored successfully")

    def cleanup(self, request: CleanupRequest) -> CleanupResponse:
        """Handle POST /cache/cleanup requests."""
        try:
            result = self._cache.cleanup(request.mode)
        except (DecisionCacheError, OSError) as e:
            raise _http_error("clean up cache", e) from e

        return CleanupResponse(
            mode=result.mode,
            exact_removed=result.exact_removed,
            semantic_removed=result.semantic_removed,
            total_removed=result.total_removed,
        )

    def warmup(self, request: WarmupRequest) -> WarmupResponse:
        """Handle POST /cache/warmup requests."""
        try:
            count = self._cache.warmup((item.key, item.response) for item in request.entries)
        except (DecisionCacheError, OSError) as e:
            raise _http_error("warm up cache", e) from e

        return WarmupResponse(success=True, count=count, message=f"Pre-loaded {count} entries")

    def get_stats(self) -> CacheStatsResponse:
        """Handle GET /stats requests."""
        try:
            stats = self._cache.get_stats()
        except (DecisionCacheError, OSError) as e:
            raise _http_error("get stats", e) from e

        return CacheStatsResponse(
            exact_entry_count=stats["exact_entry_count"],
            semantic_entry_count=stats["semantic_entry_count"],
            total_access_count=stats["total_access_count"],
            avg_accesses_per_entry=stats["avg_accesses_per_entry"],
            similarity_threshold=stats["similarity_threshold"],
            ttl_seconds=stats["ttl"],
            backend=stats.get("backend", ""),
            embedding_model=stats["embedding_model"],
        )

    def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = self._cache.is_healthy()
        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_healthy=is_healthy,
        )
