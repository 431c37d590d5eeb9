"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from decision_cache.entities import Band, CleanupMode, Decision


class ExactLookupResponse(BaseModel):
    """Response DTO for an exact-key lookup."""

    key: str = Field(..., description="The requested key")
    found: bool = Field(..., description="Whether a live entry exists")
    response: Any = Field(None, description="The cached payload on hit")
    access_count: int | None = Field(None, description="Hits so far, including this one")
    cached_at: float | None = Field(None, description="When the entry was stored (Unix timestamp)")


class SemanticLookupResponse(BaseModel):
    """Response DTO for a similarity lookup."""

    query: str = Field(..., description="The original query")
    found: bool = Field(..., description="Whether the best match reached the threshold")
    key: str | None = None
    matched_query: str | None = Field(None, description="The cached query that matched")
    response: Any = None
    similarity: float | None = None
    cached_at: float | None = None
    lookup_time_ms: float = Field(..., description="Time taken for the lookup in milliseconds")


class StoreResponse(BaseModel):
    """Response DTO for store operations."""

    success: bool = Field(..., description="Whether the operation succeeded")
    key: str = Field(..., description="The key of the stored entry")
    message: str = Field(..., description="Human-readable status message")


class CleanupResponse(BaseModel):
    mode: CleanupMode
    exact_removed: int = Field(..., ge=0)
    semantic_removed: int = Field(..., ge=0)
    total_removed: int = Field(..., ge=0)


class WarmupResponse(BaseModel):
    success: bool
    count: int = Field(..., ge=0)
    message: str


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    exact_entry_count: int = Field(..., ge=0)
    semantic_entry_count: int = Field(..., ge=0)
    total_access_count: int = Field(..., ge=0)
    avg_accesses_per_entry: float = Field(..., ge=0.0)
    similarity_threshold: float = Field(..., ge=0.0, le=1.0)
    ttl_seconds: int = Field(..., ge=0)
    backend: str = Field(..., description="Storage backend name")
    embedding_model: str = Field(..., description="Embedding model identifier")


class RoutingDecisionResponse(BaseModel):
    """Response DTO for a routing decision."""

    band: Band
    decision: Decision
    reason: str
    recorded_at: float
    complexity_score: int
    recommended_pattern: str
    estimated_tokens: int
    approval_rate: float | None = None


class ApprovalRateResponse(BaseModel):
    band: Band
    approval_rate: float = Field(..., ge=0.0, le=1.0)
    threshold: float = Field(..., ge=0.0, le=1.0)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the cache backend and embeddings are usable")
