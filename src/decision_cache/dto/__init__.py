"""Data Transfer Objects.

These Pydantic models define the external API contract and the schemas
of the persisted files. They are used for validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    CleanupRequest,
    ExactLookupRequest,
    ExactStoreRequest,
    FeedbackRequest,
    RoutingDecideRequest,
    SemanticLookupRequest,
    SemanticStoreRequest,
    WarmupItem,
    WarmupRequest,
)
from .responses import (
    ApprovalRateResponse,
    CacheStatsResponse,
    CleanupResponse,
    ExactLookupResponse,
    HealthCheckResponse,
    RoutingDecisionResponse,
    SemanticLookupResponse,
    StoreResponse,
    WarmupResponse,
)
from .store_files import (
    ResponseCacheFile,
    ResponseCacheRecord,
    SemanticCacheFile,
    SemanticCacheRecord,
    SessionState,
    TaskAnalysis,
)

__all__ = [
    "ExactLookupRequest",
    "ExactStoreRequest",
    "SemanticLookupRequest",
    "SemanticStoreRequest",
    "CleanupRequest",
    "WarmupItem",
    "WarmupRequest",
    "RoutingDecideRequest",
    "FeedbackRequest",
    "ExactLookupResponse",
    "SemanticLookupResponse",
    "StoreResponse",
    "CleanupResponse",
    "WarmupResponse",
    "CacheStatsResponse",
    "RoutingDecisionResponse",
    "ApprovalRateResponse",
    "HealthCheckResponse",
    "ResponseCacheFile",
    "ResponseCacheRecord",
    "SemanticCacheFile",
    "SemanticCacheRecord",
    "SessionState",
    "TaskAnalysis",
]
