"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from decision_cache.entities import Band, CleanupMode, Feedback

from .store_files import TaskAnalysis


class ExactLookupRequest(BaseModel):
    """Request DTO for an exact-key lookup."""

    key: str = Field(..., description="The cache key", min_length=1)


class ExactStoreRequest(BaseModel):
    """Request DTO for storing under an exact key."""

    key: str = Field(..., description="The cache key", min_length=1)
    response: Any = Field(..., description="JSON payload to cache")


class SemanticLookupRequest(BaseModel):
    """Request DTO for a similarity lookup."""

    query: str = Field(..., description="The query to match", min_length=1)
    threshold: float | None = Field(
        None,
        description="Override the similarity threshold (0-1, higher = more strict)",
        ge=0.0,
        le=1.0,
    )


class SemanticStoreRequest(BaseModel):
    """Request DTO for appending to the semantic cache."""

    query: str = Field(..., description="The query text to embed", min_length=1)
    key: str = Field(..., description="Key to store with the entry", min_length=1)
    response: Any = Field(..., description="JSON payload to cache")


class CleanupRequest(BaseModel):
    mode: CleanupMode = Field(CleanupMode.EXPIRED, description="'expired' or 'all'")


class WarmupItem(BaseModel):
    key: str = Field(..., min_length=1)
    response: Any


class WarmupRequest(BaseModel):
    """Request DTO for pre-loading the exact cache."""

    entries: list[WarmupItem] = Field(default_factory=list)


class RoutingDecideRequest(TaskAnalysis):
    """Analyzer output plus the caller's token budget."""

    token_budget: int = Field(0, description="Tokens available; 0 means no budget")


class FeedbackRequest(BaseModel):
    """Request DTO for recording a human approval or rejection."""

    band: Band
    feedback: Feedback
    reason: str = ""
