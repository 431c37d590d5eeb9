"""Schemas of the persisted cache files and session state.

The JSON repository validates everything it reads against these models,
so a file that parses but has the wrong shape counts as malformed.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ResponseCacheRecord(BaseModel):
    """One exact-match entry, stored under its key."""

    response: Any = None
    timestamp: float
    access_count: int = Field(1, ge=1)


class ResponseCacheFile(BaseModel):
    """response-cache.json: ``{"entries": {key: record}}``."""

    entries: dict[str, ResponseCacheRecord] = Field(default_factory=dict)


class SemanticCacheRecord(BaseModel):
    """One semantic entry, stored in insertion order."""

    key: str
    query: str
    embedding: list[float]
    response: Any = None
    timestamp: float


class SemanticCacheFile(BaseModel):
    """semantic-cache.json: ``{"entries": [record, ...]}``."""

    entries: list[SemanticCacheRecord] = Field(default_factory=list)


class TaskAnalysis(BaseModel):
    """Output of the upstream task analyzer.

    Missing or non-numeric numbers become 0, which routes to simple/skip.
    """

    complexity_score: int = 0
    recommended_pattern: str = "single"
    estimated_tokens: int = 0

    model_config = {"extra": "allow"}

    @field_validator("complexity_score", "estimated_tokens", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> int:
        if isinstance(value, bool) or value is None:
            return 0
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0

    @field_validator("recommended_pattern", mode="before")
    @classmethod
    def _coerce_pattern(cls, value: Any) -> str:
        if value is None or value == "":
            return "single"
        return str(value)


class SessionState(BaseModel):
    """session-state.json, of which only task_analysis is read."""

    task_analysis: TaskAnalysis | None = None

    model_config = {"extra": "allow"}
