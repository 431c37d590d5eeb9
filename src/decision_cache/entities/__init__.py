"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts or persisted
file schemas - use DTOs from the dto package for that.
"""

from .cache_entry import CacheEntryEntity, SemanticCacheEntryEntity
from .cache_match import SemanticMatchEntity
from .cache_stats import CacheStatsEntity, CleanupMode, CleanupResultEntity
from .routing_decision import (
    APPROVING_DECISIONS,
    REJECTING_DECISIONS,
    Band,
    Decision,
    Feedback,
    RoutingDecisionEntity,
)

__all__ = [
    "CacheEntryEntity",
    "SemanticCacheEntryEntity",
    "SemanticMatchEntity",
    "CacheStatsEntity",
    "CleanupMode",
    "CleanupResultEntity",
    "Band",
    "Decision",
    "Feedback",
    "RoutingDecisionEntity",
    "APPROVING_DECISIONS",
    "REJECTING_DECISIONS",
]
