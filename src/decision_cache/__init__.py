"""Decision Cache - tiered response caching and learned routing decisions.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, EmbeddingProvider, MetricsLog, ConfigStore, SessionStateStore)
    - repositories: Data access implementations (JSON files, Redis, metrics log)
    - services: Business logic (CacheService, RoutingService)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts, persisted file schemas)
    - entities: Domain models (internal)

Usage:
    ```python
    from decision_cache import DecisionEngine

    engine = DecisionEngine.create()
    engine.cache.store_exact("/orchestrate status", {"agents": 4})
    entry = engine.cache.lookup_exact("/orchestrate status")
    decision = engine.routing.decide_from_session(token_budget=20000)
    ```

For HTTP API:
    ```python
    from decision_cache.api.app import app
    ```
"""

from decision_cache.config import Settings, get_redis_client, get_settings, settings
from decision_cache.entities import (
    Band,
    CacheEntryEntity,
    CacheStatsEntity,
    CleanupMode,
    CleanupResultEntity,
    Decision,
    Feedback,
    RoutingDecisionEntity,
    SemanticCacheEntryEntity,
    SemanticMatchEntity,
)
from decision_cache.exceptions import (
    DecisionCacheError,
    EmbeddingProviderError,
    InvalidArgumentError,
    MalformedStoreError,
)
from decision_cache.protocols import CacheStore, ConfigStore, EmbeddingProvider, MetricsLog, SessionStateStore
from decision_cache.repositories import (
    HashingEmbeddingProvider,
    JsonConfigStore,
    JsonFileCacheRepository,
    JsonlMetricsLog,
    JsonSessionStateRepository,
    OllamaEmbeddingProvider,
    RedisCacheRepository,
)
from decision_cache.services import CacheService, RoutingService
from decision_cache.engine import DecisionEngine

__all__ = [
    # Configuration
    "Settings",
    "settings",
    "get_settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "ConfigStore",
    "EmbeddingProvider",
    "MetricsLog",
    "SessionStateStore",
    # Services (business logic)
    "CacheService",
    "RoutingService",
    "DecisionEngine",
    # Repositories (data access)
    "JsonFileCacheRepository",
    "RedisCacheRepository",
    "HashingEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "JsonlMetricsLog",
    "JsonConfigStore",
    "JsonSessionStateRepository",
    # Entities (domain models)
    "Band",
    "Decision",
    "Feedback",
    "CleanupMode",
    "CacheEntryEntity",
    "SemanticCacheEntryEntity",
    "SemanticMatchEntity",
    "CacheStatsEntity",
    "CleanupResultEntity",
    "RoutingDecisionEntity",
    # Errors
    "DecisionCacheError",
    "InvalidArgumentError",
    "MalformedStoreError",
    "EmbeddingProviderError",
]
