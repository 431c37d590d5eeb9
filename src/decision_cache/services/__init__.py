"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from decision_cache.services import CacheService, RoutingService

    cache = CacheService(repository=repo, embedding_provider=provider)
    routing = RoutingService(metrics_log=log, config=config_store)
    ```
"""

from .cache_service import CacheService
from .routing_service import RoutingService

__all__ = [
    "CacheService",
    "RoutingService",
]
