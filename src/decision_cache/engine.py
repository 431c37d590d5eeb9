"""Wiring of repositories and services into one engine.

The HTTP API, the CLI and library callers all build their stack here,
so the backend and embedding choices made in Settings apply everywhere.
"""

import logging
from dataclasses import dataclass

from decision_cache.config import Settings, get_redis_client, settings
from decision_cache.protocols import CacheStore, EmbeddingProvider
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

logger = logging.getLogger(__name__)


def build_repository(cfg: Settings) -> CacheStore:
    """Create the cache backend named by cfg.cache_backend."""
    if cfg.cache_backend == "redis":
        return RedisCacheRepository.create(
            redis_client=get_redis_client(cfg),
            key_prefix=cfg.cache_key_prefix,
        )
    return JsonFileCacheRepository.create(cache_dir=cfg.cache_dir)


def build_embedding_provider(cfg: Settings) -> EmbeddingProvider:
    """Create the embedding provider named by cfg.embedding_provider."""
    if cfg.embedding_provider == "ollama":
        return OllamaEmbeddingProvider.create(
            model_name=cfg.embedding_model,
            base_url=cfg.ollama_base_url,
            timeout=cfg.embedding_timeout,
        )
    if cfg.embedding_provider == "local":
        # Requires the "local" extra (sentence-transformers)
        from decision_cache.repositories.local_embedding_provider import LocalEmbeddingProvider

        return LocalEmbeddingProvider.create(model_name=cfg.embedding_model)
    return HashingEmbeddingProvider.create(dimension=cfg.embedding_dimension)


@dataclass
class DecisionEngine:
    """The cache store and the routing policy, sharing one configuration.

    Example:
        ```python
        engine = DecisionEngine.create()
        response, cached = engine.cache.get_or_compute("/orchestrate status", run_status)
        decision = engine.routing.decide_from_session(token_budget=20000)
        ```
    """

    cache: CacheService
    routing: RoutingService
    settings: Settings

    @classmethod
    def create(cls, cfg: Settings | None = None) -> "DecisionEngine":
        """Build the default stack from settings.

        Args:
            cfg: Settings to use. Defaults to the global settings.

        Returns:
            Configured DecisionEngine
        """
        cfg = cfg or settings
        config_store = JsonConfigStore.create(cfg.config_path)

        cache = CacheService(
            repository=build_repository(cfg),
            embedding_provider=build_embedding_provider(cfg),
            similarity_threshold=cfg.cache_similarity_threshold,
            ttl=cfg.cache_ttl,
        )
        routing = RoutingService(
            metrics_log=JsonlMetricsLog(path=cfg.metrics_path, config=config_store, session_id=cfg.session_id),
            config=config_store,
            band_thresholds=cfg.band_thresholds,
            default_rate_threshold=cfg.approval_rate_threshold,
            session_state=JsonSessionStateRepository(cfg.session_state_path),
        )

        logger.debug(
            "Decision engine ready (backend=%s, embeddings=%s, home=%s)",
            cfg.cache_backend,
            cfg.embedding_provider,
            cfg.home_dir,
        )
        return cls(cache=cache, routing=routing, settings=cfg)

    def close(self) -> None:
        """Release network clients held by the embedding provider."""
        close = getattr(self.cache.embedding_provider, "close", None)
        if callable(close):
            close()
