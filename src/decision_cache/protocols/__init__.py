"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (JSON files -> Redis, hashing -> Ollama, etc.)
- Unit testing with in-memory implementations
- Clear separation of concerns

Usage:
    ```python
    from decision_cache.protocols import CacheStore, EmbeddingProvider

    repo: CacheStore = JsonFileCacheRepository.create()  # works
    repo: CacheStore = RedisCacheRepository.create()     # also works
    ```
"""

from .cache_store import CacheStore
from .config_store import ConfigStore
from .embedding_provider import EmbeddingProvider
from .metrics_log import MetricsLog
from .session_state_store import SessionStateStore

__all__ = [
    "CacheStore",
    "ConfigStore",
    "EmbeddingProvider",
    "MetricsLog",
    "SessionStateStore",
]
