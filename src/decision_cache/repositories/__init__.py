"""Repository layer for data access.

This layer abstracts external dependencies (files, Redis, embedding APIs)
behind protocol-based interfaces. This enables:
- Easy swapping of implementations (JSON files -> Redis, hashing -> Ollama, etc.)
- Unit testing with in-memory implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.

LocalEmbeddingProvider is not re-exported here because importing it pulls in
sentence-transformers; import it from its module when the ``local`` extra is
installed.
"""

from decision_cache.protocols import CacheStore, ConfigStore, EmbeddingProvider, MetricsLog, SessionStateStore

from .hashing_embedding_provider import HashingEmbeddingProvider
from .json_config_store import JsonConfigStore
from .json_file_repository import JsonFileCacheRepository
from .jsonl_metrics_log import JsonlMetricsLog
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .redis_repository import RedisCacheRepository
from .session_state_repository import JsonSessionStateRepository

__all__ = [
    "CacheStore",
    "ConfigStore",
    "EmbeddingProvider",
    "MetricsLog",
    "SessionStateStore",
    "JsonFileCacheRepository",
    "RedisCacheRepository",
    "HashingEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "JsonlMetricsLog",
    "JsonConfigStore",
    "JsonSessionStateRepository",
]
