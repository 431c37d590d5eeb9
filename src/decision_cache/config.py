import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import redis
from dotenv import load_dotenv

load_dotenv()


def _parse_thresholds(raw: str) -> tuple[int, ...]:
    return tuple(int(part) for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Storage
    home_dir: str = os.getenv("DECISION_CACHE_HOME", str(Path.home() / ".decision-cache"))
    cache_backend: str = os.getenv("CACHE_BACKEND", "json")  # "json" or "redis"

    # Cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "3600"))  # 1 hour default
    cache_similarity_threshold: float = float(os.getenv("CACHE_SIMILARITY_THRESHOLD", "0.90"))

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "decision_cache")

    # Embedding
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "hashing")  # or "local", "ollama"
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "paraphrase-multilingual-MiniLM-L12-v2")
    # Vector width of the hashing provider
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "256"))
    embedding_timeout: float = float(os.getenv("EMBEDDING_TIMEOUT", "30.0"))

    # Ollama
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

    # Routing
    band_thresholds: tuple[int, ...] = _parse_thresholds(os.getenv("ROUTING_BAND_THRESHOLDS", "30,50,70"))
    approval_rate_threshold: float = float(os.getenv("APPROVAL_RATE_THRESHOLD", "0.70"))
    session_id: str = os.getenv("SESSION_ID", "unknown")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    debug: bool = os.getenv("DECISION_CACHE_DEBUG", "false").lower() == "true"

    @property
    def cache_dir(self) -> Path:
        """Directory holding the response and semantic cache files."""
        return Path(self.home_dir).expanduser() / "cache"

    @property
    def config_path(self) -> Path:
        return Path(self.home_dir).expanduser() / "config.json"

    @property
    def metrics_path(self) -> Path:
        return Path(self.home_dir).expanduser() / "metrics.jsonl"

    @property
    def session_state_path(self) -> Path:
        return Path(self.home_dir).expanduser() / "session-state.json"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl < 0:
            raise ValueError("CACHE_TTL must be >= 0")

        if not 0 <= self.cache_similarity_threshold <= 1:
            raise ValueError("CACHE_SIMILARITY_THRESHOLD must be between 0 and 1")

        if not 0 <= self.approval_rate_threshold <= 1:
            raise ValueError("APPROVAL_RATE_THRESHOLD must be between 0 and 1")

        if len(self.band_thresholds) != 3:
            raise ValueError(
                f"ROUTING_BAND_THRESHOLDS must hold exactly 3 values, got {self.band_thresholds}"
            )
        if any(low >= high for low, high in zip(self.band_thresholds, self.band_thresholds[1:])):
            raise ValueError(
                f"ROUTING_BAND_THRESHOLDS must be strictly increasing, got {self.band_thresholds}"
            )

        if self.cache_backend not in ("json", "redis"):
            raise ValueError(f"CACHE_BACKEND must be 'json' or 'redis', got {self.cache_backend!r}")

        if self.embedding_provider not in ("hashing", "local", "ollama"):
            raise ValueError(
                f"EMBEDDING_PROVIDER must be one of ['hashing', 'local', 'ollama'], "
                f"got {self.embedding_provider!r}"
            )

        if self.embedding_dimension <= 0:
            raise ValueError("EMBEDDING_DIMENSION must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client(cfg: Settings | None = None) -> redis.Redis:
    """Create a Redis client instance."""
    cfg = cfg or settings
    return redis.from_url(
        cfg.redis_url,
        password=cfg.redis_password,
        decode_responses=True,
    )
