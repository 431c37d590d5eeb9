"""Redis implementation of CacheStore.

Layout under the configured key prefix:

- ``<prefix>:exact``: hash, field = cache key, value = JSON {response, timestamp}
- ``<prefix>:access``: hash, field = cache key, value = access count (HINCRBY)
- ``<prefix>:semantic``: list of JSON semantic records in insertion order

Access counts live in their own hash so hits are a single atomic increment.
"""

import json
import logging

import redis
from pydantic import ValidationError

from decision_cache.config import get_redis_client, settings
from decision_cache.dto.store_files import ResponseCacheRecord, SemanticCacheRecord
from decision_cache.entities import CacheEntryEntity, SemanticCacheEntryEntity

logger = logging.getLogger(__name__)


class RedisCacheRepository:
    """Redis implementation using a hash per exact-store field and a list for semantic entries.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
    ) -> None:
        """Initialize the Redis cache repository.

        Args:
            redis_client: Redis client instance (decode_responses=True). If None, creates default.
            key_prefix: Prefix for the three Redis keys. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = key_prefix or settings.cache_key_prefix
        self._exact_key = f"{self._prefix}:exact"
        self._access_key = f"{self._prefix}:access"
        self._semantic_key = f"{self._prefix}:semantic"

    @classmethod
    def create(
        cls,
        redis_client: redis.Redis | None = None,
        key_prefix: str | None = None,
    ) -> "RedisCacheRepository":
        """Factory method to create RedisCacheRepository with defaults.

        Args:
            redis_client: Redis client. If None, built from settings.
            key_prefix: Key prefix. If None, uses settings.

        Returns:
            Configured RedisCacheRepository
        """
        return cls(redis_client=redis_client, key_prefix=key_prefix)

    def _parse_exact(self, key: str, raw: str | None, count: str | None) -> CacheEntryEntity | None:
        if raw is None:
            return None
        try:
            record = ResponseCacheRecord.model_validate_json(raw)
        except ValidationError:
            logger.warning("Malformed exact entry %r in %s; ignoring it", key, self._exact_key)
            return None
        return CacheEntryEntity(
            key=key,
            response=record.response,
            timestamp=record.timestamp,
            access_count=max(1, int(count)) if count is not None else 1,
        )

    def _parse_semantic(self, raw: str) -> SemanticCacheRecord | None:
        try:
            return SemanticCacheRecord.model_validate_json(raw)
        except ValidationError:
            logger.warning("Malformed semantic entry in %s; ignoring it", self._semantic_key)
            return None

    def get_exact(self, key: str) -> CacheEntryEntity | None:
        """Read an exact entry without side effects."""
        raw = self._client.hget(self._exact_key, key)
        count = self._client.hget(self._access_key, key)
        return self._parse_exact(key, raw, count)  # type: ignore[arg-type]

    def put_exact(self, entry: CacheEntryEntity) -> None:
        """Insert or overwrite an exact entry."""
        payload = json.dumps({"response": entry.response, "timestamp": entry.timestamp})
        pipe = self._client.pipeline()
        pipe.hset(self._exact_key, entry.key, payload)
        pipe.hset(self._access_key, entry.key, entry.access_count)
        pipe.execute()

    def increment_access(self, key: str) -> CacheEntryEntity | None:
        """Add one to an entry's access count."""
        if not self._client.hexists(self._exact_key, key):
            return None
        count = self._client.hincrby(self._access_key, key, 1)
        raw = self._client.hget(self._exact_key, key)
        return self._parse_exact(key, raw, str(count))  # type: ignore[arg-type]

    def list_exact(self) -> list[CacheEntryEntity]:
        """Return every exact entry."""
        raw_entries: dict = self._client.hgetall(self._exact_key)  # type: ignore[assignment]
        counts: dict = self._client.hgetall(self._access_key)  # type: ignore[assignment]
        entries = []
        for key, raw in raw_entries.items():
            entry = self._parse_exact(key, raw, counts.get(key))
            if entry is not None:
                entries.append(entry)
        return entries

    def append_semantic(self, entry: SemanticCacheEntryEntity) -> None:
        """Append a semantic entry after all existing ones."""
        record = SemanticCacheRecord(
            key=entry.key,
            query=entry.query,
            embedding=entry.embedding,
            response=entry.response,
            timestamp=entry.timestamp,
        )
        self._client.rpush(self._semantic_key, record.model_dump_json())

    def list_semantic(self) -> list[SemanticCacheEntryEntity]:
        """Return every semantic entry in stored order."""
        entries = []
        for raw in self._client.lrange(self._semantic_key, 0, -1):  # type: ignore[union-attr]
            record = self._parse_semantic(raw)
            if record is not None:
                entries.append(
                    SemanticCacheEntryEntity(
                        key=record.key,
                        query=record.query,
                        embedding=record.embedding,
                        response=record.response,
                        timestamp=record.timestamp,
                    )
                )
        return entries

    def remove_older_than(self, cutoff: float) -> tuple[int, int]:
        """Delete entries whose timestamp is strictly below cutoff.

        Unparseable entries count as expired and are removed too.
        """
        raw_entries: dict = self._client.hgetall(self._exact_key)  # type: ignore[assignment]
        stale_keys = []
        for key, raw in raw_entries.items():
            entry = self._parse_exact(key, raw, None)
            if entry is None or entry.timestamp < cutoff:
                stale_keys.append(key)

        raw_semantic: list = self._client.lrange(self._semantic_key, 0, -1)  # type: ignore[assignment]
        kept_semantic = []
        for raw in raw_semantic:
            record = self._parse_semantic(raw)
            if record is not None and record.timestamp >= cutoff:
                kept_semantic.append(raw)
        semantic_removed = len(raw_semantic) - len(kept_semantic)

        pipe = self._client.pipeline()
        if stale_keys:
            pipe.hdel(self._exact_key, *stale_keys)
            pipe.hdel(self._access_key, *stale_keys)
        if semantic_removed:
            pipe.delete(self._semantic_key)
            if kept_semantic:
                pipe.rpush(self._semantic_key, *kept_semantic)
        pipe.execute()

        return len(stale_keys), semantic_removed

    def clear_all(self) -> tuple[int, int]:
        """Delete every entry in both stores."""
        exact_removed = int(self._client.hlen(self._exact_key))  # type: ignore[arg-type]
        semantic_removed = int(self._client.llen(self._semantic_key))  # type: ignore[arg-type]
        self._client.delete(self._exact_key, self._access_key, self._semantic_key)
        return exact_removed, semantic_removed

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def get_stats(self) -> dict:
        """Get repository details."""
        return {
            "backend": "redis",
            "location": self._prefix,
        }

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
