"""JSON file implementation of CacheStore.

This is the default backend. It keeps the two cache tiers in two files
under the cache directory:

- ``response-cache.json``: ``{"entries": {key: {response, timestamp, access_count}}}``
- ``semantic-cache.json``: ``{"entries": [{key, query, embedding, response, timestamp}]}``

Writers hold a file lock for the whole read-modify-write and replace the
file atomically, so concurrent processes never lose each other's updates
and readers never see a half-written file.
"""

import logging
import os
from pathlib import Path

from filelock import FileLock
from pydantic import BaseModel, ValidationError

from decision_cache.config import settings
from decision_cache.dto.store_files import (
    ResponseCacheFile,
    ResponseCacheRecord,
    SemanticCacheFile,
    SemanticCacheRecord,
)
from decision_cache.entities import CacheEntryEntity, SemanticCacheEntryEntity
from decision_cache.exceptions import MalformedStoreError

logger = logging.getLogger(__name__)

RESPONSE_CACHE_FILE = "response-cache.json"
SEMANTIC_CACHE_FILE = "semantic-cache.json"
LOCK_FILE = "cache.lock"


class JsonFileCacheRepository:
    """File-backed cache store guarded by a FileLock.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, cache_dir: Path | str | None = None, lock_timeout: float = 10.0) -> None:
        """Initialize the repository.

        Args:
            cache_dir: Directory for the cache files. Defaults to settings.cache_dir.
            lock_timeout: Seconds to wait for the write lock before failing.
        """
        self._cache_dir = Path(cache_dir) if cache_dir is not None else settings.cache_dir
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self._response_path = self._cache_dir / RESPONSE_CACHE_FILE
        self._semantic_path = self._cache_dir / SEMANTIC_CACHE_FILE
        self._lock = FileLock(str(self._cache_dir / LOCK_FILE), timeout=lock_timeout)

    @classmethod
    def create(cls, cache_dir: Path | str | None = None) -> "JsonFileCacheRepository":
        """Factory method to create JsonFileCacheRepository with defaults.

        Args:
            cache_dir: Cache directory. If None, uses settings.

        Returns:
            Configured JsonFileCacheRepository
        """
        return cls(cache_dir=cache_dir)

    # === File access ===

    def _read_model(self, path: Path, model: type[BaseModel]) -> BaseModel:
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return model()
        except OSError as e:
            raise MalformedStoreError(str(path), str(e)) from e
        except UnicodeDecodeError as e:
            raise MalformedStoreError(str(path), f"not UTF-8 ({e.reason} at byte {e.start})") from e

        if not raw.strip():
            return model()

        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            raise MalformedStoreError(str(path), f"{e.error_count()} validation error(s)") from e

    def _load(self, path: Path, model: type[BaseModel]) -> BaseModel:
        """Read a store file, falling back to an empty store if it is unreadable."""
        try:
            return self._read_model(path, model)
        except MalformedStoreError as e:
            logger.warning("%s; treating it as empty", e)
            return model()

    def _load_responses(self) -> ResponseCacheFile:
        return self._load(self._response_path, ResponseCacheFile)  # type: ignore[return-value]

    def _load_semantic(self) -> SemanticCacheFile:
        return self._load(self._semantic_path, SemanticCacheFile)  # type: ignore[return-value]

    def _write(self, path: Path, data: BaseModel) -> None:
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(data.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp_path, path)

    @staticmethod
    def _to_entry(key: str, record: ResponseCacheRecord) -> CacheEntryEntity:
        return CacheEntryEntity(
            key=key,
            response=record.response,
            timestamp=record.timestamp,
            access_count=record.access_count,
        )

    @staticmethod
    def _to_semantic_entry(record: SemanticCacheRecord) -> SemanticCacheEntryEntity:
        return SemanticCacheEntryEntity(
            key=record.key,
            query=record.query,
            embedding=record.embedding,
            response=record.response,
            timestamp=record.timestamp,
        )

    # === Exact store ===

    def get_exact(self, key: str) -> CacheEntryEntity | None:
        """Read an exact entry without side effects."""
        record = self._load_responses().entries.get(key)
        if record is None:
            return None
        return self._to_entry(key, record)

    def put_exact(self, entry: CacheEntryEntity) -> None:
        """Insert or overwrite an exact entry."""
        with self._lock:
            data = self._load_responses()
            data.entries[entry.key] = ResponseCacheRecord(
                response=entry.response,
                timestamp=entry.timestamp,
                access_count=entry.access_count,
            )
            self._write(self._response_path, data)

    def increment_access(self, key: str) -> CacheEntryEntity | None:
        """Add one to an entry's access count."""
        with self._lock:
            data = self._load_responses()
            record = data.entries.get(key)
            if record is None:
                return None
            record.access_count += 1
            self._write(self._response_path, data)
            return self._to_entry(key, record)

    def list_exact(self) -> list[CacheEntryEntity]:
        """Return every exact entry."""
        return [self._to_entry(key, record) for key, record in self._load_responses().entries.items()]

    # === Semantic store ===

    def append_semantic(self, entry: SemanticCacheEntryEntity) -> None:
        """Append a semantic entry after all existing ones."""
        with self._lock:
            data = self._load_semantic()
            data.entries.append(
                SemanticCacheRecord(
                    key=entry.key,
                    query=entry.query,
                    embedding=entry.embedding,
                    response=entry.response,
                    timestamp=entry.timestamp,
                )
            )
            self._write(self._semantic_path, data)

    def list_semantic(self) -> list[SemanticCacheEntryEntity]:
        """Return every semantic entry in stored order."""
        return [self._to_semantic_entry(record) for record in self._load_semantic().entries]

    # === Maintenance ===

    def remove_older_than(self, cutoff: float) -> tuple[int, int]:
        """Delete entries whose timestamp is strictly below cutoff."""
        with self._lock:
            responses = self._load_responses()
            kept = {key: rec for key, rec in responses.entries.items() if rec.timestamp >= cutoff}
            exact_removed = len(responses.entries) - len(kept)
            if exact_removed:
                self._write(self._response_path, ResponseCacheFile(entries=kept))

            semantic = self._load_semantic()
            kept_semantic = [rec for rec in semantic.entries if rec.timestamp >= cutoff]
            semantic_removed = len(semantic.entries) - len(kept_semantic)
            if semantic_removed:
                self._write(self._semantic_path, SemanticCacheFile(entries=kept_semantic))

        return exact_removed, semantic_removed

    def clear_all(self) -> tuple[int, int]:
        """Delete every entry in both stores."""
        with self._lock:
            exact_removed = len(self._load_responses().entries)
            semantic_removed = len(self._load_semantic().entries)
            self._write(self._response_path, ResponseCacheFile())
            self._write(self._semantic_path, SemanticCacheFile())
        return exact_removed, semantic_removed

    def health_check(self) -> bool:
        """Check that the cache directory is writable."""
        return self._cache_dir.is_dir() and os.access(self._cache_dir, os.W_OK)

    def get_stats(self) -> dict:
        """Get repository details."""
        return {
            "backend": "json",
            "location": str(self._cache_dir),
        }

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir
