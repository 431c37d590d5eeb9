"""
Tests for the Redis backend against an in-memory Redis double.
"""

import json

import pytest

from decision_cache.entities import CacheEntryEntity, SemanticCacheEntryEntity
from decision_cache.repositories import RedisCacheRepository
from decision_cache.services import CacheService

from conftest import TTL


@pytest.fixture
def repo(fake_redis):
    return RedisCacheRepository(redis_client=fake_redis, key_prefix="test")


def _semantic(key: str, timestamp: float) -> SemanticCacheEntryEntity:
    return SemanticCacheEntryEntity(key=key, query=key, embedding=[1.0, 0.0], response=key, timestamp=timestamp)


def test_put_and_get_exact(repo, fake_redis):
    repo.put_exact(CacheEntryEntity(key="k", response={"x": 1}, timestamp=10.0))

    entry = repo.get_exact("k")

    assert entry == CacheEntryEntity(key="k", response={"x": 1}, timestamp=10.0, access_count=1)
    assert json.loads(fake_redis.hashes["test:exact"]["k"]) == {"response": {"x": 1}, "timestamp": 10.0}
    assert fake_redis.hashes["test:access"]["k"] == "1"


def test_increment_access(repo):
    repo.put_exact(CacheEntryEntity(key="k", response="v", timestamp=10.0))

    assert repo.increment_access("k").access_count == 2
    assert repo.increment_access("k").access_count == 3
    assert repo.increment_access("missing") is None


def test_put_resets_access_count(repo):
    repo.put_exact(CacheEntryEntity(key="k", response="v", timestamp=10.0))
    repo.increment_access("k")

    repo.put_exact(CacheEntryEntity(key="k", response="w", timestamp=20.0))

    assert repo.get_exact("k").access_count == 1


def test_malformed_exact_entry_is_ignored(repo, fake_redis):
    fake_redis.hashes["test:exact"]["bad"] = "not json"
    repo.put_exact(CacheEntryEntity(key="good", response="v", timestamp=10.0))

    assert repo.get_exact("bad") is None
    assert [e.key for e in repo.list_exact()] == ["good"]


def test_semantic_entries_keep_order(repo):
    for key in ("b", "a"):
        repo.append_semantic(_semantic(key, 1.0))

    assert [e.key for e in repo.list_semantic()] == ["b", "a"]


def test_remove_older_than(repo, fake_redis):
    repo.put_exact(CacheEntryEntity(key="old", response=1, timestamp=5.0))
    repo.put_exact(CacheEntryEntity(key="new", response=2, timestamp=50.0))
    fake_redis.hashes["test:exact"]["broken"] = "{"
    repo.append_semantic(_semantic("old", 5.0))
    repo.append_semantic(_semantic("new", 50.0))

    removed = repo.remove_older_than(10.0)

    assert removed == (2, 1)
    assert [e.key for e in repo.list_exact()] == ["new"]
    assert "old" not in fake_redis.hashes["test:access"]
    assert [e.key for e in repo.list_semantic()] == ["new"]


def test_clear_all(repo, fake_redis):
    repo.put_exact(CacheEntryEntity(key="a", response=1, timestamp=1.0))
    repo.append_semantic(_semantic("s", 1.0))

    assert repo.clear_all() == (1, 1)
    assert repo.list_exact() == []
    assert repo.list_semantic() == []


def test_health_check(repo, fake_redis):
    assert repo.health_check() is True

    fake_redis.healthy = False

    assert repo.health_check() is False


def test_cache_service_over_redis(repo, stub_embeddings, clock):
    """The service behaves the same on either backend."""
    cache = CacheService(repository=repo, embedding_provider=stub_embeddings, ttl=TTL, clock=clock)
    cache.store_exact("k", "v")

    assert cache.lookup_exact("k").access_count == 2
    clock.advance(TTL + 1)
    assert cache.lookup_exact("k") is None
    assert cache.cleanup().exact_removed == 1
    assert cache.get_stats()["backend"] == "redis"
