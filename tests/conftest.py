"""
Shared pytest fixtures for the decision cache tests.

Provides a controllable clock, file-backed repositories under tmp_path,
an in-memory Redis double and a stub embedding provider.
"""

import json
from collections import defaultdict

import pytest
import redis

from decision_cache.config import Settings
from decision_cache.engine import DecisionEngine
from decision_cache.repositories import (
    HashingEmbeddingProvider,
    JsonConfigStore,
    JsonFileCacheRepository,
    JsonlMetricsLog,
    JsonSessionStateRepository,
)
from decision_cache.services import CacheService, RoutingService

START_TIME = 1_767_600_000.0  # 2026-01-05T08:00:00Z
TTL = 3600


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubEmbeddingProvider:
    """Encodes each distinct text as a one-element id vector and records calls."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self._ids: dict[str, int] = {}

    @property
    def dimension(self) -> int:
        return 1

    @property
    def model_name(self) -> str:
        return "stub"

    def encode(self, text: str) -> list[float]:
        self.calls.append(text)
        return [float(self._ids.setdefault(text, len(self._ids)))]

    def encode_batch(self, texts: list[str]) -> list[list[float]]:
        return [self.encode(text) for text in texts]

    def is_available(self) -> bool:
        return True

    def text_for(self, vector: list[float]) -> str:
        wanted = int(vector[0])
        return next(text for text, idx in self._ids.items() if idx == wanted)


def table_similarity(provider: StubEmbeddingProvider, scores: dict[str, float]):
    """Similarity function scoring every lookup by the stored entry's query text."""

    def similarity(query_vector, entry_vector) -> float:
        return scores[provider.text_for(entry_vector)]

    return similarity


class FakePipeline:
    def __init__(self, client: "FakeRedis") -> None:
        self._client = client
        self._ops: list = []

    def __getattr__(self, name):
        def queue(*args, **kwargs):
            self._ops.append((name, args, kwargs))
            return self

        return queue

    def execute(self) -> list:
        return [getattr(self._client, name)(*args, **kwargs) for name, args, kwargs in self._ops]


class FakeRedis:
    """Dict-backed stand-in for redis.Redis(decode_responses=True).

    Implements only the commands RedisCacheRepository issues.
    """

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = defaultdict(dict)
        self.lists: dict[str, list[str]] = defaultdict(list)
        self.healthy = True

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    def hget(self, name, key):
        return self.hashes[name].get(key)

    def hset(self, name, key, value):
        is_new = key not in self.hashes[name]
        self.hashes[name][key] = str(value)
        return int(is_new)

    def hexists(self, name, key):
        return key in self.hashes[name]

    def hincrby(self, name, key, amount=1):
        value = int(self.hashes[name].get(key, "0")) + amount
        self.hashes[name][key] = str(value)
        return value

    def hgetall(self, name):
        return dict(self.hashes[name])

    def hdel(self, name, *keys):
        removed = 0
        for key in keys:
            if self.hashes[name].pop(key, None) is not None:
                removed += 1
        return removed

    def hlen(self, name):
        return len(self.hashes[name])

    def rpush(self, name, *values):
        self.lists[name].extend(str(v) for v in values)
        return len(self.lists[name])

    def lrange(self, name, start, end):
        items = self.lists[name]
        return list(items[start:] if end == -1 else items[start : end + 1])

    def llen(self, name):
        return len(self.lists[name])

    def delete(self, *names):
        removed = 0
        for name in names:
            if self.hashes.pop(name, None) is not None:
                removed += 1
            if self.lists.pop(name, None) is not None:
                removed += 1
        return removed

    def ping(self):
        if not self.healthy:
            raise redis.ConnectionError("connection refused")
        return True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stub_embeddings():
    return StubEmbeddingProvider()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def json_repository(tmp_path):
    return JsonFileCacheRepository(cache_dir=tmp_path / "cache")


@pytest.fixture
def cache_service(json_repository, clock):
    """CacheService over JSON files with the hashing provider and a fake clock."""
    return CacheService(
        repository=json_repository,
        embedding_provider=HashingEmbeddingProvider(dimension=64),
        similarity_threshold=0.90,
        ttl=TTL,
        clock=clock,
    )


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


@pytest.fixture
def write_config(config_path):
    """Write a config.json document for the routing tests."""

    def _write(data: dict) -> None:
        config_path.write_text(json.dumps(data), encoding="utf-8")

    return _write


@pytest.fixture
def metrics_log(tmp_path, clock):
    return JsonlMetricsLog(path=tmp_path / "metrics.jsonl", session_id="test-session", clock=clock)


@pytest.fixture
def session_state_path(tmp_path):
    return tmp_path / "session-state.json"


@pytest.fixture
def routing_service(metrics_log, config_path, session_state_path, clock):
    return RoutingService(
        metrics_log=metrics_log,
        config=JsonConfigStore(config_path),
        band_thresholds=(30, 50, 70),
        default_rate_threshold=0.70,
        session_state=JsonSessionStateRepository(session_state_path),
        clock=clock,
    )


@pytest.fixture
def test_settings(tmp_path):
    """Settings rooted at tmp_path with the dependency-free defaults."""
    return Settings(
        home_dir=str(tmp_path / "home"),
        cache_backend="json",
        cache_ttl=TTL,
        cache_similarity_threshold=0.90,
        embedding_provider="hashing",
        embedding_dimension=64,
        band_thresholds=(30, 50, 70),
        approval_rate_threshold=0.70,
        session_id="test-session",
    )


@pytest.fixture
def engine(test_settings):
    return DecisionEngine.create(test_settings)
