"""
polycache - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests:
a controllable clock, in-process fake Redis / Memcached clients that record
every call and honor TTLs, and a parametrized harness over all three backends.
"""

import os
import time
from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any

import pytest
from pymemcache.exceptions import MemcacheIllegalInputError

from polycache.cache.backends.memcached import MAX_KEY_LENGTH, MAX_RELATIVE_EXPIRE, MemcachedCacheBackend
from polycache.cache.backends.memory import MemoryCacheBackend, MemoryEntryOptions, MemoryStore
from polycache.cache.backends.redis import RedisCacheBackend
from polycache.cache.interface import CacheInterface

os.environ.setdefault("LOG_LEVEL", "DEBUG")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis honoring PX expiry."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self._store: dict[str, tuple[bytes, float | None]] = {}
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.closed = False

    def _live(self, key: str) -> bytes | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def ttl_ms(self, key: str) -> float | None:
        entry = self._store.get(key)
        if entry is None or entry[1] is None:
            return None
        return (entry[1] - self._clock()) * 1000

    async def get(self, name: str) -> bytes | None:
        self.calls.append(("get", (name,), {}))
        return self._live(name)

    async def set(self, name: str, value: bytes | str, px: int | None = None, ex: int | None = None) -> bool:
        self.calls.append(("set", (name, value), {"px": px, "ex": ex}))
        if isinstance(value, str):
            value = value.encode("utf-8")
        expires_at = None
        if px is not None:
            expires_at = self._clock() + px / 1000
        elif ex is not None:
            expires_at = self._clock() + ex
        self._store[name] = (value, expires_at)
        return True

    async def delete(self, *names: str) -> int:
        self.calls.append(("delete", names, {}))
        count = 0
        for name in names:
            if self._live(name) is not None:
                count += 1
            self._store.pop(name, None)
        return count

    async def exists(self, *names: str) -> int:
        self.calls.append(("exists", names, {}))
        return sum(1 for name in names if self._live(name) is not None)

    async def aclose(self) -> None:
        self.closed = True


class FakeMemcached:
    """In-memory stand-in for a pymemcache client honoring expire semantics."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self._store: dict[str, tuple[bytes, float | None]] = {}
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.closed = False

    @staticmethod
    def _check_key(key: str) -> None:
        # Same rules pymemcache applies before any network I/O.
        try:
            raw = key.encode("ascii")
        except UnicodeEncodeError as e:
            raise MemcacheIllegalInputError(f"Non-ASCII key: {key!r}") from e
        if len(raw) > MAX_KEY_LENGTH:
            raise MemcacheIllegalInputError(f"Key is too long: {raw!r}")
        parts = raw.split()
        if len(parts) != 1 or parts[0] != raw:
            raise MemcacheIllegalInputError(f"Key contains whitespace: {raw!r}")
        if b"\x00" in raw:
            raise MemcacheIllegalInputError(f"Key contains null: {raw!r}")

    def get(self, key: str, default: Any = None) -> bytes | None:
        self._check_key(key)
        self.calls.append(("get", (key,), {}))
        entry = self._store.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return default
        return value

    def set(self, key: str, value: bytes, expire: int = 0, noreply: bool | None = None) -> bool:
        self._check_key(key)
        self.calls.append(("set", (key, value), {"expire": expire}))
        if expire == 0:
            expires_at = None
        elif expire <= MAX_RELATIVE_EXPIRE:
            expires_at = self._clock() + expire
        else:
            expires_at = self._clock() + (expire - time.time())
        self._store[key] = (value, expires_at)
        return True

    def delete(self, key: str, noreply: bool | None = None) -> bool:
        self._check_key(key)
        self.calls.append(("delete", (key,), {}))
        return self._store.pop(key, None) is not None

    def close(self) -> None:
        self.closed = True


class RecordingMemoryStore(MemoryStore):
    """MemoryStore that records every call made by the adapter."""

    def __init__(self, clock: FakeClock, max_size: int | None = None) -> None:
        super().__init__(max_size=max_size, clock=clock)
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def try_get(self, key: str) -> tuple[bool, Any]:
        self.calls.append(("try_get", (key,), {}))
        return super().try_get(key)

    def peek(self, key: str) -> bool:
        self.calls.append(("peek", (key,), {}))
        return super().peek(key)

    def set(self, key: str, value: Any, options: MemoryEntryOptions | None = None) -> None:
        self.calls.append(("set", (key, value), {"options": options}))
        super().set(key, value, options)

    def remove(self, key: str) -> bool:
        self.calls.append(("remove", (key,), {}))
        return super().remove(key)


@dataclass
class BackendHarness:
    """A backend under test plus the client it talks to."""

    name: str
    cache: CacheInterface
    client: Any
    clock: FakeClock
    supports_sliding: bool = field(default=False)

    @property
    def calls(self) -> list[tuple[str, tuple[Any, ...], dict[str, Any]]]:
        return self.client.calls


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis(fake_clock: FakeClock) -> FakeRedis:
    return FakeRedis(fake_clock)


@pytest.fixture
def fake_memcached(fake_clock: FakeClock) -> FakeMemcached:
    return FakeMemcached(fake_clock)


@pytest.fixture
def memory_store(fake_clock: FakeClock) -> RecordingMemoryStore:
    return RecordingMemoryStore(fake_clock)


@pytest.fixture
def memory_cache(memory_store: RecordingMemoryStore) -> MemoryCacheBackend:
    return MemoryCacheBackend(store=memory_store, default_expiration=600)


@pytest.fixture
def redis_cache(fake_redis: FakeRedis) -> RedisCacheBackend:
    return RedisCacheBackend(fake_redis, default_expiration=600)


@pytest.fixture
def memcached_cache(fake_memcached: FakeMemcached) -> MemcachedCacheBackend:
    return MemcachedCacheBackend(fake_memcached, default_expiration=600)


@pytest.fixture(params=["memory", "redis", "memcached"])
def harness(request: pytest.FixtureRequest, fake_clock: FakeClock) -> BackendHarness:
    """Each of the three backends wired to a recording fake client."""
    if request.param == "memory":
        store = RecordingMemoryStore(fake_clock)
        cache: CacheInterface = MemoryCacheBackend(store=store, default_expiration=600)
        return BackendHarness("memory", cache, store, fake_clock, supports_sliding=True)
    if request.param == "redis":
        redis_client = FakeRedis(fake_clock)
        return BackendHarness("redis", RedisCacheBackend(redis_client, default_expiration=600), redis_client, fake_clock)
    memcached_client = FakeMemcached(fake_clock)
    return BackendHarness(
        "memcached", MemcachedCacheBackend(memcached_client, default_expiration=600), memcached_client, fake_clock
    )


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for live testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset cache registry and config singleton after each test to prevent state leakage."""
    yield
    from polycache.cache.factory import reset_cache_factory
    from polycache.config import reset_config

    reset_cache_factory()
    reset_config()
