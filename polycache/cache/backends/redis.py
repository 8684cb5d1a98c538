"""
polycache - Redis Cache Backend

Asynchronous Redis cache implementation with:
- JSON value encoding through the shared value codec
- Per-key TTL (PX milliseconds), re-armed on every set
- Optional namespace prefixing

Redis has no sliding expiration: sliding requests are accepted and applied as
absolute, and reads never touch the TTL.

Requires: redis>=5.0 with asyncio support

Example:
    cache = RedisCacheBackend.from_url("redis://localhost:6379/0")
    await cache.set("session:42", {"user": "alice"}, timedelta(minutes=5))
    record = await cache.get("session:42", SessionRecord)
"""

from __future__ import annotations

import logging
import math
from datetime import timedelta
from typing import Any

from ..codec import JsonValueCodec, default_codec
from ..expiration import REDIS_CAPABILITIES, ExpirationDirective, ExpirationKind, resolve_expiration
from ..keys import make_key, validate_key

logger = logging.getLogger(__name__)

try:
    # redis-py asyncio client (v4.2+)
    from redis.asyncio import Redis
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis async client is required but not installed. "
        "Install with: pip install 'redis>=5.0.0' or add 'redis' to your dependencies."
    ) from e


def ttl_milliseconds(directive: ExpirationDirective) -> int:
    """PX argument for a live directive, rounded up to at least 1 ms."""
    return max(1, math.ceil(directive.seconds * 1000))


class RedisCacheBackend:
    """
    Redis cache backend with JSON encoding and TTL.

    Notes:
    - The client is supplied at construction and never replaced.
    - Transport errors from the client propagate unchanged.
    - A zero lifetime deletes the key instead of writing it, since the entry
      would be unreachable immediately and Redis rejects a zero expiry.
    """

    capabilities = REDIS_CAPABILITIES

    def __init__(
        self,
        client: Redis,
        default_expiration: timedelta | float = timedelta(minutes=10),
        namespace: str | None = None,
        codec: JsonValueCodec | None = None,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            client: redis.asyncio client (or compatible)
            default_expiration: Absolute lifetime used when set() gets none
            namespace: Optional key prefix
            codec: Value codec (shared JSON codec by default)
        """
        self._client = client
        if not isinstance(default_expiration, timedelta):
            default_expiration = timedelta(seconds=default_expiration)
        self.default_expiration = default_expiration
        self.namespace = namespace
        self._codec = codec or default_codec

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        default_expiration: timedelta | float = timedelta(minutes=10),
        namespace: str | None = None,
        max_connections: int = 10,
        socket_timeout: float = 5,
    ) -> RedisCacheBackend:
        """
        Build a backend around a pooled client.

        Args:
            redis_url: Connection URL, e.g. redis://localhost:6379/0 or rediss:// for TLS
            default_expiration: Absolute lifetime used when set() gets none
            namespace: Optional key prefix
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
        """
        if not redis_url:
            raise ValueError("redis_url is required")

        # Lazy connection; connects on first command. Raw bytes in and out.
        client = Redis.from_url(  # type: ignore[call-overload]
            url=redis_url,
            decode_responses=False,
            max_connections=max_connections,
            socket_timeout=socket_timeout,
        )
        return cls(client, default_expiration=default_expiration, namespace=namespace)

    @property
    def client(self) -> Redis:
        return self._client

    async def set(
        self,
        key: str,
        value: Any,
        expiration: timedelta | float | None = None,
        kind: ExpirationKind | str = ExpirationKind.ABSOLUTE,
    ) -> None:
        """Encode and store a value with a fixed TTL."""
        validate_key(key)
        if expiration is None:
            expiration = self.default_expiration
        directive = resolve_expiration(expiration, kind, self.capabilities)
        payload = self._codec.encode(value)

        ns_key = make_key(key, self.namespace)
        if directive.already_expired:
            logger.debug("Zero TTL for key '%s'; deleting instead of writing", key, extra={"key": key})
            await self._client.delete(ns_key)
            return

        await self._client.set(ns_key, payload, px=ttl_milliseconds(directive))

    async def get(self, key: str, value_type: Any = None, default: Any = None) -> Any:
        """Fetch and decode a value; absence returns ``default``."""
        validate_key(key)
        data = await self._client.get(make_key(key, self.namespace))
        if data is None:
            return default
        return self._codec.decode(data, value_type)

    async def contains(self, key: str) -> bool:
        validate_key(key)
        return bool(await self._client.exists(make_key(key, self.namespace)))

    async def remove(self, key: str) -> None:
        validate_key(key)
        await self._client.delete(make_key(key, self.namespace))

    async def close(self) -> None:
        """Close the Redis client and release its connection pool."""
        await self._client.aclose()
        logger.info("Closed Redis cache backend", extra={"namespace": self.namespace})
