"""
polycache - Memcached Cache Backend

Object-cache backend over pymemcache with:
- JSON value encoding through the shared value codec
- Per-item expiry in whole seconds, re-armed on every set
- Optional namespace prefixing
- Keys memcached would reject mapped to a SHA-256 digest

pymemcache is a blocking client, so every call runs in a worker thread; the
pooled client built by ``from_server`` is safe to share across those threads.

Memcached has no sliding expiration (sliding degrades to absolute) and no
existence probe: ``contains`` performs a full read and tests the result. That
extra read per existence check is an accepted cost of the protocol.

Requires: pymemcache>=4.0
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import math
import time
from datetime import timedelta
from typing import Any

from ..codec import JsonValueCodec, default_codec
from ..expiration import MEMCACHED_CAPABILITIES, ExpirationDirective, ExpirationKind, resolve_expiration
from ..keys import make_key, validate_key

logger = logging.getLogger(__name__)

try:
    from pymemcache.client.base import PooledClient
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Memcached client is required but not installed. "
        "Install with: pip install 'pymemcache>=4.0' or add 'pymemcache' to your dependencies."
    ) from e

# Relative expiry above this many seconds is read by memcached as a Unix timestamp.
MAX_RELATIVE_EXPIRE = 60 * 60 * 24 * 30

# Protocol limit on key length, in bytes.
MAX_KEY_LENGTH = 250

HASHED_KEY_PREFIX = "sha256:"


def memcached_expire(directive: ExpirationDirective, now: float | None = None) -> int:
    """
    Expire argument for a live directive.

    Rounds up to whole seconds (minimum 1, since 0 means "never expire") and
    converts lifetimes beyond 30 days to an absolute Unix timestamp.
    """
    seconds = max(1, math.ceil(directive.seconds))
    if seconds > MAX_RELATIVE_EXPIRE:
        return int(time.time() if now is None else now) + seconds
    return seconds


def is_legal_memcached_key(key: str) -> bool:
    """True if the server accepts key as-is: ASCII, no whitespace or control bytes, at most 250 bytes."""
    if not key.isascii() or len(key) > MAX_KEY_LENGTH:
        return False
    return all(32 < ord(ch) < 127 for ch in key)


def memcached_key(key: str) -> str:
    """
    Wire key for a namespaced cache key.

    Legal keys pass through unchanged. Anything else (spaces, non-ASCII text,
    over-long keys) maps to a stable SHA-256 digest so every valid cache key
    can be stored.
    """
    if is_legal_memcached_key(key):
        return key
    return HASHED_KEY_PREFIX + hashlib.sha256(key.encode("utf-8")).hexdigest()


class MemcachedCacheBackend:
    """
    Memcached cache backend with JSON encoding and TTL.

    The client needs ``get(key)``, ``set(key, value, expire=)``,
    ``delete(key)`` and ``close()``; transport errors propagate unchanged.
    A zero lifetime deletes the key instead of writing it.
    """

    capabilities = MEMCACHED_CAPABILITIES

    def __init__(
        self,
        client: Any,
        default_expiration: timedelta | float = timedelta(minutes=10),
        namespace: str | None = None,
        codec: JsonValueCodec | None = None,
    ) -> None:
        """
        Initialize Memcached cache backend.

        Args:
            client: pymemcache client (or compatible)
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
    def from_server(
        cls,
        server_address: str = "127.0.0.1",
        server_port: int = 11211,
        default_expiration: timedelta | float = timedelta(minutes=10),
        namespace: str | None = None,
        connect_timeout: float = 5,
        timeout: float = 5,
        max_pool_size: int = 10,
    ) -> MemcachedCacheBackend:
        """Build a backend around a thread-safe pooled client."""
        client = PooledClient(
            (server_address, server_port),
            connect_timeout=connect_timeout,
            timeout=timeout,
            max_pool_size=max_pool_size,
            # Surface store errors instead of fire-and-forget writes.
            default_noreply=False,
        )
        return cls(client, default_expiration=default_expiration, namespace=namespace)

    @property
    def client(self) -> Any:
        return self._client

    def _make_key(self, key: str) -> str:
        return memcached_key(make_key(key, self.namespace))

    async def set(
        self,
        key: str,
        value: Any,
        expiration: timedelta | float | None = None,
        kind: ExpirationKind | str = ExpirationKind.ABSOLUTE,
    ) -> None:
        """Encode and store a value with a fixed expiry."""
        validate_key(key)
        if expiration is None:
            expiration = self.default_expiration
        directive = resolve_expiration(expiration, kind, self.capabilities)
        payload = self._codec.encode(value)

        ns_key = self._make_key(key)
        if directive.already_expired:
            logger.debug("Zero TTL for key '%s'; deleting instead of writing", key, extra={"key": key})
            await asyncio.to_thread(self._client.delete, ns_key)
            return

        await asyncio.to_thread(self._client.set, ns_key, payload, expire=memcached_expire(directive))

    async def get(self, key: str, value_type: Any = None, default: Any = None) -> Any:
        """Fetch and decode a value; absence returns ``default``."""
        validate_key(key)
        data = await asyncio.to_thread(self._client.get, self._make_key(key))
        if data is None:
            return default
        return self._codec.decode(data, value_type)

    async def contains(self, key: str) -> bool:
        """Existence via a full generic read; there is no lighter probe."""
        validate_key(key)
        data = await asyncio.to_thread(self._client.get, self._make_key(key))
        return data is not None

    async def remove(self, key: str) -> None:
        validate_key(key)
        await asyncio.to_thread(self._client.delete, self._make_key(key))

    async def close(self) -> None:
        """Close client sockets."""
        await asyncio.to_thread(self._client.close)
        logger.info("Closed Memcached cache backend", extra={"namespace": self.namespace})
