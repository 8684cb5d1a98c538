"""
polycache - Cache Interface

Defines the contract that every cache backend implements.

The contract is a structural Protocol rather than a base class: the three
backends share policy (key validation, expiration resolution, value codec),
which lives in standalone modules, but no runtime state.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Protocol, TypeVar, runtime_checkable

from .expiration import ExpirationKind

T = TypeVar("T")


@runtime_checkable
class CacheInterface(Protocol):
    """
    Unified asynchronous cache contract.

    Implemented by MemoryCacheBackend, RedisCacheBackend and
    MemcachedCacheBackend. Callers pick a concrete backend; there is no
    fallback or tiering between them.
    """

    async def set(
        self,
        key: str,
        value: Any,
        expiration: timedelta | float | None = None,
        kind: ExpirationKind | str = ExpirationKind.ABSOLUTE,
    ) -> None:
        """
        Store a value in the cache.

        Args:
            key: Cache key (non-empty, not whitespace-only)
            value: Value to cache
            expiration: Lifetime as timedelta or seconds (None = backend default)
            kind: Absolute or sliding; sliding degrades to absolute on
                  backends that cannot slide

        Raises:
            InvalidKeyError: If key is invalid
            UnsupportedExpirationKindError: If kind is not absolute or sliding
            SerializationError: If a remote backend cannot encode the value
        """
        ...

    async def get(self, key: str, value_type: type[T] | Any = None, default: Any = None) -> T | Any:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key
            value_type: Type to decode into (remote backends)
            default: Returned when the key is absent or expired

        Returns:
            Cached value if found and not expired, ``default`` otherwise

        Raises:
            InvalidKeyError: If key is invalid
            DeserializationError: If stored bytes do not decode to value_type
        """
        ...

    async def contains(self, key: str) -> bool:
        """
        Check whether a live entry exists. Never refreshes sliding expiration.

        Raises:
            InvalidKeyError: If key is invalid
        """
        ...

    async def remove(self, key: str) -> None:
        """
        Delete an entry. Succeeds when the key is already absent.

        Raises:
            InvalidKeyError: If key is invalid
        """
        ...

    async def close(self) -> None:
        """Release the backend client. Called during graceful shutdown."""
        ...
