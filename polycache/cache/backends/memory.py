"""
polycache - Memory Cache Backend

Process-local cache with native absolute and sliding expiration.

MemoryStore is the thread-safe key -> entry table (optionally size-bounded
with LRU eviction). MemoryCacheBackend adapts it to the cache contract and
stores values by reference: no serialization, full type fidelity.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from ..expiration import MEMORY_CAPABILITIES, ExpirationDirective, ExpirationKind, resolve_expiration
from ..keys import make_key, validate_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemoryEntryOptions:
    """Expiry for a single MemoryStore entry. Neither set means no expiry."""

    absolute_expiration: timedelta | None = None
    sliding_expiration: timedelta | None = None

    @classmethod
    def from_directive(cls, directive: ExpirationDirective) -> MemoryEntryOptions:
        if directive.kind is ExpirationKind.SLIDING:
            return cls(sliding_expiration=directive.duration)
        return cls(absolute_expiration=directive.duration)


class _Entry:
    __slots__ = ("value", "expires_at", "sliding")

    def __init__(self, value: Any, expires_at: float | None, sliding: float | None):
        self.value = value
        self.expires_at = expires_at
        self.sliding = sliding


class MemoryStore:
    """
    Thread-safe in-process key/value table with per-entry expiry.

    Features:
    - Absolute expiry fixed at write time
    - Sliding expiry re-armed by try_get (but not by peek)
    - Optional max_size with least-recently-used eviction
    - Expired entries are purged lazily on access or via compact()
    """

    def __init__(
        self,
        max_size: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            max_size: Maximum number of entries (None = unbounded)
            clock: Monotonic time source in seconds
        """
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.max_size = max_size
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()
        self.evictions = 0

    @staticmethod
    def _is_expired(entry: _Entry, now: float) -> bool:
        # Inclusive: a zero lifetime is expired immediately.
        return entry.expires_at is not None and now >= entry.expires_at

    def try_get(self, key: str) -> tuple[bool, Any]:
        """Look up a live entry, refreshing its sliding expiry. Returns (found, value)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None

            now = self._clock()
            if self._is_expired(entry, now):
                del self._entries[key]
                return False, None

            if entry.sliding is not None:
                entry.expires_at = now + entry.sliding
            self._entries.move_to_end(key)
            return True, entry.value

    def peek(self, key: str) -> bool:
        """Check for a live entry without refreshing expiry or recency."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                return False
            return True

    def set(self, key: str, value: Any, options: MemoryEntryOptions | None = None) -> None:
        """Insert or replace an entry, re-arming its expiry."""
        options = options or MemoryEntryOptions()
        with self._lock:
            now = self._clock()
            sliding = None
            expires_at = None
            if options.sliding_expiration is not None:
                sliding = options.sliding_expiration.total_seconds()
                expires_at = now + sliding
            elif options.absolute_expiration is not None:
                expires_at = now + options.absolute_expiration.total_seconds()

            if key not in self._entries and self.max_size is not None and len(self._entries) >= self.max_size:
                self._purge_expired(now)
                while len(self._entries) >= self.max_size:
                    evicted_key, _ = self._entries.popitem(last=False)
                    self.evictions += 1
                    logger.debug("Evicted key from memory store: %s", evicted_key)

            self._entries[key] = _Entry(value, expires_at, sliding)
            self._entries.move_to_end(key)

    def remove(self, key: str) -> bool:
        """Delete an entry. Returns True if it existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def compact(self) -> int:
        """Drop all expired entries. Returns the number removed."""
        with self._lock:
            return self._purge_expired(self._clock())

    def _purge_expired(self, now: float) -> int:
        expired = [k for k, entry in self._entries.items() if self._is_expired(entry, now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class MemoryCacheBackend:
    """
    In-memory cache backend.

    Supports absolute and sliding expiration natively. ``contains`` does not
    refresh sliding timers; only ``get`` does.
    """

    capabilities = MEMORY_CAPABILITIES

    def __init__(
        self,
        store: MemoryStore | None = None,
        default_expiration: timedelta | float = timedelta(minutes=10),
        namespace: str | None = None,
    ):
        """
        Initialize memory cache backend.

        Args:
            store: Backing table (a private unbounded store when omitted)
            default_expiration: Absolute lifetime used when set() gets none
            namespace: Optional key prefix
        """
        self._store = store if store is not None else MemoryStore()
        if not isinstance(default_expiration, timedelta):
            default_expiration = timedelta(seconds=default_expiration)
        self.default_expiration = default_expiration
        self.namespace = namespace

    @property
    def store(self) -> MemoryStore:
        return self._store

    async def set(
        self,
        key: str,
        value: Any,
        expiration: timedelta | float | None = None,
        kind: ExpirationKind | str = ExpirationKind.ABSOLUTE,
    ) -> None:
        """Store value by reference."""
        validate_key(key)
        if expiration is None:
            expiration = self.default_expiration
        directive = resolve_expiration(expiration, kind, self.capabilities)

        self._store.set(make_key(key, self.namespace), value, MemoryEntryOptions.from_directive(directive))

    async def get(self, key: str, value_type: Any = None, default: Any = None) -> Any:
        """Retrieve the stored reference; value_type is accepted for contract parity."""
        validate_key(key)
        found, value = self._store.try_get(make_key(key, self.namespace))
        return value if found else default

    async def contains(self, key: str) -> bool:
        validate_key(key)
        return self._store.peek(make_key(key, self.namespace))

    async def remove(self, key: str) -> None:
        validate_key(key)
        self._store.remove(make_key(key, self.namespace))

    async def close(self) -> None:
        # Data lives in-process; nothing to release.
        logger.debug("Memory cache backend closed", extra={"namespace": self.namespace})
