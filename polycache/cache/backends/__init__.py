"""
polycache - Cache Backends

Exports the always-available memory backend.

Redis and Memcached backends are lazy-loaded via factory.py so their client
libraries are only imported when selected.
"""

from .memory import MemoryCacheBackend, MemoryEntryOptions, MemoryStore

__all__ = [
    "MemoryCacheBackend",
    "MemoryEntryOptions",
    "MemoryStore",
]
