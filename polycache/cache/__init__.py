"""
polycache - Cache Module

One asynchronous cache contract over interchangeable backends.

- interface.py: CacheInterface protocol all backends implement
- factory.py: backend construction from configuration and the instance registry
- keys.py / expiration.py / codec.py: policy shared by the backends
- backends/: memory (always available), redis and memcached (lazy-loaded)

Usage:
    from polycache.cache import create_cache

    cache = create_cache()
    await cache.set("key", "value", timedelta(minutes=5))
    value = await cache.get("key")
"""

from .codec import JsonValueCodec
from .expiration import (
    MEMCACHED_CAPABILITIES,
    MEMORY_CAPABILITIES,
    REDIS_CAPABILITIES,
    BackendCapabilities,
    ExpirationDirective,
    ExpirationKind,
    resolve_expiration,
)
from .factory import (
    close_all_caches,
    create_cache,
    create_memcached_cache,
    create_memory_cache,
    create_redis_cache,
    get_cache,
    list_cache_instances,
    register_cache,
    reset_cache_factory,
)
from .interface import CacheInterface
from .keys import validate_key

__all__ = [
    # Factory functions
    "create_cache",
    "create_memory_cache",
    "create_redis_cache",
    "create_memcached_cache",
    "get_cache",
    "register_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface
    "CacheInterface",
    # Shared policy
    "ExpirationKind",
    "ExpirationDirective",
    "BackendCapabilities",
    "MEMORY_CAPABILITIES",
    "REDIS_CAPABILITIES",
    "MEMCACHED_CAPABILITIES",
    "resolve_expiration",
    "validate_key",
    "JsonValueCodec",
]
