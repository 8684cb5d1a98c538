"""
polycache - Cache Factory

Creates cache backends from configuration and keeps a registry of named
instances. Callers choose the backend explicitly; there is no automatic
fallback or tiering between backends.

Key points:
- Memory backend is always available
- Redis and Memcached client libraries are imported only when selected
- All configuration is typed and validated via Pydantic models

Examples:
    from polycache.cache.factory import create_cache, get_cache
    from polycache.config import CacheBackend

    # Uses the configured default backend (memory unless CACHE_BACKEND is set)
    cache = create_cache()

    # Explicit backend, registered under its own name
    sessions = create_cache(CacheBackend.REDIS, name="sessions")

    # Later, anywhere in the process
    sessions = get_cache("sessions")
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ..config import (
    CacheBackend,
    MemcachedCacheConfig,
    MemoryCacheConfig,
    PolycacheConfig,
    RedisCacheConfig,
    get_config,
)
from ..errors import ConfigurationError
from .backends.memory import MemoryCacheBackend, MemoryStore
from .interface import CacheInterface

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, CacheInterface] = {}


def create_memory_cache(config: MemoryCacheConfig | None = None) -> MemoryCacheBackend:
    """Construct a memory cache backend over a fresh MemoryStore."""
    config = config or MemoryCacheConfig()
    return MemoryCacheBackend(
        store=MemoryStore(max_size=config.max_size),
        default_expiration=timedelta(minutes=config.default_timeout_minutes),
        namespace=config.namespace,
    )


def create_redis_cache(config: RedisCacheConfig | None = None) -> CacheInterface:
    """Construct a Redis cache backend, importing the client lazily."""
    config = config or RedisCacheConfig()

    try:
        from .backends.redis import RedisCacheBackend
    except ImportError as e:
        logger.error(
            "Redis backend selected but redis client is not installed",
            extra={"package": "redis>=5.0.1", "error": str(e)},
        )
        raise ConfigurationError(
            "Redis backend selected but redis client is unavailable. Install with: pip install 'redis>=5.0.1'",
            details={"package": "redis>=5.0.1", "error": str(e), "backend": "redis"},
        ) from e

    return RedisCacheBackend.from_url(
        config.connection_string,
        default_expiration=timedelta(minutes=config.default_timeout_minutes),
        namespace=config.namespace,
        max_connections=config.max_connections,
        socket_timeout=config.socket_timeout,
    )


def create_memcached_cache(config: MemcachedCacheConfig | None = None) -> CacheInterface:
    """Construct a Memcached cache backend, importing the client lazily."""
    config = config or MemcachedCacheConfig()

    try:
        from .backends.memcached import MemcachedCacheBackend
    except ImportError as e:
        logger.error(
            "Memcached backend selected but pymemcache is not installed",
            extra={"package": "pymemcache>=4.0", "error": str(e)},
        )
        raise ConfigurationError(
            "Memcached backend selected but pymemcache is unavailable. Install with: pip install 'pymemcache>=4.0'",
            details={"package": "pymemcache>=4.0", "error": str(e), "backend": "memcached"},
        ) from e

    return MemcachedCacheBackend.from_server(
        server_address=config.server_address,
        server_port=config.server_port,
        default_expiration=timedelta(minutes=config.default_timeout_minutes),
        namespace=config.namespace,
        connect_timeout=config.connect_timeout,
        timeout=config.timeout,
        max_pool_size=config.max_pool_size,
    )


def create_cache(
    backend: CacheBackend | str | None = None,
    config: PolycacheConfig | None = None,
    name: str | None = None,
) -> CacheInterface:
    """
    Create (or return the registered) cache backend instance.

    Args:
        backend: Backend to create (defaults to config.default_backend)
        config: Configuration (uses global config if not provided)
        name: Registry name (defaults to the backend name)

    Returns:
        Configured cache backend instance

    Raises:
        ConfigurationError: If the backend is unknown or its client is unavailable
    """
    if config is None:
        config = get_config()

    try:
        selected = CacheBackend(backend if backend is not None else config.default_backend)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown cache backend: {backend}",
            details={"backend": str(backend), "supported": [b.value for b in CacheBackend]},
        ) from e

    name = name or selected.value

    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    logger.info(
        "Creating cache instance '%s' with backend: %s",
        name,
        selected.value,
        extra={"cache_name": name, "backend": selected.value},
    )

    cache: CacheInterface
    if selected is CacheBackend.MEMORY:
        cache = create_memory_cache(config.memory)
    elif selected is CacheBackend.REDIS:
        cache = create_redis_cache(config.redis)
    else:
        cache = create_memcached_cache(config.memcached)

    _cache_instances[name] = cache
    return cache


def get_cache(name: str = CacheBackend.MEMORY.value) -> CacheInterface:
    """
    Get a registered cache instance by name.

    If the instance doesn't exist and the name is a backend name, it is
    created from the global configuration.

    Raises:
        ConfigurationError: If no instance is registered under a custom name
    """
    if name in _cache_instances:
        return _cache_instances[name]

    if name in {b.value for b in CacheBackend}:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(backend=name, name=name)

    raise ConfigurationError(
        f"No cache instance registered as '{name}'",
        details={"cache_name": name, "registered": list_cache_instances()},
    )


async def close_all_caches() -> None:
    """
    Close all cache instances and release resources.

    Call during graceful shutdown. A failure closing one instance is logged
    and does not stop the others from closing.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            await cache.close()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def register_cache(name: str, cache: CacheInterface) -> None:
    """Register an externally constructed backend under a name."""
    if not isinstance(cache, CacheInterface):
        raise ConfigurationError(
            f"Object of type {type(cache).__name__} does not implement CacheInterface",
            details={"cache_name": name},
        )
    _cache_instances[name] = cache


def reset_cache_factory() -> None:
    """
    Clear all instance references without closing them.

    Used for testing. Use close_all_caches() for proper cleanup.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
