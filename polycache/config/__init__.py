"""
polycache - Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config, reset_config
from .schemas import (
    CacheBackend,
    LogLevel,
    MemcachedCacheConfig,
    MemoryCacheConfig,
    PolycacheConfig,
    RedisCacheConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "reset_config",
    # Main config
    "PolycacheConfig",
    # Enums
    "CacheBackend",
    "LogLevel",
    # Config sections
    "MemoryCacheConfig",
    "RedisCacheConfig",
    "MemcachedCacheConfig",
]
