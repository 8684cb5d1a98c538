"""
polycache

A unified asynchronous cache contract over in-memory, Redis and Memcached
backends.
"""

from .cache import (
    CacheInterface,
    ExpirationKind,
    close_all_caches,
    create_cache,
    get_cache,
)
from .errors import (
    CacheError,
    ConfigurationError,
    DeserializationError,
    ErrorCode,
    InvalidKeyError,
    PolycacheError,
    SerializationError,
    UnsupportedExpirationKindError,
    extract_error_code,
)
from .log import configure_logging

__version__ = "0.1.0"

__all__ = [
    "CacheInterface",
    "ExpirationKind",
    "create_cache",
    "get_cache",
    "close_all_caches",
    "configure_logging",
    "PolycacheError",
    "ConfigurationError",
    "CacheError",
    "InvalidKeyError",
    "UnsupportedExpirationKindError",
    "SerializationError",
    "DeserializationError",
    "ErrorCode",
    "extract_error_code",
]
