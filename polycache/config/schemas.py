"""
polycache - Configuration Schemas

Typed configuration models using Pydantic for validation and type safety.
Settings are read once when an adapter is constructed; they are opaque startup
parameters, not part of the cache contract's runtime logic.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CacheBackend(str, Enum):
    """Supported cache backends."""

    MEMORY = "memory"
    REDIS = "redis"
    MEMCACHED = "memcached"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MemoryCacheConfig(BaseModel):
    """In-memory backend configuration."""

    default_timeout_minutes: float = Field(default=10, ge=0, description="Default absolute expiration in minutes")
    max_size: int | None = Field(default=None, ge=1, description="Max entries before LRU eviction (None = unbounded)")
    namespace: str | None = Field(default=None, description="Optional key prefix")


class RedisCacheConfig(BaseModel):
    """Distributed key-value (Redis) backend configuration."""

    default_timeout_minutes: float = Field(default=10, ge=0, description="Default absolute expiration in minutes")
    connection_string: str = Field(default="localhost:6379", description="Redis URL or host:port")
    max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    socket_timeout: float = Field(default=5, gt=0, description="Redis socket timeout in seconds")
    namespace: str | None = Field(default=None, description="Optional key prefix")

    @field_validator("connection_string")
    @classmethod
    def normalize_connection_string(cls, v: str) -> str:
        """Accept bare host:port strings by prefixing the redis:// scheme."""
        v = v.strip()
        if not v:
            raise ValueError("connection_string cannot be empty")
        if "://" not in v:
            v = f"redis://{v}"
        return v


class MemcachedCacheConfig(BaseModel):
    """Object-cache (Memcached) backend configuration."""

    default_timeout_minutes: float = Field(default=10, ge=0, description="Default absolute expiration in minutes")
    server_address: str = Field(default="127.0.0.1", min_length=1, description="Memcached server host")
    server_port: int = Field(default=11211, ge=1, le=65535, description="Memcached server port")
    connect_timeout: float = Field(default=5, gt=0, description="Connect timeout in seconds")
    timeout: float = Field(default=5, gt=0, description="Per-operation socket timeout in seconds")
    max_pool_size: int = Field(default=10, ge=1, description="Client pool size")
    namespace: str | None = Field(default=None, description="Optional key prefix")


class PolycacheConfig(BaseModel):
    """Root configuration for polycache."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    default_backend: CacheBackend = Field(default=CacheBackend.MEMORY, description="Backend used by create_cache()")

    memory: MemoryCacheConfig = Field(default_factory=MemoryCacheConfig)
    redis: RedisCacheConfig = Field(default_factory=RedisCacheConfig)
    memcached: MemcachedCacheConfig = Field(default_factory=MemcachedCacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
