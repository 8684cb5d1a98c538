"""
polycache - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the process.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import PolycacheConfig

logger = logging.getLogger(__name__)

_config_instance: PolycacheConfig | None = None


def _optional(name: str) -> str | None:
    """Return an env var, treating empty strings as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _build_config_dict() -> dict[str, Any]:
    """Collect raw settings from the environment. Pydantic does the coercion."""
    config_dict: dict[str, Any] = {
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "default_backend": os.getenv("CACHE_BACKEND", "memory").lower(),
        "memory": {
            "default_timeout_minutes": os.getenv("CACHE_MEMORY_DEFAULT_TIMEOUT", "10"),
            "max_size": _optional("CACHE_MEMORY_MAX_SIZE"),
            "namespace": _optional("CACHE_MEMORY_NAMESPACE"),
        },
        "redis": {
            "default_timeout_minutes": os.getenv("CACHE_REDIS_DEFAULT_TIMEOUT", "10"),
            "connection_string": os.getenv("CACHE_REDIS_CONNECTION_STRING", "localhost:6379"),
            "max_connections": os.getenv("CACHE_REDIS_MAX_CONNECTIONS", "10"),
            "socket_timeout": os.getenv("CACHE_REDIS_SOCKET_TIMEOUT", "5"),
            "namespace": _optional("CACHE_REDIS_NAMESPACE"),
        },
        "memcached": {
            "default_timeout_minutes": os.getenv("CACHE_MEMCACHED_DEFAULT_TIMEOUT", "10"),
            "server_address": os.getenv("CACHE_MEMCACHED_SERVER_ADDRESS", "127.0.0.1"),
            "server_port": os.getenv("CACHE_MEMCACHED_SERVER_PORT", "11211"),
            "connect_timeout": os.getenv("CACHE_MEMCACHED_CONNECT_TIMEOUT", "5"),
            "timeout": os.getenv("CACHE_MEMCACHED_TIMEOUT", "5"),
            "max_pool_size": os.getenv("CACHE_MEMCACHED_MAX_POOL_SIZE", "10"),
            "namespace": _optional("CACHE_MEMCACHED_NAMESPACE"),
        },
    }
    return config_dict


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> PolycacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated PolycacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    config_dict = _build_config_dict()

    try:
        _config_instance = PolycacheConfig(**config_dict)
    except ValidationError as e:
        logger.error(
            "Configuration validation failed: %s",
            e,
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your CACHE_* environment variables.",
            details={"validation_errors": e.errors(include_url=False)},
        ) from e

    logger.info(
        "Configuration loaded (default backend: %s)",
        _config_instance.default_backend,
        extra={"default_backend": str(_config_instance.default_backend)},
    )
    return _config_instance


def get_config() -> PolycacheConfig:
    """
    Get the current configuration instance, loading it on first access.
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> PolycacheConfig:
    """Force reload configuration."""
    return load_config(env_file=env_file, reload=True)


def reset_config() -> None:
    """Drop the cached configuration instance. Intended for tests."""
    global _config_instance
    _config_instance = None
