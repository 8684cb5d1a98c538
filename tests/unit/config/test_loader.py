"""
polycache - Configuration Loader Tests

Environment and .env driven configuration: defaults, coercion, validation
failures and the process-wide singleton.
"""

from pathlib import Path

import pytest

from polycache.config import (
    CacheBackend,
    LogLevel,
    PolycacheConfig,
    RedisCacheConfig,
    get_config,
    load_config,
    reload_config,
    reset_config,
)
from polycache.errors import ConfigurationError

CACHE_ENV_VARS = [
    "LOG_LEVEL",
    "CACHE_BACKEND",
    "CACHE_MEMORY_DEFAULT_TIMEOUT",
    "CACHE_MEMORY_MAX_SIZE",
    "CACHE_MEMORY_NAMESPACE",
    "CACHE_REDIS_DEFAULT_TIMEOUT",
    "CACHE_REDIS_CONNECTION_STRING",
    "CACHE_REDIS_MAX_CONNECTIONS",
    "CACHE_REDIS_SOCKET_TIMEOUT",
    "CACHE_REDIS_NAMESPACE",
    "CACHE_MEMCACHED_DEFAULT_TIMEOUT",
    "CACHE_MEMCACHED_SERVER_ADDRESS",
    "CACHE_MEMCACHED_SERVER_PORT",
    "CACHE_MEMCACHED_CONNECT_TIMEOUT",
    "CACHE_MEMCACHED_TIMEOUT",
    "CACHE_MEMCACHED_MAX_POOL_SIZE",
    "CACHE_MEMCACHED_NAMESPACE",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every polycache variable so defaults apply."""
    for name in CACHE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def no_env_file(tmp_path: Path) -> str:
    return str(tmp_path / "missing.env")


class TestLoadConfig:
    def test_defaults(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        config = load_config(env_file=no_env_file, reload=True)

        assert config.log_level == LogLevel.INFO.value
        assert config.default_backend == CacheBackend.MEMORY.value
        assert config.memory.default_timeout_minutes == 10
        assert config.memory.max_size is None
        assert config.redis.connection_string == "redis://localhost:6379"
        assert config.memcached.server_address == "127.0.0.1"
        assert config.memcached.server_port == 11211

    def test_environment_overrides(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        clean_env.setenv("LOG_LEVEL", "warning")
        clean_env.setenv("CACHE_BACKEND", "REDIS")
        clean_env.setenv("CACHE_MEMORY_MAX_SIZE", "500")
        clean_env.setenv("CACHE_REDIS_CONNECTION_STRING", "rediss://cache.example.com:6380/2")
        clean_env.setenv("CACHE_REDIS_DEFAULT_TIMEOUT", "0.5")
        clean_env.setenv("CACHE_MEMCACHED_SERVER_PORT", "11311")
        clean_env.setenv("CACHE_MEMCACHED_NAMESPACE", "  ")

        config = load_config(env_file=no_env_file, reload=True)

        assert config.log_level == "WARNING"
        assert config.default_backend == "redis"
        assert config.memory.max_size == 500
        assert config.redis.connection_string == "rediss://cache.example.com:6380/2"
        assert config.redis.default_timeout_minutes == 0.5
        assert config.memcached.server_port == 11311
        assert config.memcached.namespace is None

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("CACHE_MEMCACHED_SERVER_PORT", "70000"),
            ("CACHE_MEMCACHED_SERVER_PORT", "not-a-port"),
            ("CACHE_BACKEND", "sqlite"),
            ("CACHE_MEMORY_MAX_SIZE", "0"),
            ("CACHE_REDIS_CONNECTION_STRING", "   "),
        ],
    )
    def test_invalid_values(self, clean_env: pytest.MonkeyPatch, no_env_file: str, name: str, value: str) -> None:
        clean_env.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(env_file=no_env_file, reload=True)

        assert exc_info.value.details["validation_errors"]

    def test_env_file(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("CACHE_BACKEND=memcached\nCACHE_MEMCACHED_SERVER_ADDRESS=mc.internal\n")
        # Registered first so monkeypatch restores them after load_dotenv writes
        clean_env.setenv("CACHE_BACKEND", "memory")
        clean_env.setenv("CACHE_MEMCACHED_SERVER_ADDRESS", "127.0.0.1")

        config = load_config(env_file=str(env_file), reload=True)

        assert config.default_backend == "memcached"
        assert config.memcached.server_address == "mc.internal"

    def test_singleton(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        first = load_config(env_file=no_env_file, reload=True)

        assert get_config() is first
        assert load_config(env_file=no_env_file) is first

        clean_env.setenv("CACHE_BACKEND", "redis")
        assert get_config().default_backend == "memory"
        assert reload_config(env_file=no_env_file).default_backend == "redis"

    def test_reset(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        first = load_config(env_file=no_env_file, reload=True)
        reset_config()

        assert load_config(env_file=no_env_file) is not first


class TestSchemas:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("localhost:6379", "redis://localhost:6379"),
            ("  redis://cache:6379/0 ", "redis://cache:6379/0"),
            ("unix:///tmp/redis.sock", "unix:///tmp/redis.sock"),
        ],
    )
    def test_redis_connection_string(self, raw: str, expected: str) -> None:
        assert RedisCacheConfig(connection_string=raw).connection_string == expected

    def test_enum_values_stored(self) -> None:
        config = PolycacheConfig(default_backend=CacheBackend.REDIS, log_level=LogLevel.DEBUG)

        assert config.default_backend == "redis"
        assert config.log_level == "DEBUG"
