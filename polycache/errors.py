"""
polycache - Core Error Types

Defines the exception hierarchy raised by the cache contract and its adapters.
All exceptions inherit from PolycacheError for consistent error handling.

Backend transport failures (connection refused, socket timeouts, protocol
errors) are NOT part of this hierarchy: they propagate unchanged from the
underlying store client so callers can apply their own retry policy.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Stable error codes attached to every PolycacheError.

    Used for structured error reporting and client-side error handling.
    """

    INVALID_KEY = "INVALID_KEY"
    UNSUPPORTED_EXPIRATION_KIND = "UNSUPPORTED_EXPIRATION_KIND"
    SERIALIZATION_FAILED = "SERIALIZATION_FAILED"
    DESERIALIZATION_FAILED = "DESERIALIZATION_FAILED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    CACHE_FAILURE = "CACHE_FAILURE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PolycacheError(Exception):
    """Base exception for all polycache errors."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging or API responses."""
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(PolycacheError):
    """Raised when configuration is invalid or a backend library is missing."""

    error_code = ErrorCode.CONFIGURATION_ERROR


class CacheError(PolycacheError):
    """Base exception for cache contract errors."""

    error_code = ErrorCode.CACHE_FAILURE


class InvalidKeyError(CacheError, ValueError):
    """Raised when a cache key is missing, empty or whitespace-only."""

    error_code = ErrorCode.INVALID_KEY

    def __init__(self, key: Any):
        message = "Cache key cannot be null, empty or whitespace"
        super().__init__(message, {"key": key, "key_type": type(key).__name__})
        self.key = key


class UnsupportedExpirationKindError(CacheError, ValueError):
    """Raised when an expiration kind is outside {absolute, sliding}."""

    error_code = ErrorCode.UNSUPPORTED_EXPIRATION_KIND

    def __init__(self, kind: Any, supported: list[str] | None = None):
        message = f"Unsupported expiration kind: {kind!r}"
        details: dict[str, Any] = {"kind": repr(kind)}
        if supported:
            details["supported"] = supported
        super().__init__(message, details)
        self.kind = kind


class SerializationError(CacheError):
    """Raised when a value cannot be encoded for a remote backend."""

    error_code = ErrorCode.SERIALIZATION_FAILED


class DeserializationError(CacheError):
    """Raised when stored bytes cannot be decoded to the requested type."""

    error_code = ErrorCode.DESERIALIZATION_FAILED


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract the ErrorCode for an exception.

    Non-polycache exceptions (including backend transport errors) map to
    INTERNAL_ERROR.
    """
    if isinstance(error, PolycacheError):
        return error.error_code
    return ErrorCode.INTERNAL_ERROR
