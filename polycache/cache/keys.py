"""
polycache - Key Validation

Every adapter operation validates its key here before touching the backend.
"""

from typing import Any

from ..errors import InvalidKeyError


def validate_key(key: Any) -> str:
    """
    Validate a cache key.

    Args:
        key: Candidate cache key

    Returns:
        The key, unchanged

    Raises:
        InvalidKeyError: If key is not a string, is empty or whitespace-only
    """
    if not isinstance(key, str) or not key.strip():
        raise InvalidKeyError(key)
    return key


def make_key(key: str, namespace: str | None) -> str:
    """Prefix a validated key with the adapter namespace, if any."""
    if namespace:
        return f"{namespace}:{key}"
    return key
