"""
polycache - Value Codec

JSON value codec for remote backends. This is the single place where type
information is erased on write and recovered on read; adapters hand it values
and bytes and never serialize inline.

Encoding infers the runtime type of the value, so plain JSON data, pydantic
models, dataclasses, datetimes and UUIDs all round-trip. Decoding validates
the JSON document into the type the caller asks for.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import ConfigDict, TypeAdapter, ValidationError

from ..errors import DeserializationError, SerializationError

# NaN and +/-Infinity are written as JSON constants so they read back as floats.
_ANY_ADAPTER: TypeAdapter[Any] = TypeAdapter(Any, config=ConfigDict(ser_json_inf_nan="constants"))


@lru_cache(maxsize=256)
def _adapter_for(value_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(value_type)


class JsonValueCodec:
    """Encodes values as UTF-8 JSON and decodes them into requested types."""

    content_type = "application/json"

    def encode(self, value: Any) -> bytes:
        """
        Serialize a value to UTF-8 JSON bytes.

        Raises:
            SerializationError: If the value has no JSON representation
        """
        try:
            return _ANY_ADAPTER.dump_json(value)
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Cannot serialize value of type {type(value).__name__}: {e}",
                details={"value_type": type(value).__name__, "error": str(e)},
            ) from e

    def decode(self, data: bytes | str, value_type: Any = None) -> Any:
        """
        Deserialize JSON bytes, optionally validating into ``value_type``.

        Args:
            data: Stored payload
            value_type: Target type; None returns plain JSON data

        Raises:
            DeserializationError: If data is not valid JSON or does not match value_type
        """
        adapter = _ANY_ADAPTER if value_type is None else _get_adapter(value_type)
        try:
            return adapter.validate_json(data)
        except ValidationError as e:
            type_name = getattr(value_type, "__name__", repr(value_type))
            raise DeserializationError(
                f"Stored value cannot be decoded as {type_name}",
                details={"value_type": type_name, "errors": e.errors(include_url=False, include_input=False)},
            ) from e


def _get_adapter(value_type: Any) -> TypeAdapter[Any]:
    """Cached TypeAdapter lookup; unhashable type expressions are built fresh."""
    try:
        return _adapter_for(value_type)
    except TypeError:
        return TypeAdapter(value_type)


default_codec = JsonValueCodec()
