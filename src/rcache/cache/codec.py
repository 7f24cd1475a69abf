"""
Value serialization for resolvers.

A Codec turns the values a resolver memoizes into the bytes a Cache stores
and back. JsonCodec covers anything pydantic can validate: builtins,
dataclasses, TypedDicts and models.
"""

from __future__ import annotations

from typing import Any, Generic, Protocol, TypeVar

import orjson
from pydantic import TypeAdapter, ValidationError

from rcache.exceptions import SerializationError

T = TypeVar("T")


class Codec(Protocol[T]):
    """Encode values to bytes and decode them back."""

    def encode(self, value: T) -> bytes: ...

    def decode(self, data: bytes) -> T: ...


class JsonCodec(Generic[T]):
    """JSON codec validated against a value type.

    Values are dumped with pydantic in JSON mode (by alias) and written with
    orjson; decoding validates the parsed document against ``value_type``.
    """

    def __init__(self, value_type: Any = Any) -> None:
        self.value_type = value_type
        self._adapter: TypeAdapter[T] = TypeAdapter(value_type)

    def encode(self, value: T) -> bytes:
        try:
            return orjson.dumps(self._adapter.dump_python(value, mode="json", by_alias=True))
        except (ValueError, TypeError) as e:
            # pydantic's PydanticSerializationError is a ValueError
            raise SerializationError(
                "unable to encode value", {"type": _type_name(self.value_type), "reason": str(e)}
            ) from e

    def decode(self, data: bytes) -> T:
        try:
            return self._adapter.validate_python(orjson.loads(data))
        except (orjson.JSONDecodeError, ValidationError) as e:
            raise SerializationError(
                "unable to decode value", {"type": _type_name(self.value_type), "reason": str(e)}
            ) from e


def _type_name(value_type: Any) -> str:
    return getattr(value_type, "__name__", None) or repr(value_type)
