"""
Resolver that caches producer failures as well as values.

A failing producer is remembered for the cache TTL: later calls raise
CachedFailureError without re-running it, until the entry expires and the
producer is tried again.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from rcache.cache.base import Cache
from rcache.cache.resolver import CachingResolver, Producer, Resolver
from rcache.exceptions import CachedFailureError

T = TypeVar("T")


class ErrorResponse(BaseModel, Generic[T]):
    """Envelope persisted in place of the raw value.

    An empty or missing ``err`` means the producer succeeded.
    """

    model_config = ConfigDict(populate_by_name=True)

    error: str | None = Field(default=None, alias="err")
    value: T | None = Field(default=None, alias="val")


class ErrorCachingResolver(Resolver[T]):
    """Resolver that caches failures alongside successful values."""

    def __init__(self, cache: Cache, value_type: Any = Any) -> None:
        """Initialize resolver.

        Args:
            cache: Cache namespace to memoize into.
            value_type: Type of the produced values.
        """
        self._envelope = ErrorResponse[value_type]
        self.resolver: CachingResolver[ErrorResponse[T]] = CachingResolver(
            cache, self._envelope
        )

    def resolve(self, key: str, producer: Producer[T]) -> T:
        def capture() -> ErrorResponse[T]:
            try:
                value = producer()
            except Exception as e:
                # an empty message would read back as success
                return self._envelope.model_construct(error=str(e) or type(e).__name__)
            return self._envelope.model_construct(value=value)

        response = self.resolver.resolve(key, capture)
        if response.error:
            raise CachedFailureError(response.error, value=response.value)
        return response.value
