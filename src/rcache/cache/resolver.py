"""
Resolve-or-compute memoization on top of a Cache.

A resolver answers resolve(key, producer) from the cache when a fresh entry
exists, and otherwise calls the producer, stores its value and returns it.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

from rcache.cache.base import Cache
from rcache.cache.codec import Codec, JsonCodec
from rcache.exceptions import (
    ExpiredError,
    NotFoundError,
    SerializationError,
    WriteError,
)
from rcache.logging import get_logger, log_context

logger = get_logger(__name__)

T = TypeVar("T")

Producer = Callable[[], T]


class Resolver(ABC, Generic[T]):
    """Abstract resolve-or-compute interface."""

    @abstractmethod
    def resolve(self, key: str, producer: Producer[T]) -> T:
        """Return the cached value for key, computing it with producer on a miss.

        Raises:
            Exception: Whatever the producer raises.
        """
        ...


class CachingResolver(Resolver[T]):
    """Resolver that memoizes producer results in a Cache.

    Producer failures are not cached; see ErrorCachingResolver for that.
    Two concurrent misses on one key both run the producer and the last
    write wins.
    """

    def __init__(
        self,
        cache: Cache,
        value_type: Any = Any,
        *,
        codec: Codec[T] | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            cache: Cache namespace to memoize into.
            value_type: Type of the produced values, used by the default codec.
            codec: Serialization override; defaults to JsonCodec(value_type).
        """
        self.cache = cache
        self.codec: Codec[T] = codec if codec is not None else JsonCodec(value_type)

    def resolve(self, key: str, producer: Producer[T]) -> T:
        with log_context(namespace=self.cache.namespace, key=key):
            try:
                return self._read(key)
            except (NotFoundError, ExpiredError, SerializationError):
                pass

            value = producer()
            self._store(key, value)
            return value

    def _read(self, key: str) -> T:
        with self.cache.read(key) as f:
            data = f.read()
        try:
            return self.codec.decode(data)
        except SerializationError as e:
            logger.debug("discarding unreadable cache entry", error=str(e))
            raise

    def _store(self, key: str, value: T) -> None:
        try:
            data = self.codec.encode(value)
            self.cache.write(key, io.BytesIO(data))
        except (SerializationError, WriteError, OSError) as e:
            logger.warning("unable to cache value", error=str(e))
