"""
Base classes for caching.

Defines the two capabilities every cache backend provides:
- Cache: read/write byte streams by key within one namespace
- CacheManager: hands out a Cache per (name, version) namespace
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO


class Cache(ABC):
    """Abstract interface for a single cache namespace."""

    @property
    def namespace(self) -> str:
        """Namespace label used for logging ("" when not applicable)."""
        return ""

    @abstractmethod
    def read(self, key: str) -> BinaryIO:
        """Open the entry for a key.

        Returns:
            Binary stream positioned at the start of the entry. The caller
            must close it.

        Raises:
            NotFoundError: No entry exists for the key.
            ExpiredError: The entry is older than the cache TTL.
        """
        ...

    @abstractmethod
    def write(self, key: str, contents: BinaryIO | bytes) -> None:
        """Create or overwrite the entry for a key.

        Raises:
            WriteError: The entry could not be persisted.
        """
        ...

    @abstractmethod
    def root_dirs(self) -> list[str]:
        """Return the directories this cache lives in, or [] if none."""
        ...


class CacheManager(ABC):
    """Abstract interface for handing out namespaced caches."""

    @abstractmethod
    def get_cache(self, name: str, version: str) -> Cache:
        """Get the cache for a (name, version) namespace.

        Never raises: an unusable namespace yields a cache that always misses.
        """
        ...

    @abstractmethod
    def root_dirs(self) -> list[str]:
        """Return the directories this manager lives in, or [] if none."""
        ...
