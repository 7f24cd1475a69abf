"""Null-object cache used when a namespace cannot be established."""

from __future__ import annotations

from typing import BinaryIO

from rcache.cache.base import Cache
from rcache.exceptions import NotFoundError


class BypassCache(Cache):
    """Cache that never stores anything.

    Reads always miss and writes are discarded, so callers treat an
    unavailable cache exactly like an empty one.
    """

    def read(self, key: str) -> BinaryIO:
        raise NotFoundError("not found", {"key": key})

    def write(self, key: str, contents: BinaryIO | bytes) -> None:
        return None

    def root_dirs(self) -> list[str]:
        return []
