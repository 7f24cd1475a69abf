"""
Cache package for namespaced, time-expiring storage.

This package provides:
- Filesystem cache (filesystem.py): one directory per (name, version)
  namespace, one file per key, TTL judged from modification time
- Bypass cache (bypass.py): always-miss fallback when a namespace is unusable
- Resolvers (resolver.py, error_resolver.py): resolve-or-compute memoization,
  optionally remembering failures
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rcache.cache.base import Cache, CacheManager
from rcache.cache.bypass import BypassCache
from rcache.cache.codec import Codec, JsonCodec
from rcache.cache.error_resolver import ErrorCachingResolver, ErrorResponse
from rcache.cache.filesystem import FilesystemCache
from rcache.cache.keys import make_disk_key
from rcache.cache.resolver import CachingResolver, Resolver

if TYPE_CHECKING:
    from rcache.config import Settings


def manager_from_settings(settings: Settings | None = None) -> FilesystemCache:
    """Create a filesystem cache manager from configured root and TTL.

    Raises:
        DirectoryUnavailableError: The configured root cannot be used.
    """
    if settings is None:
        from rcache.config import get_settings

        settings = get_settings()
    return FilesystemCache.from_dir(settings.CACHE_DIR, settings.CACHE_TTL)


__all__ = [
    "BypassCache",
    "Cache",
    "CacheManager",
    "CachingResolver",
    "Codec",
    "ErrorCachingResolver",
    "ErrorResponse",
    "FilesystemCache",
    "JsonCodec",
    "Resolver",
    "make_disk_key",
    "manager_from_settings",
]
