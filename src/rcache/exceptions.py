"""
Custom exception hierarchy for rcache.

All exceptions inherit from CacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class CacheError(Exception):
    """Base exception for all cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class NotFoundError(CacheError):
    """Raised when no entry exists for a key.

    Always a cache miss; resolvers fall through to the producer.
    """

    pass


class ExpiredError(CacheError):
    """Raised when an entry exists but is older than the cache TTL.

    Treated exactly like NotFoundError by resolvers.
    """

    pass


class DirectoryUnavailableError(CacheError):
    """Raised when a cache directory cannot be created or verified.

    Context should include:
        - dir: The directory that was being created
        - reason: The underlying OS error, if any
    """

    pass


class WriteError(CacheError):
    """Raised when persisting an entry fails.

    Context should include:
        - dir: The cache directory
        - key: The entry key
    """

    pass


class SerializationError(CacheError):
    """Raised when a value cannot be encoded to, or decoded from, bytes."""

    pass


class CachedFailureError(CacheError):
    """Raised when the error-caching resolver replays a remembered failure.

    Attributes:
        cached_error: The error text captured when the producer failed.
        value: The value stored alongside the failure (usually None).
    """

    def __init__(
        self,
        cached_error: str,
        value: Any = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(f"failed to resolve cache: {cached_error}", context)
        self.cached_error = cached_error
        self.value = value
