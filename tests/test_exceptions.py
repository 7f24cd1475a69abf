"""
Tests for the exception hierarchy.
"""

from __future__ import annotations

import pytest

from rcache.exceptions import (
    CacheError,
    CachedFailureError,
    DirectoryUnavailableError,
    ExpiredError,
    NotFoundError,
    SerializationError,
    WriteError,
)


class TestCacheError:
    """Tests for CacheError formatting."""

    def test_str_without_context(self) -> None:
        """Test that the message is used as-is."""
        assert str(CacheError("not found")) == "not found"

    def test_str_with_context(self) -> None:
        """Test that context is appended to the message."""
        err = CacheError("expired", {"dir": "/c", "key": "k"})

        assert str(err) == "expired (dir='/c', key='k')"
        assert repr(err) == "CacheError('expired', context={'dir': '/c', 'key': 'k'})"

    @pytest.mark.parametrize(
        "cls",
        [
            NotFoundError,
            ExpiredError,
            DirectoryUnavailableError,
            WriteError,
            SerializationError,
        ],
    )
    def test_hierarchy(self, cls: type[CacheError]) -> None:
        """Test that every cache error derives from CacheError."""
        assert issubclass(cls, CacheError)


class TestCachedFailureError:
    """Tests for CachedFailureError."""

    def test_message(self) -> None:
        """Test the replayed failure message and attributes."""
        err = CachedFailureError("connection refused", value=3)

        assert str(err) == "failed to resolve cache: connection refused"
        assert err.cached_error == "connection refused"
        assert err.value == 3
