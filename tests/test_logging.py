"""
Tests for structured logging.
"""

from __future__ import annotations

import json
import logging
from typing import Generator

import pytest

from rcache.cache import CachingResolver, FilesystemCache
from rcache.exceptions import ExpiredError
from rcache.logging import (
    TRACE,
    JSONFormatter,
    get_key,
    get_logger,
    get_namespace,
    log_context,
    setup_logging,
)


class ListHandler(logging.Handler):
    """Handler that keeps records in memory."""

    def __init__(self) -> None:
        super().__init__(level=TRACE)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self) -> list[str]:
        return [r.getMessage() for r in self.records]


@pytest.fixture
def records() -> Generator[ListHandler, None, None]:
    """Capture everything logged under the rcache logger."""
    setup_logging("TRACE", console_output=False)
    handler = ListHandler()
    logging.getLogger("rcache").addHandler(handler)
    yield handler
    logging.getLogger("rcache").removeHandler(handler)
    setup_logging()


class TestLogContext:
    """Tests for context variables."""

    def test_context_is_scoped(self) -> None:
        """Test that log_context restores previous values."""
        assert get_namespace() is None

        with log_context(namespace="db/5", key="k"):
            assert get_namespace() == "db/5"
            assert get_key() == "k"
            with log_context(key="inner"):
                assert get_namespace() == "db/5"
                assert get_key() == "inner"
            assert get_key() == "k"

        assert get_namespace() is None
        assert get_key() is None

    def test_get_logger_prefixes_name(self) -> None:
        """Test that loggers live under the rcache namespace."""
        assert get_logger("tools").name == "rcache.tools"
        assert get_logger("rcache.cache").name == "rcache.cache"


class TestCacheLogging:
    """Tests for the log records emitted by caches and resolvers."""

    def test_trace_on_miss_and_hit(
        self, manager: FilesystemCache, records: ListHandler
    ) -> None:
        """Test trace notices for a miss followed by a hit."""
        resolver = CachingResolver(manager.get_cache("logs", "1"), int)

        resolver.resolve("k", lambda: 1)
        resolver.resolve("k", lambda: 2)

        messages = records.messages()
        assert "no cache entry" in messages
        assert "using value from cache" in messages
        assert all(r.levelno == TRACE for r in records.records)

    def test_resolve_attaches_context(
        self, manager: FilesystemCache, records: ListHandler
    ) -> None:
        """Test that records carry the namespace and key."""
        resolver = CachingResolver(manager.get_cache("logs", "1"), int)

        resolver.resolve("the-key", lambda: 1)

        extra = records.records[0].extra
        assert extra["namespace"] == "logs/1"
        assert extra["key"] == "the-key"

    def test_trace_on_expiry(
        self, manager: FilesystemCache, clock, records: ListHandler
    ) -> None:
        """Test the expiry notice."""
        cache = manager.get_cache("logs", "1")
        cache.write("k", b"1")
        clock.now += 10 * 365 * 24 * 3600

        with pytest.raises(ExpiredError):
            cache.read("k")

        assert "cache entry is too old" in records.messages()

    def test_warning_on_bypass(
        self, manager: FilesystemCache, records: ListHandler
    ) -> None:
        """Test that an unusable namespace is reported."""
        (manager.dir / "blocked").write_text("file")

        manager.get_cache("blocked", "1")

        warnings = [r for r in records.records if r.levelno == logging.WARNING]
        assert [r.getMessage() for r in warnings] == ["error getting cache"]
        assert warnings[0].extra["name"] == "blocked"

    def test_no_trace_above_level(self, manager: FilesystemCache) -> None:
        """Test that trace notices are dropped at INFO."""
        setup_logging("INFO", console_output=False)
        handler = ListHandler()
        logging.getLogger("rcache").addHandler(handler)
        try:
            CachingResolver(manager.get_cache("logs", "1"), int).resolve("k", lambda: 1)
        finally:
            logging.getLogger("rcache").removeHandler(handler)
            setup_logging()

        assert handler.records == []


class TestJSONFormatter:
    """Tests for the JSON Lines formatter."""

    def test_format_includes_context(self) -> None:
        """Test that context and extra fields are serialized."""
        record = logging.LogRecord(
            "rcache.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None
        )
        record.extra = {"name": "db"}

        with log_context(namespace="db/5", key="k"):
            line = JSONFormatter().format(record)

        data = json.loads(line)
        assert data["message"] == "hello world"
        assert data["level"] == "WARNING"
        assert data["namespace"] == "db/5"
        assert data["key"] == "k"
        assert data["extra"] == {"name": "db"}

    def test_file_logging(self, temp_dir, manager: FilesystemCache) -> None:
        """Test that setup_logging writes JSON lines to a file."""
        log_file = temp_dir / "logs" / "rcache.jsonl"
        setup_logging("TRACE", log_file=log_file, console_output=False)
        try:
            CachingResolver(manager.get_cache("logs", "1"), int).resolve("k", lambda: 1)
        finally:
            setup_logging()

        lines = [json.loads(line) for line in log_file.read_text().splitlines()]
        assert lines
        assert lines[0]["level"] == "TRACE"
        assert lines[0]["namespace"] == "logs/1"
