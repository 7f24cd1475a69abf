"""
Filesystem-backed cache.

Entries live at <root>/<name>/<version>/<encoded key>, one file per entry.
Freshness is judged from the file's modification time against a single
TTL shared by every namespace handed out by the same manager.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tempfile
import time
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Callable

from rcache.cache.base import Cache, CacheManager
from rcache.cache.bypass import BypassCache
from rcache.cache.keys import make_disk_key
from rcache.exceptions import (
    CacheError,
    DirectoryUnavailableError,
    ExpiredError,
    NotFoundError,
    WriteError,
)
from rcache.logging import get_logger

logger = get_logger(__name__)

DIR_PERMISSIONS = 0o700


class FilesystemCache(CacheManager, Cache):
    """Cache manager and cache rooted at a directory on disk.

    The manager returned by from_dir() is itself a cache over the root;
    get_cache() returns a new FilesystemCache scoped to one namespace.
    """

    def __init__(
        self,
        dir: str | Path,
        ttl: timedelta,
        *,
        namespace: str = "",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize a cache over an existing directory.

        Use from_dir() unless the directory is already known to exist.

        Args:
            dir: Absolute directory the cache is rooted at.
            ttl: How long an entry stays fresh after it was written.
            namespace: "name/version" label for logging.
            clock: Source of the current time in epoch seconds.
        """
        self.dir = Path(dir)
        self.ttl = ttl
        self._namespace = namespace
        self._clock = clock

    @classmethod
    def from_dir(
        cls,
        dir: str | Path,
        ttl: timedelta,
        *,
        clock: Callable[[], float] = time.time,
    ) -> FilesystemCache:
        """Create a cache manager rooted at the given directory.

        The directory is created if it does not exist.

        Raises:
            DirectoryUnavailableError: The root cannot be created or is not
                a directory.
        """
        root = Path(os.path.abspath(dir))
        _ensure_dir(root)
        return cls(root, ttl, clock=clock)

    @property
    def namespace(self) -> str:
        return self._namespace

    def get_cache(self, name: str, version: str) -> Cache:
        try:
            sub_dir = _sub_dir(self.dir, name, version)
        except DirectoryUnavailableError as e:
            logger.warning(
                "error getting cache",
                name=name,
                version=version,
                error=str(e),
            )
            return BypassCache()

        return FilesystemCache(
            sub_dir,
            self.ttl,
            namespace=f"{name}/{version}",
            clock=self._clock,
        )

    def root_dirs(self) -> list[str]:
        return [str(self.dir)]

    def read(self, key: str) -> BinaryIO:
        try:
            path = self._path_for(key)
            f = path.open("rb")
        except (CacheError, OSError) as e:
            logger.trace("no cache entry", dir=str(self.dir), key=key, error=str(e))
            raise NotFoundError("not found", {"dir": str(self.dir), "key": key}) from e

        try:
            modified = os.fstat(f.fileno()).st_mtime
        except OSError:
            modified = None

        if modified is None or self._clock() - modified > self.ttl.total_seconds():
            f.close()
            logger.trace("cache entry is too old", dir=str(self.dir), key=key)
            raise ExpiredError("expired", {"dir": str(self.dir), "key": key})

        logger.trace("using value from cache", dir=str(self.dir), key=key)
        return f

    def write(self, key: str, contents: BinaryIO | bytes) -> None:
        try:
            path = self._path_for(key)
            make_dirs(path.parent)
            _write_atomic(path, contents)
        except (CacheError, OSError) as e:
            raise WriteError(
                "unable to write cache entry",
                {"dir": str(self.dir), "key": key, "reason": str(e)},
            ) from e

    def _path_for(self, key: str) -> Path:
        """Resolve a key to a file path inside this cache's directory."""
        relative = make_disk_key(key).lstrip("/")
        path = Path(os.path.normpath(os.path.join(self.dir, relative)))
        if path == self.dir or not _is_within(self.dir, path):
            raise CacheError("invalid cache key", {"dir": str(self.dir), "key": key})
        return path

    def __repr__(self) -> str:
        return f"FilesystemCache(dir={str(self.dir)!r}, ttl={self.ttl!r})"


def _is_within(root: Path, path: Path) -> bool:
    return os.path.commonpath([root, path]) == str(root)


def _sub_dir(root: Path, *sub_dirs: str) -> Path:
    """Return a writable directory under root, creating it if needed.

    Raises:
        DirectoryUnavailableError: The directory would fall outside root,
            cannot be created, or exists but is not a directory.
    """
    relative = os.path.normpath("/".join(sub_dirs)).lstrip("/")
    path = Path(os.path.normpath(os.path.join(root, relative)))
    if not _is_within(root, path):
        raise DirectoryUnavailableError(
            "unable to verify directory",
            {"dir": str(path), "reason": "outside of cache root"},
        )
    _ensure_dir(path)
    return path


def _ensure_dir(path: Path) -> None:
    """Create path if missing and verify it is a directory."""
    try:
        st = path.stat()
    except FileNotFoundError:
        try:
            make_dirs(path)
            st = path.stat()
        except (OSError, ValueError) as e:
            raise DirectoryUnavailableError(
                "unable to create directory", {"dir": str(path), "reason": str(e)}
            ) from e
    except (OSError, ValueError) as e:
        # ValueError: the path contains a NUL byte
        raise DirectoryUnavailableError(
            "unable to verify directory", {"dir": str(path), "reason": str(e)}
        ) from e

    if not stat.S_ISDIR(st.st_mode):
        raise DirectoryUnavailableError(
            "unable to verify directory", {"dir": str(path), "reason": "not a directory"}
        )


def make_dirs(path: Path) -> None:
    """Like os.makedirs, but every created level gets DIR_PERMISSIONS."""
    missing: list[Path] = []
    current = path
    while not current.exists() and current != current.parent:
        missing.append(current)
        current = current.parent

    for directory in reversed(missing):
        directory.mkdir(mode=DIR_PERMISSIONS, exist_ok=True)


def _write_atomic(path: Path, contents: BinaryIO | bytes) -> None:
    """Write contents to a temp sibling, then move it over path."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
    try:
        with os.fdopen(fd, "wb") as f:
            if isinstance(contents, (bytes, bytearray)):
                f.write(contents)
            else:
                shutil.copyfileobj(contents, f)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise
