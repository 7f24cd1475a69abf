"""Mapping of cache keys onto safe relative paths."""

from __future__ import annotations

import re
from urllib.parse import quote_plus

_KEY_REPLACER = re.compile(r"[^-._/a-zA-Z0-9]")


def make_disk_key(key: str) -> str:
    """Make a safe sub-path for a key without escaping forward slashes.

    Slashes are kept so callers can partition a namespace on disk
    (``"images/sha256/abc"``). Everything else outside ``[-._a-zA-Z0-9]``
    is query-escaped, and ``..`` never survives, so the result cannot walk
    out of the directory it is joined onto.

    Args:
        key: Arbitrary cache key.

    Returns:
        Relative path segment(s) for the key.
    """
    # encode single dot directory
    if key == ".":
        return "%2E"
    key = _KEY_REPLACER.sub(lambda m: quote_plus(m.group(0), errors="surrogatepass"), key)
    # allow . in names but not ..
    return key.replace("..", "%2E%2E")
