"""rcache: disk-backed, namespaced, time-expiring cache with memoizing resolvers."""

__version__ = "0.1.0"
