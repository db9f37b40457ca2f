"""Thread-safe TTL cache for web search results."""

import hashlib
import threading
import time
from collections.abc import Callable, Hashable
from typing import Any


class InMemoryTTLCache:
    """
    Thread-safe in-memory cache with TTL (Time To Live).

    Keys are hashed with sha256 (first 16 hex chars); a threading.Lock
    guards every access since FastAPI serves requests concurrently.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            ttl_seconds: Time to live in seconds for cached entries
            clock: Time source, injectable for tests
        """
        self._cache: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._ttl = float(ttl_seconds)
        self._clock = clock

    def _make_key(self, key: Hashable) -> str:
        return hashlib.sha256(repr(key).encode("utf-8")).hexdigest()[:16]

    def get(self, key: Hashable) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        hashed = self._make_key(key)
        with self._lock:
            entry = self._cache.get(hashed)
            if entry is None:
                return None
            value, expiry = entry
            if self._clock() < expiry:
                return value
            del self._cache[hashed]
            return None

    def set(self, key: Hashable, value: Any):
        hashed = self._make_key(key)
        with self._lock:
            self._cache[hashed] = (value, self._clock() + self._ttl)

    def clear(self):
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
