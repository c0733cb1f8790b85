"""Thread-safe in-memory LRU cache bounded by size, with optional expiry.

Used by ``StorageClient`` for agency names, which are read on every chatbot
turn but rarely change.  Entries are evicted least-recently-used first once
the byte budget is exceeded, and are treated as missing after ``ttl_seconds``.

>>> cache = LRUCache(max_bytes=1024, ttl_seconds=300)
>>> cache.put("agency_name:a1", "Tulum Homes")
>>> cache.get("agency_name:a1")
'Tulum Homes'
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, NamedTuple

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 5 * 1024 * 1024


class _Entry(NamedTuple):
    value: Any
    size: int
    expires_at: float | None


class LRUCache:
    """Least-Recently-Used cache bounded by total estimated byte size."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES, ttl_seconds: float | None = None) -> None:
        self._max_bytes = max_bytes
        self._ttl = ttl_seconds
        self._current_bytes = 0
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def _estimate_bytes(value: Any) -> int:
        # JSON length is close enough for the strings and dicts stored here
        try:
            return len(json.dumps(value, default=str).encode("utf-8"))
        except (TypeError, ValueError, OverflowError):
            return len(str(value).encode("utf-8"))

    def _drop(self, key: str) -> None:
        entry = self._entries.pop(key)
        self._current_bytes -= entry.size

    def get(self, key: str) -> Any | None:
        """Return the live value for *key* (marking it recently used) or ``None``."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= time.monotonic():
                self._drop(key)
                logger.debug("Cache: %s expired", key)
                return None
            self._entries.move_to_end(key)
            return entry.value

    def put(self, key: str, value: Any) -> None:
        """Store *value*, evicting the least recently used entries to make room."""
        size = self._estimate_bytes(value)
        if size > self._max_bytes:
            logger.debug("Cache: not storing %s (%d bytes > budget %d)", key, size, self._max_bytes)
            return
        expires_at = time.monotonic() + self._ttl if self._ttl is not None else None

        with self._lock:
            if key in self._entries:
                self._drop(key)
            while self._entries and self._current_bytes + size > self._max_bytes:
                oldest = next(iter(self._entries))
                self._drop(oldest)
                logger.debug("Cache: evicted %s", oldest)
            self._entries[key] = _Entry(value, size, expires_at)
            self._current_bytes += size

    @property
    def current_bytes(self) -> int:
        return self._current_bytes

    @property
    def entry_count(self) -> int:
        return len(self._entries)
