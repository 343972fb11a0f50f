"""Bounded caches owned by the components that use them."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Callable, Hashable
from typing import Any

_MISSING = object()


class BoundedCache:
    """Insertion-ordered cache that evicts its oldest entry when full.

    Entries are never refreshed on read; the oldest *inserted* key goes first.
    A cache with ``enabled=False`` stores nothing, so every lookup misses.
    """

    def __init__(self, max_size: int | None = 128, enabled: bool = True):
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be a positive integer or None")
        self.max_size = max_size
        self.enabled = enabled
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            return self._entries.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        if not self.enabled:
            return
        with self._lock:
            if key in self._entries:
                self._entries[key] = value
                return
            if self.max_size is not None and len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = value

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        """Return the cached value for ``key``, computing and storing it on a miss.

        ``compute`` runs outside the lock; two threads missing on the same key
        both compute, and the later store wins.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = compute()
        self.set(key, value)
        return value

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"BoundedCache({len(self)}/{self.max_size}, enabled={self.enabled})"
