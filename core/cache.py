"""In-memory TTL cache."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any


class TTLCache:
    """Dictionary-backed cache whose entries expire after ``ttl_seconds``.

    Last write wins; not safe under concurrent writers.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] | None = None) -> None:
        self.ttl_seconds = float(ttl_seconds)
        self._clock = clock or time.monotonic
        self._store: dict[str, tuple[float, Any]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        hit = self._store.get(key)
        if hit is None:
            return default
        stored_at, value = hit
        if self._clock() - stored_at > self.ttl_seconds:
            del self._store[key]
            return default
        return value

    def set(self, key: str, value: Any) -> None:
        self._store[key] = (self._clock(), value)

    def invalidate(self, key: str) -> None:
        self._store.pop(key, None)

    def __len__(self) -> int:
        return len(self._store)
