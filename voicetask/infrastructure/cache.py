from __future__ import annotations

import time
from threading import Lock
from typing import Any, Callable


class TtlCache:
    """Small in-process read-through cache; entries expire on a monotonic clock."""

    def __init__(self, ttl_seconds: float):
        self.ttl_seconds = ttl_seconds
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = Lock()

    def get(self, key: str) -> tuple[bool, Any]:
        if self.ttl_seconds <= 0:
            return False, None
        now = time.monotonic()
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                return False, None
            expires_at, value = cached
            if expires_at <= now:
                self._entries.pop(key, None)
                return False, None
            return True, value

    def set(self, key: str, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        expires_at = time.monotonic() + self.ttl_seconds
        with self._lock:
            self._entries[key] = (expires_at, value)

    def get_or_load(self, key: str, loader: Callable[[], Any]) -> Any:
        hit, value = self.get(key)
        if hit:
            return value
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
