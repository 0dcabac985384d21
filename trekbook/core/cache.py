from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from time import monotonic
from typing import Any, Callable

_MISSING = object()


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Small in-process cache for read-mostly catalog data."""

    def __init__(self, default_ttl_seconds: int = 60) -> None:
        self._default_ttl = max(1, int(default_ttl_seconds))
        self._store: dict[str, _CacheEntry] = {}
        self._lock = Lock()

    def _lookup(self, key: str) -> Any:
        now = monotonic()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return _MISSING
            if entry.expires_at < now:
                self._store.pop(key, None)
                return _MISSING
            return entry.value

    def get(self, key: str) -> Any | None:
        value = self._lookup(key)
        return None if value is _MISSING else value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else max(1, int(ttl_seconds))
        with self._lock:
            self._store[key] = _CacheEntry(value=value, expires_at=monotonic() + ttl)

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl_seconds: int | None = None) -> Any:
        # Loader errors propagate and nothing is cached.
        value = self._lookup(key)
        if value is not _MISSING:
            return value
        value = loader()
        self.set(key, value, ttl_seconds)
        return value

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
