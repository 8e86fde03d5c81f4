"""In-memory TTL cache for analysis results keyed by content hash."""

from __future__ import annotations

import hashlib
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from config import Settings


@dataclass
class CacheEntry:
    data: Any
    stored_at: float
    expires_at: float


class ResultCache:
    """Process-local cache; entries expire lazily on read and in sweeps, and the
    oldest entries are evicted once ``cache_max_entries`` is exceeded.
    """

    def __init__(self, settings: Settings, *, clock: Callable[[], float] = time.monotonic):
        self.settings = settings
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(data: bytes, prefix: str = "") -> str:
        return f"{prefix}:{hashlib.sha256(data).hexdigest()}"

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._store[key]
                return None
            return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        ttl = self.settings.cache_ttl_seconds if ttl is None else ttl
        now = self._clock()
        with self._lock:
            self._store.pop(key, None)
            self._store[key] = CacheEntry(data=data, stored_at=now, expires_at=now + ttl)
            if len(self._store) > self.settings.cache_max_entries:
                self._sweep(now)
            while len(self._store) > self.settings.cache_max_entries:
                # Oldest insertion first.
                del self._store[next(iter(self._store))]

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def stats(self) -> Dict[str, int]:
        now = self._clock()
        with self._lock:
            expired = sum(1 for entry in self._store.values() if now > entry.expires_at)
            return {
                "total": len(self._store),
                "active": len(self._store) - expired,
                "expired": expired,
            }

    def _sweep(self, now: float) -> None:
        for key in [k for k, entry in self._store.items() if now > entry.expires_at]:
            del self._store[key]
