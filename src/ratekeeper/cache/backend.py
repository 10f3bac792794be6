"""
Key-value cache backend.

MemoryCache keeps entries in-process with optional per-key TTL. It is what the worker
and the CLI use; any store offering get/set/delete/clear can replace it.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Callable


class CacheBackend(ABC):
    """Minimal key-value cache interface."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the cached value or None when missing or expired."""

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value; ttl in seconds, None means no expiry."""

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemoryCache(CacheBackend):
    """In-process cache with lazy expiry."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: dict[str, tuple[Any, float | None]] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        expires_at = self._clock() + ttl if ttl is not None else None
        self._entries[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
