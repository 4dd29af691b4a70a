from __future__ import annotations

import math
import threading
import time
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


class ExpiringStore(Generic[T]):
    """Keyed in-memory store whose entries expire after a fixed TTL.

    Used for short-lived auth bookkeeping (e.g. sign-in attempts per client).
    Expired entries are dropped lazily on access and by ``purge``.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._items: dict[str, tuple[float, T]] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._items[key] = (self._clock() + self._ttl, value)

    def get(self, key: str, default: T | None = None) -> T | None:
        with self._lock:
            entry = self._items.get(key)
            if entry is None:
                return default
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._items[key]
                return default
            return value

    def pop(self, key: str, default: T | None = None) -> T | None:
        with self._lock:
            entry = self._items.pop(key, None)
        if entry is None or entry[0] <= self._clock():
            return default
        return entry[1]

    def purge(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, (expires_at, _) in self._items.items() if expires_at <= now]
            for key in expired:
                del self._items[key]
        return len(expired)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self.purge()
        return len(self._items)


class AttemptLimiter:
    """Sliding-window attempt counter backed by an ``ExpiringStore``."""

    def __init__(
        self,
        *,
        max_attempts: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._store: ExpiringStore[list[float]] = ExpiringStore(window_seconds, clock=clock)

    def hit(self, identifier: str) -> bool:
        """Record an attempt. Return True when the identifier is now over the limit."""
        now = self._clock()
        window_start = now - self.window_seconds
        attempts = [ts for ts in (self._store.get(identifier) or []) if ts > window_start]
        if len(attempts) >= self.max_attempts:
            self._store.set(identifier, attempts)
            return True
        attempts.append(now)
        self._store.set(identifier, attempts)
        return False

    def seconds_until_reset(self, identifier: str) -> int:
        now = self._clock()
        attempts = self._store.get(identifier) or []
        if not attempts:
            return 0
        remaining = self.window_seconds - (now - min(attempts))
        return max(1, math.ceil(remaining))

    def reset(self, identifier: str) -> None:
        self._store.pop(identifier)
