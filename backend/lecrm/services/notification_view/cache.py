"""Keyed TTL cache with fail-open refresh."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Generic, TypeVar

from lecrm.services.notification_view.constants import LOGGER_NAME
from lecrm.services.notification_view.types import utcnow

logger = logging.getLogger(LOGGER_NAME)

T = TypeVar("T")

# How long a stale value is served again after a failed refresh.
FAILED_REFRESH_RETRY_SECONDS = 60


@dataclass
class _Entry(Generic[T]):
    value: T
    expires_at: dt.datetime


class TTLCache(Generic[T]):
    def __init__(
        self,
        name: str,
        *,
        ttl_seconds: int,
        fallback: Callable[[], T],
        clock: Callable[[], dt.datetime] = utcnow,
    ) -> None:
        self.name = name
        self.ttl_seconds = max(0, int(ttl_seconds))
        self._fallback = fallback
        self._clock = clock
        self._entries: dict[str, _Entry[T]] = {}
        self._lock = Lock()

    def get(self, key: str, loader: Callable[[], T]) -> T:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and now < entry.expires_at:
                return entry.value

        try:
            fresh = loader()
        except Exception as exc:
            logger.warning("%s refresh failed for %s: %s", self.name, key, exc)
            with self._lock:
                entry = self._entries.get(key)
                if entry is not None:
                    retry = min(self.ttl_seconds, FAILED_REFRESH_RETRY_SECONDS)
                    entry.expires_at = now + dt.timedelta(seconds=retry)
                    return entry.value
            return self._fallback()

        with self._lock:
            self._entries[key] = _Entry(value=fresh, expires_at=now + dt.timedelta(seconds=self.ttl_seconds))
        return fresh

    def peek(self, key: str) -> T | None:
        with self._lock:
            entry = self._entries.get(key)
            return entry.value if entry is not None else None

    def put(self, key: str, value: T) -> None:
        """Replace a cached value without touching its expiry (or start a fresh window)."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._entries[key] = _Entry(value=value, expires_at=now + dt.timedelta(seconds=self.ttl_seconds))
            else:
                entry.value = value

    def invalidate(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
