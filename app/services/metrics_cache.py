"""
Single-slot in-memory cache for computed dashboard aggregates.

One instance per cached pipeline, owned by the application state and handed
to routes as a dependency. There is no locking: concurrent misses recompute
and the last write wins, which is fine because the value is idempotent within
the TTL window.
"""

import time
from collections.abc import Callable
from typing import Any

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class MetricsCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time, name: str = "metrics"):
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._value: Any = None
        self._stored_at: float | None = None

    def get(self) -> tuple[Any, float] | None:
        """Return (value, stored_at epoch seconds) regardless of freshness, or None."""
        if self._value is None or self._stored_at is None:
            return None
        return self._value, self._stored_at

    def set(self, value: Any) -> float:
        self._value = value
        self._stored_at = self._clock()
        return self._stored_at

    def clear(self) -> None:
        self._value = None
        self._stored_at = None
        logger.info("Cache cleared", cache=self.name)

    def is_valid(self) -> bool:
        if self._value is None or self._stored_at is None:
            return False
        return (self._clock() - self._stored_at) < self.ttl_seconds
