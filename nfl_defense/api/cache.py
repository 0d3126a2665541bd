"""Single-slot TTL cache for the latest successful stats payload."""

import time
from typing import Callable, Optional, Tuple


class StatsCache:
    """Holds one serialized envelope until ``ttl`` seconds have passed.

    A ``ttl`` of 0 or less disables caching: ``set`` is a no-op.
    """

    def __init__(self, ttl: int = 3600, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[Tuple[dict, float]] = None

    def get(self) -> Optional[dict]:
        if self._entry is None:
            return None
        payload, expires_at = self._entry
        if self._clock() >= expires_at:
            self._entry = None
            return None
        return payload

    def set(self, payload: dict) -> None:
        if self.ttl <= 0:
            return
        self._entry = (payload, self._clock() + self.ttl)

    def clear(self) -> None:
        self._entry = None

    @property
    def is_empty(self) -> bool:
        return self.get() is None
