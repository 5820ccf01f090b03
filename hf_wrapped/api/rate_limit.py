"""Sliding-window request counter, one instance per app."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Callable


class RateLimiter:
    """Counts hits per key inside a rolling window of ``window_ms`` milliseconds."""

    def __init__(
        self,
        window_ms: int = 60_000,
        max_requests: int = 30,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)

    def track(self, key: str) -> int:
        """Record a hit for ``key`` and return how many fall inside the window."""
        now_ms = self._clock() * 1000
        self._prune(now_ms)
        hits = self._hits[key]
        hits.append(now_ms)
        return len(hits)

    def _prune(self, now_ms: float) -> None:
        # Drop expired hits for every key and forget keys with none left
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and now_ms - hits[0] >= self.window_ms:
                hits.popleft()
            if not hits:
                del self._hits[key]

    def tracked_keys(self) -> int:
        """Number of keys with at least one hit inside the window."""
        return len(self._hits)

    def allow(self, key: str) -> bool:
        return self.track(key) <= self.max_requests

    def reset(self) -> None:
        self._hits.clear()
