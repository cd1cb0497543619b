from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, Dict, Optional, Tuple


class RateLimitRepository:
    """
    In-memory sliding-window counter keyed by client address.

    Counts reset on restart. Each key keeps the timestamps of the hits inside
    the current window, so memory is bounded by max_requests per active key.
    """
    def __init__(self, window_seconds: int, max_requests: int, clock: Optional[Callable[[], float]] = None,
                 sweep_interval_seconds: float = 60.0):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock or time.monotonic
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = self._clock()

    def _prune(self, hits: Deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def reserve(self, key: str) -> Tuple[bool, int]:
        """
        Record one hit for key. Returns (allowed, remaining).
        Rejected hits are not recorded.
        """
        now = self._clock()
        hits = self._hits.setdefault(key, deque())
        self._prune(hits, now)
        if len(hits) >= self.max_requests:
            return False, 0
        hits.append(now)
        return True, self.max_requests - len(hits)

    def sweep(self) -> int:
        """Drops keys with no hits left in the window. Returns the number dropped."""
        now = self._clock()
        stale = []
        for key, hits in self._hits.items():
            self._prune(hits, now)
            if not hits:
                stale.append(key)
        self._last_sweep = now
        for key in stale:
            del self._hits[key]
        return len(stale)

    def sweep_if_due(self, max_keys: int) -> int:
        """Sweeps only when more than max_keys are tracked, at most once per sweep interval."""
        if len(self._hits) <= max_keys:
            return 0
        if self._clock() - self._last_sweep < self.sweep_interval_seconds:
            return 0
        return self.sweep()

    def __len__(self) -> int:
        return len(self._hits)
