"""Per-client request throttling."""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of counting one request against a client's window."""

    allowed: bool
    limit: int
    remaining: int
    reset_after_seconds: int


class RateLimiter(Protocol):
    """Counter store with an atomic increment-and-check operation."""

    def hit(self, key: str) -> RateLimitDecision:
        """Count a request for ``key`` and report whether it is allowed."""


@dataclass
class _RateWindow:
    count: int
    window_start: float


@dataclass
class InMemoryRateLimiter(RateLimiter):
    """Fixed-window limiter keeping state in process memory."""

    max_requests: int = 30
    window_seconds: float = 60
    clock: Callable[[], float] = time.monotonic
    _windows: dict[str, _RateWindow] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _last_sweep: float | None = field(default=None, init=False)

    def hit(self, key: str) -> RateLimitDecision:
        """Increment the counter for ``key`` and check it against the limit."""
        with self._lock:
            now = self.clock()
            self._sweep(now)
            window = self._windows.get(key)
            if window is None or now - window.window_start >= self.window_seconds:
                window = _RateWindow(count=0, window_start=now)
                self._windows[key] = window
            window.count += 1
            reset_after = max(
                1, math.ceil(window.window_start + self.window_seconds - now)
            )
            return RateLimitDecision(
                allowed=window.count <= self.max_requests,
                limit=self.max_requests,
                remaining=max(0, self.max_requests - window.count),
                reset_after_seconds=reset_after,
            )

    @property
    def tracked_clients(self) -> int:
        return len(self._windows)

    def _sweep(self, now: float) -> None:
        """Drop windows that have elapsed, at most once per window length."""
        last = self._last_sweep
        if last is not None and now - last < self.window_seconds:
            return
        self._last_sweep = now
        stale = [
            key
            for key, window in self._windows.items()
            if now - window.window_start >= self.window_seconds
        ]
        for key in stale:
            del self._windows[key]
