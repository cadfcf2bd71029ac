"""Sliding-window request budget for external sources."""

import math
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass
class RateLimiter:
    """Track requests in a trailing window and refuse them once at capacity."""

    max_requests: int
    window_seconds: float = 60.0
    clock: Callable[[], float] = time.monotonic
    _requests: deque[float] = field(default_factory=deque, init=False, repr=False)

    def can_make_request(self) -> bool:
        """Return True if a request fits in the current window."""
        self._purge()
        return len(self._requests) < self.max_requests

    def record_request(self) -> bool:
        """Record a request if allowed; return whether it was recorded."""
        if not self.can_make_request():
            return False
        self._requests.append(self.clock())
        return True

    def get_remaining_requests(self) -> int:
        """Return how many requests are left in the current window."""
        self._purge()
        return max(0, self.max_requests - len(self._requests))

    def get_time_until_next_request(self) -> int:
        """Return milliseconds until a slot frees up, 0 if one is free now."""
        if self.can_make_request() or not self._requests:
            return 0
        elapsed = self.clock() - self._requests[0]
        return max(0, math.ceil((self.window_seconds - elapsed) * 1000))

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._requests.clear()

    def _purge(self) -> None:
        now = self.clock()
        while self._requests and now - self._requests[0] >= self.window_seconds:
            self._requests.popleft()
