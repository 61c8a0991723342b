"""Per-caller sliding window rate limiting for geocoding requests."""

import time
from typing import Callable

from georesolver.models.geographic import RateLimitWindow


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per ``window_seconds`` for each caller.

    Windows are pruned lazily on each check; rejected requests are not
    recorded.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, RateLimitWindow] = {}

    def check(self, client_id: str) -> bool:
        """Record a request for ``client_id`` if it is under quota.

        Returns:
            True when the request may proceed
        """
        now = self._clock()
        window = self._windows.get(client_id)

        if window is None:
            self._windows[client_id] = RateLimitWindow(requests=[now], window_start=now)
            return True

        cutoff = now - self.window_seconds
        window.requests = [ts for ts in window.requests if ts > cutoff]
        window.window_start = window.requests[0] if window.requests else now

        if len(window.requests) >= self.max_requests:
            return False

        window.requests.append(now)
        return True

    def retry_after(self, client_id: str) -> float:
        """Seconds until the oldest request in the window expires."""
        window = self._windows.get(client_id)
        if not window or not window.requests:
            return 0.0
        return max(0.0, window.requests[0] + self.window_seconds - self._clock())

    def reset(self, client_id: str | None = None) -> None:
        if client_id is None:
            self._windows.clear()
        else:
            self._windows.pop(client_id, None)
