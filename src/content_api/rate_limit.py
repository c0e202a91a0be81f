"""Fixed-window request limiting per client address, kept in process memory."""

import logging
import time
from typing import Callable, Dict, Tuple

from fastapi import Request

from content_api.errors import RateLimited, error_response

logger = logging.getLogger(__name__)


class FixedWindowRateLimiter:
    """Counts requests per key within consecutive windows of ``window_seconds``."""

    def __init__(self, max_requests: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> bool:
        """Record a request; False once the key has used up its window."""
        now = self.clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)
        started, count = self._windows.get(key, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0
        count += 1
        self._windows[key] = (started, count)
        return count <= self.max_requests

    def _sweep(self, now: float) -> None:
        """Forget keys whose window has ended."""
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        if expired:
            logger.debug(f"Dropped {len(expired)} expired rate limit windows")


def rate_limit_middleware(limiter: FixedWindowRateLimiter):
    """Build an ``http`` middleware that answers 429 when the limiter says no."""

    async def limit_requests(request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        if not limiter.hit(client):
            logger.warning(f"Rate limit exceeded for {client}")
            return error_response(RateLimited.status_code, RateLimited.default_message)
        return await call_next(request)

    return limit_requests
