"""
Fixed-window, in-memory rate limiting keyed by client IP.
"""

import logging
import math
import threading
import time
from typing import Dict, Tuple

from ._responses import send_error

log = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later"


class RateLimitMiddleware:
    """
    Counts requests under ``path_prefix`` per client within fixed windows of
    ``window_ms``. Requests over ``max_requests`` get 429 until the window
    resets. Paths in ``skip_paths`` are never counted.
    """

    def __init__(
        self,
        app,
        window_ms: int = 15 * 60 * 1000,
        max_requests: int = 100,
        path_prefix: str = "/api",
        skip_paths: Tuple[str, ...] = ("/api/health",),
        clock=time.monotonic,
    ):
        self.app = app
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.path_prefix = path_prefix
        self.skip_paths = set(skip_paths)
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def _applies_to(self, path: str) -> bool:
        if path in self.skip_paths:
            return False
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    def hit(self, key: str) -> Tuple[int, float]:
        """Record one request for ``key`` and return (count, seconds until reset)."""
        now_ms = self.clock() * 1000
        with self._lock:
            window_start, count = self._windows.get(key, (now_ms, 0))
            if now_ms - window_start >= self.window_ms:
                window_start, count = now_ms, 0
            count += 1
            self._windows[key] = (window_start, count)
            if len(self._windows) > 10000:
                self._prune(now_ms)
        return count, max(0.0, (window_start + self.window_ms - now_ms) / 1000)

    def _prune(self, now_ms: float) -> None:
        expired = [k for k, (start, _) in self._windows.items() if now_ms - start >= self.window_ms]
        for key in expired:
            del self._windows[key]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or not self._applies_to(scope.get("path", "")):
            await self.app(scope, receive, send)
            return

        client = scope.get("client")
        key = client[0] if client else "unknown"
        count, reset_seconds = self.hit(key)
        remaining = max(0, self.max_requests - count)
        headers = {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(math.ceil(reset_seconds)),
        }

        if count > self.max_requests:
            log.warning("Rate limit exceeded for %s on %s", key, scope.get("path"))
            headers["Retry-After"] = str(math.ceil(reset_seconds))
            await send_error(scope, receive, send, 429, RATE_LIMIT_MESSAGE, headers=headers)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                raw = list(message.get("headers", []))
                raw.extend((k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items())
                message = {**message, "headers": raw}
            await send(message)

        await self.app(scope, receive, send_with_headers)
