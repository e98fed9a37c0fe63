"""Fixed-window request limiter keyed by client address."""

from __future__ import annotations

import math
import time
from typing import Callable

import structlog
from cachetools import TTLCache
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from schoolshelf.config.app_config import RateLimitConfig

logger = structlog.get_logger(__name__)

TOO_MANY_REQUESTS = "Too many requests, please try again later."


class _Window:
    __slots__ = ("started", "count")

    def __init__(self, started: float):
        self.started = started
        self.count = 0


class FixedWindowLimiter:
    """Counts hits per key in windows of ``window_seconds``.

    A window opens on a key's first hit and expires with its cache entry.
    The entry is never re-inserted while open, so hits do not extend it.
    At most ``maxsize`` keys are tracked; once full, the least recently
    used window is evicted and that key starts a fresh count.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        maxsize: int = 10_000,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._timer = timer
        self._windows: TTLCache = TTLCache(maxsize=maxsize, ttl=window_seconds, timer=timer)

    def hit(self, key: str) -> tuple[bool, int, int]:
        """Record one request.

        Returns:
            (allowed, remaining, seconds until the window resets)
        """
        window = self._windows.get(key)
        if window is None:
            window = _Window(self._timer())
            self._windows[key] = window

        window.count += 1
        remaining = max(self.max_requests - window.count, 0)
        reset = math.ceil(window.started + self.window_seconds - self._timer())
        return window.count <= self.max_requests, remaining, max(reset, 0)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests over the limit with 429 and reports RateLimit-* headers."""

    def __init__(self, app, config: RateLimitConfig):
        super().__init__(app)
        self.limiter = FixedWindowLimiter(
            config.max_requests, config.window_seconds, maxsize=config.max_clients
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client = request.client.host if request.client else "unknown"
        allowed, remaining, reset = self.limiter.hit(client)
        headers = {
            "RateLimit-Limit": str(self.limiter.max_requests),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(reset),
        }

        if not allowed:
            logger.warning("api.rate_limited", client=client, path=request.url.path)
            return JSONResponse(
                status_code=429,
                content={"error": TOO_MANY_REQUESTS},
                headers={**headers, "Retry-After": str(reset)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
