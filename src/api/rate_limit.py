from __future__ import annotations

import math
import threading
import time
from collections import deque
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request, status
from src.api.errors import error_response
from src.core.config import Settings
from starlette.responses import Response

logger = structlog.get_logger()


class InMemoryRateLimiter:
    """Sliding-window request counter per client key.

    Keys with no request inside the window are dropped, so memory is bounded by
    the number of clients active in one window.
    """

    def __init__(self, *, limit: int, window_seconds: int) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._events_by_key: dict[str, deque[float]] = {}
        self._last_sweep = float("-inf")
        self._lock = threading.Lock()

    @property
    def tracked_keys(self) -> int:
        return len(self._events_by_key)

    def hit(self, key: str, *, now: float | None = None) -> int:
        """Record a request; returns 0 when allowed, else seconds until a slot frees."""
        timestamp = now if now is not None else time.monotonic()
        cutoff = timestamp - self.window_seconds
        with self._lock:
            if timestamp - self._last_sweep >= self.window_seconds:
                self._sweep(cutoff)
                self._last_sweep = timestamp

            events = self._events_by_key.setdefault(key, deque())
            while events and events[0] <= cutoff:
                events.popleft()
            if len(events) >= self.limit:
                return max(1, math.ceil(events[0] + self.window_seconds - timestamp))
            events.append(timestamp)
            return 0

    def _sweep(self, cutoff: float) -> None:
        idle = [
            key
            for key, events in self._events_by_key.items()
            if not events or events[-1] <= cutoff
        ]
        for key in idle:
            del self._events_by_key[key]


def client_identifier(request: Request, *, trust_forwarded: bool = False) -> str:
    """Socket peer address; the first X-Forwarded-For hop only behind a trusted proxy."""
    if trust_forwarded:
        forwarded_for = request.headers.get("x-forwarded-for", "")
        if forwarded_for.strip():
            return forwarded_for.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def install_rate_limiter(app: FastAPI, settings: Settings) -> InMemoryRateLimiter:
    """Attach the limiter as HTTP middleware and expose it on ``app.state``."""
    limiter = InMemoryRateLimiter(
        limit=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.state.rate_limiter = limiter

    @app.middleware("http")
    async def rate_limit_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        client = client_identifier(request, trust_forwarded=settings.rate_limit_trust_forwarded)
        retry_after = limiter.hit(client)
        if retry_after:
            await logger.awarning("rate_limited", client=client, retry_after=retry_after)
            return error_response(
                status.HTTP_429_TOO_MANY_REQUESTS,
                f"Too many requests, please try again after {retry_after} seconds.",
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

    return limiter
