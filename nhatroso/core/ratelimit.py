"""In-process sliding-window rate limiter and the FastAPI dependency that applies it."""

import logging
import threading
import time
from collections import deque
from collections.abc import Callable

from fastapi import HTTPException, Request, status

from nhatroso.core.config import get_settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Allow at most `limit` hits per key within any `per_seconds` window.

    Keys should include both scope and identity (e.g. "auth:login:1.2.3.4").
    State lives in process memory, so limits are per worker. Keys with no hit
    inside the longest window seen so far are swept out, at most once per window.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._max_window = 0
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def allow(self, key: str, *, limit: int, per_seconds: int) -> bool:
        now = self._clock()
        cutoff = now - per_seconds
        with self._lock:
            self._max_window = max(self._max_window, per_seconds)
            if now - self._last_sweep >= self._max_window:
                self._sweep(now)
            hits = self._hits.get(key)
            if hits is None:
                hits = self._hits[key] = deque()
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= limit:
                if not hits:
                    del self._hits[key]
                return False
            hits.append(now)
            return True

    def _sweep(self, now: float) -> None:
        cutoff = now - self._max_window
        stale = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for k in stale:
            del self._hits[k]
        self._last_sweep = now
        if stale:
            logger.debug("Rate limiter dropped %d idle keys", len(stale))

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


def get_rate_limiter(request: Request) -> RateLimiter:
    """Return the app-wide limiter, creating it on first use."""
    rl = getattr(request.app.state, "rate_limiter", None)
    if rl is None:
        rl = RateLimiter()
        request.app.state.rate_limiter = rl
    return rl


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit(bucket: str) -> Callable[[Request], None]:
    """Dependency factory: throttle a route using the AUTH_RATE_LIMIT_* settings."""

    def dep(request: Request) -> None:
        settings = get_settings()
        if not settings.RATE_LIMIT_ENABLED:
            return
        ip = _client_ip(request)
        allowed = get_rate_limiter(request).allow(
            f"{bucket}:{ip}",
            limit=settings.AUTH_RATE_LIMIT_REQUESTS,
            per_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SEC,
        )
        if not allowed:
            logger.warning("Rate limit exceeded: bucket=%s ip=%s", bucket, ip)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
            )

    return dep
