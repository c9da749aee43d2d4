"""
HTTP middleware: per-client rate limiting on the API and security headers.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Mapping, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

SECURITY_HEADERS: Mapping[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


class InMemoryRateLimitStore:
    """Fixed-window counters keyed by client."""

    def __init__(self, limit: int):
        self.limit = limit
        self._windows: Dict[str, Tuple[int, int]] = {}
        self._lock = threading.Lock()

    def incr(self, key: str, window: int) -> Tuple[int, int, int]:
        now = int(time.time())
        with self._lock:
            reset, count = self._windows.get(key, (0, 0))
            if now >= reset:
                reset, count = now + window, 0
            count += 1
            self._windows[key] = (reset, count)
        return count, self.limit, reset


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        *,
        limit: int,
        window: int,
        path_prefix: str = "/api",
        key_fn: Callable[[Request], str] = client_ip,
        store: Optional[InMemoryRateLimitStore] = None,
    ):
        super().__init__(app)
        self.window = window
        self.path_prefix = path_prefix
        self.key_fn = key_fn
        self.store = store or InMemoryRateLimitStore(limit=limit)

    async def dispatch(self, request, call_next):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        count, limit, reset = self.store.incr(str(self.key_fn(request)), self.window)
        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(max(0, limit - count)),
            "X-RateLimit-Reset": str(reset),
        }
        if count > limit:
            headers["Retry-After"] = str(max(0, reset - int(time.time())))
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "message": "Too many requests from this IP, please try again later.",
                },
                headers=headers,
            )
        response = await call_next(request)
        response.headers.update(headers)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, headers: Optional[Mapping[str, str]] = None):
        super().__init__(app)
        self.headers = dict(SECURITY_HEADERS if headers is None else headers)

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
