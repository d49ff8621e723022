"""HTTP middlewares: per-client rate limiting and security headers."""

import math
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from .errors import QuotaExceeded
from .services.rate_limiter import RateLimiter


SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; "
        "style-src 'self' 'unsafe-inline' https://cdnjs.cloudflare.com; "
        "script-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https://openweathermap.org; "
        "connect-src 'self'"
    ),
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


def get_client_key(request: Request, trust_forwarded_for: bool = False) -> str:
    """Identify the caller by network address."""
    client_ip = request.client.host if request.client else "unknown"
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            client_ip = forwarded.split(",")[0].strip()
    return client_ip


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects requests from clients that used up their window, on every route."""

    def __init__(self, app, limiter: RateLimiter, trust_forwarded_for: bool = False):
        super().__init__(app)
        self.limiter = limiter
        self.trust_forwarded_for = trust_forwarded_for

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_key = get_client_key(request, self.trust_forwarded_for)

        try:
            status = self.limiter.consume(client_key)
        except QuotaExceeded as e:
            return JSONResponse(
                status_code=e.status_code,
                content=e.to_dict(),
                headers={
                    "Retry-After": str(max(1, math.ceil(e.retry_after))),
                    "X-RateLimit-Limit": str(self.limiter.points),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(status.limit)
        response.headers["X-RateLimit-Remaining"] = str(status.remaining)
        response.headers["X-RateLimit-Reset"] = str(math.ceil(status.reset_after))
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds a fixed set of browser security headers to every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response
