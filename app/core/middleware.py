"""
HTTP middleware: security headers and per-client rate limiting.
"""
import logging
import threading
import time
from dataclasses import dataclass

from fastapi import FastAPI
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; font-src 'self' data:;"
    ),
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add browser hardening headers to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


@dataclass
class TokenBucket:
    """Token bucket refilled continuously at *rate* tokens per second."""
    rate: float
    capacity: int
    tokens: float = 0.0
    updated_at: float = 0.0

    def __post_init__(self):
        self.tokens = float(self.capacity)
        self.updated_at = time.monotonic()

    def allow(self) -> bool:
        now = time.monotonic()
        elapsed = now - self.updated_at
        self.updated_at = now
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        if self.tokens >= 1:
            self.tokens -= 1
            return True
        return False


class IPRateLimiter:
    """One token bucket per client IP.

    Every *sweep_interval* seconds, buckets idle long enough to have
    refilled completely are dropped; a new bucket starts full, so the
    client sees no difference.
    """

    def __init__(self, rate: float, burst: int, sweep_interval: float = 60.0):
        self.rate = rate
        self.burst = burst
        self.sweep_interval = sweep_interval
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = threading.Lock()
        self._last_sweep = time.monotonic()

    def __len__(self) -> int:
        return len(self._buckets)

    def _evict_idle(self, now: float) -> None:
        idle_after = max(self.burst / self.rate, self.sweep_interval)
        stale = [
            ip for ip, bucket in self._buckets.items()
            if now - bucket.updated_at >= idle_after
        ]
        for ip in stale:
            del self._buckets[ip]
        self._last_sweep = now

    def allow(self, ip: str) -> bool:
        with self._lock:
            now = time.monotonic()
            if now - self._last_sweep >= self.sweep_interval:
                self._evict_idle(now)

            bucket = self._buckets.get(ip)
            if bucket is None:
                bucket = TokenBucket(rate=self.rate, capacity=self.burst)
                self._buckets[ip] = bucket
            return bucket.allow()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests with 429 once a client IP exhausts its bucket."""

    def __init__(self, app, rate: float, burst: int):
        super().__init__(app)
        self.limiter = IPRateLimiter(rate=rate, burst=burst)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ip = request.client.host if request.client else "unknown"
        if not self.limiter.allow(ip):
            logger.warning(f"Rate limit exceeded for {ip}")
            return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded"})
        return await call_next(request)


def install_middleware(app: FastAPI, rate_limit_enabled: bool, rate: float, burst: int) -> None:
    """Register rate limiting (when enabled) and security headers.

    Middleware added last runs first, so rejected requests still carry
    the security headers.
    """
    if rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware, rate=rate, burst=burst)
    app.add_middleware(SecurityHeadersMiddleware)
