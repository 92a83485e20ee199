"""Tests for app.core.middleware -- rate limiting and security headers."""
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.core.middleware import IPRateLimiter, TokenBucket, install_middleware


def build_app(rate_limit_enabled=True, rate=1.0, burst=2) -> FastAPI:
    app = FastAPI()
    install_middleware(app, rate_limit_enabled=rate_limit_enabled, rate=rate, burst=burst)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return app


class TestTokenBucket:

    def test_burst_then_reject(self):
        with patch("app.core.middleware.time.monotonic", return_value=100.0):
            bucket = TokenBucket(rate=1.0, capacity=3)
            assert [bucket.allow() for _ in range(4)] == [True, True, True, False]

    def test_refills_over_time(self):
        with patch("app.core.middleware.time.monotonic") as clock:
            clock.return_value = 100.0
            bucket = TokenBucket(rate=2.0, capacity=1)
            assert bucket.allow() is True
            assert bucket.allow() is False

            clock.return_value = 100.5
            assert bucket.allow() is True

    def test_never_exceeds_capacity(self):
        with patch("app.core.middleware.time.monotonic") as clock:
            clock.return_value = 0.0
            bucket = TokenBucket(rate=10.0, capacity=2)
            clock.return_value = 1000.0
            assert [bucket.allow() for _ in range(3)] == [True, True, False]


class TestIPRateLimiter:

    def test_clients_are_independent(self):
        with patch("app.core.middleware.time.monotonic", return_value=5.0):
            limiter = IPRateLimiter(rate=1.0, burst=1)
            assert limiter.allow("10.0.0.1") is True
            assert limiter.allow("10.0.0.1") is False
            assert limiter.allow("10.0.0.2") is True

    def test_idle_buckets_evicted(self):
        with patch("app.core.middleware.time.monotonic") as clock:
            clock.return_value = 0.0
            limiter = IPRateLimiter(rate=1.0, burst=2, sweep_interval=60.0)
            limiter.allow("10.0.0.1")

            clock.return_value = 50.0
            limiter.allow("10.0.0.2")
            assert len(limiter) == 2

            clock.return_value = 61.0
            limiter.allow("10.0.0.3")
            assert len(limiter) == 2
            assert "10.0.0.1" not in limiter._buckets

    def test_drained_bucket_survives_sweep(self):
        with patch("app.core.middleware.time.monotonic") as clock:
            clock.return_value = 0.0
            limiter = IPRateLimiter(rate=0.01, burst=1, sweep_interval=60.0)
            assert limiter.allow("10.0.0.1") is True
            assert limiter.allow("10.0.0.1") is False

            clock.return_value = 61.0
            assert limiter.allow("10.0.0.1") is False
            assert len(limiter) == 1


class TestMiddlewareStack:

    async def test_rate_limit_returns_429(self):
        app = build_app(rate=0.001, burst=2)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            codes = [(await c.get("/ping")).status_code for _ in range(3)]
            rejected = await c.get("/ping")

        assert codes == [200, 200, 429]
        assert rejected.json() == {"detail": "Rate limit exceeded"}
        assert rejected.headers["X-Frame-Options"] == "DENY"

    async def test_disabled_rate_limit(self):
        app = build_app(rate_limit_enabled=False, rate=0.001, burst=1)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            codes = [(await c.get("/ping")).status_code for _ in range(5)]

        assert codes == [200] * 5

    async def test_security_headers(self):
        app = build_app()
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            response = await c.get("/ping")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-XSS-Protection"] == "1; mode=block"
        assert response.headers["Strict-Transport-Security"].startswith("max-age=")


class TestApplicationStack:

    async def test_rate_limited_response_has_cors_headers(self, monkeypatch):
        from app.main import create_application, settings

        monkeypatch.setattr(settings, "rate_limit_enabled", True)
        monkeypatch.setattr(settings, "rate_limit_per_second", 0.001)
        monkeypatch.setattr(settings, "rate_limit_burst", 1)
        app = create_application()

        origin = {"Origin": "http://localhost:5173"}
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
            first = await c.get("/openapi.json", headers=origin)
            limited = await c.get("/openapi.json", headers=origin)

        assert first.status_code == 200
        assert limited.status_code == 429
        assert limited.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
        assert limited.headers["X-Content-Type-Options"] == "nosniff"
