"""
Unit tests for the fixed-window rate limiter.
"""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskhub.server.middleware import RateLimitMiddleware


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _build_client(clock, max_requests=2):
    app = FastAPI()

    @app.get("/api/items")
    async def items():
        return {"ok": True}

    @app.get("/api/health")
    async def health():
        return {"ok": True}

    @app.get("/public")
    async def public():
        return {"ok": True}

    app.add_middleware(
        RateLimitMiddleware,
        window_ms=60_000,
        max_requests=max_requests,
        clock=clock,
    )
    return TestClient(app)


class TestRateLimitMiddleware:
    def setup_method(self):
        self.clock = FakeClock()
        self.client = _build_client(self.clock)

    def test_requests_over_the_limit_get_429(self):
        assert self.client.get("/api/items").status_code == 200
        second = self.client.get("/api/items")
        assert second.status_code == 200
        assert second.headers["RateLimit-Remaining"] == "0"

        response = self.client.get("/api/items")

        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "message": "Too many requests, please try again later",
        }
        assert response.headers["Retry-After"] == "60"

    def test_window_resets(self):
        for _ in range(3):
            self.client.get("/api/items")
        self.clock.now += 61

        assert self.client.get("/api/items").status_code == 200

    def test_health_and_non_api_paths_are_not_limited(self):
        for _ in range(5):
            assert self.client.get("/api/health").status_code == 200
            assert self.client.get("/public").status_code == 200
        assert "RateLimit-Limit" not in self.client.get("/public").headers
