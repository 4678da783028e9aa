"""
Unit tests for the request body size guard.
"""

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from taskhub.server.middleware import BodySizeLimitMiddleware


def _build_client(max_body_bytes):
    app = FastAPI()

    @app.post("/echo")
    async def echo(request: Request):
        body = await request.body()
        return {"size": len(body)}

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=max_body_bytes)
    return TestClient(app)


class TestBodySizeLimit:
    def setup_method(self):
        self.client = _build_client(max_body_bytes=16)

    def test_small_body_passes(self):
        response = self.client.post("/echo", content=b"x" * 16)

        assert response.status_code == 200
        assert response.json() == {"size": 16}

    def test_large_body_rejected_with_413(self):
        response = self.client.post("/echo", content=b"x" * 17)

        assert response.status_code == 413
        assert response.json() == {"success": False, "message": "Request body too large"}

    def test_streamed_body_without_length_is_counted(self):
        def chunks():
            for _ in range(4):
                yield b"x" * 8

        response = self.client.post("/echo", content=chunks())

        assert response.status_code == 413
