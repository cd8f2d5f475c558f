"""Unit tests for BodySizeLimitMiddleware."""

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.testclient import TestClient

from accounts.middleware.body_limit import BodySizeLimitMiddleware


async def echo_length(scope, receive, send):
    """Bare ASGI app that reads the whole body and returns its length."""
    request = Request(scope, receive)
    body = await request.body()
    response = PlainTextResponse(str(len(body)))
    await response(scope, receive, send)


@pytest.fixture
def client():
    app = BodySizeLimitMiddleware(echo_length, max_json_bytes=64, max_multipart_bytes=256)
    return TestClient(app)


def stream(total, chunk_size=16):
    sent = 0
    while sent < total:
        size = min(chunk_size, total - sent)
        sent += size
        yield b"x" * size


class TestDeclaredLength:
    def test_body_under_limit_passes(self, client):
        response = client.post("/", content=b"x" * 64, headers={"Content-Type": "application/json"})

        assert response.status_code == 200
        assert response.text == "64"

    def test_declared_length_over_limit(self, client):
        response = client.post("/", content=b"x" * 65, headers={"Content-Type": "application/json"})

        assert response.status_code == 413
        assert response.json()["error"]["details"] == {"maxBytes": 64}

    def test_multipart_uses_larger_limit(self, client):
        response = client.post(
            "/",
            content=b"x" * 200,
            headers={"Content-Type": "multipart/form-data; boundary=abc"},
        )

        assert response.status_code == 200

    def test_invalid_content_length(self, client):
        response = client.post(
            "/",
            content=b"{}",
            headers={"Content-Type": "application/json", "Content-Length": "lots"},
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"


class TestStreamedBody:
    def test_chunked_body_under_limit_passes(self, client):
        response = client.post("/", content=stream(60), headers={"Content-Type": "application/json"})

        assert response.status_code == 200
        assert response.text == "60"

    def test_chunked_body_over_limit(self, client):
        response = client.post("/", content=stream(1000), headers={"Content-Type": "application/json"})

        assert response.status_code == 413
        assert response.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"

    def test_chunked_multipart_over_limit(self, client):
        response = client.post(
            "/",
            content=stream(300),
            headers={"Content-Type": "multipart/form-data; boundary=abc"},
        )

        assert response.status_code == 413
        assert response.json()["error"]["details"] == {"maxBytes": 256}
