"""
Header Injection Integration Tests

Runs FastAPI applications with the middleware installed through httpx and the
FastAPI test client.
"""

import pytest
from fastapi import Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from missing_headers.config import HeadersConfig
from missing_headers.main import create_app


def build_app(**config):
    app = create_app(HeadersConfig(**config))

    @app.get("/echo")
    async def echo(request: Request):
        return {
            "headers": dict(request.headers),
            "intercepted": hasattr(request.state, "response_interceptor"),
        }

    @app.get("/status/{code}")
    async def status(code: int):
        return PlainTextResponse("test response", status_code=code)

    @app.get("/own-headers")
    async def own_headers():
        return JSONResponse({"ok": True}, headers={"X-B": "handler", "X-Empty": ""})

    @app.get("/stream")
    async def stream():
        async def gen():
            for chunk in (b"data: one\n\n", b"data: two\n\n", b"data: three\n\n"):
                yield chunk

        return StreamingResponse(gen(), media_type="text/event-stream")

    @app.get("/flush")
    async def flush(request: Request):
        await request.state.response_interceptor.flush()
        return Response(content=b"flushed")

    @app.get("/hijack")
    async def hijack(request: Request):
        await request.state.response_interceptor.hijack()
        return Response(content=b"unreachable")

    return app


@pytest.mark.asyncio
async def test_request_empty_header_kept_in_strict_mode():
    app = build_app(request_headers={"X-A": "1"}, strict_header_check=True)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/echo", headers={"X-A": ""})

    assert resp.status_code == 200
    assert resp.json()["headers"]["x-a"] == ""


@pytest.mark.asyncio
async def test_request_empty_header_filled_in_loose_mode():
    app = build_app(request_headers={"X-A": "1"}, strict_header_check=False)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/echo", headers={"X-A": ""})

    assert resp.json()["headers"]["x-a"] == "1"


@pytest.mark.asyncio
async def test_request_missing_header_added():
    app = build_app(request_headers={"X-Custom-Header": "custom-value"})

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/echo")

    assert resp.json()["headers"]["x-custom-header"] == "custom-value"


@pytest.mark.asyncio
async def test_bypass_skips_request_and_response_headers():
    app = build_app(
        request_headers={"X-A": "1"},
        response_headers={"X-B": "v"},
        bypass_headers={"X-Skip": ""},
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/echo", headers={"X-Skip": "anything"})

    body = resp.json()
    assert "x-a" not in body["headers"]
    assert body["intercepted"] is False
    assert "x-b" not in resp.headers


@pytest.mark.asyncio
async def test_no_response_headers_no_interceptor():
    app = build_app(request_headers={"X-A": "1"})

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/echo")

    assert resp.json()["intercepted"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [201, 202, 404, 500])
async def test_explicit_status_preserved(code):
    app = build_app(response_headers={"X-B": "v"})

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get(f"/status/{code}")

    assert resp.status_code == code
    assert resp.headers["x-b"] == "v"
    assert resp.text == "test response"


def test_handler_headers_not_overwritten_strict():
    app = build_app(response_headers={"X-B": "v", "X-Empty": "default"})
    client = TestClient(app)

    resp = client.get("/own-headers")

    assert resp.headers["x-b"] == "handler"
    assert resp.headers["x-empty"] == ""


def test_handler_empty_header_filled_loose():
    app = build_app(
        response_headers={"X-B": "v", "X-Empty": "default"}, strict_header_check=False
    )
    client = TestClient(app)

    resp = client.get("/own-headers")

    assert resp.headers["x-b"] == "handler"
    assert resp.headers["x-empty"] == "default"


@pytest.mark.asyncio
@pytest.mark.parametrize("disable_explicit_flush", [False, True])
async def test_streaming_response(disable_explicit_flush):
    app = build_app(
        response_headers={"X-Accel-Buffering": "no"},
        disable_explicit_flush=disable_explicit_flush,
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.get("/stream")

    assert resp.status_code == 200
    assert resp.headers["x-accel-buffering"] == "no"
    assert resp.headers["content-type"].startswith("text/event-stream")
    assert resp.content == b"data: one\n\ndata: two\n\ndata: three\n\n"


def test_explicit_flush():
    app = build_app(response_headers={"X-B": "v"}, disable_explicit_flush=True)
    client = TestClient(app)

    resp = client.get("/flush")

    assert resp.status_code == 200
    assert resp.content == b"flushed"
    assert resp.headers["x-b"] == "v"


def test_hijack_unsupported_surfaces_error():
    app = build_app(response_headers={"X-B": "v"})
    client = TestClient(app)

    resp = client.get("/hijack")

    assert resp.status_code == 501
    assert resp.json()["error"]["code"] == "capability_unsupported"
    assert resp.headers["x-b"] == "v"


def test_health_check():
    app = build_app(response_headers={"X-B": "v"})
    client = TestClient(app)

    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}
    assert resp.headers["x-b"] == "v"
