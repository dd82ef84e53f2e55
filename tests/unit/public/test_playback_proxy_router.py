from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from imagecast.api.errors import ApiError, api_error_handler
from imagecast.exceptions import InvalidRequestError, ProxyError
from imagecast.media.playback_proxy_service import PlaybackProxyService
from imagecast.public.playback_proxy_router import build_playback_proxy_router

UPSTREAM = "https://cdn.daydream.test/str_1/index.m3u8"


def build_client(handler: Callable[[httpx.Request], httpx.Response]) -> TestClient:
    service = PlaybackProxyService(transport=httpx.MockTransport(handler))
    app = FastAPI()
    app.add_exception_handler(ApiError, api_error_handler)
    app.include_router(build_playback_proxy_router(service))
    return TestClient(app)


def test_proxy_relays_body_and_content_type() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, headers={"content-type": "text/plain"}, content=b"ABC")

    client = build_client(handler)

    response = client.get("/proxy-hls", params={"url": UPSTREAM})

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/plain"
    assert response.content == b"ABC"
    assert seen == [UPSTREAM]


def test_proxy_sets_cors_and_cache_headers() -> None:
    client = build_client(
        lambda request: httpx.Response(
            200,
            headers={"content-type": "video/mp2t"},
            content=b"\x47" * 188,
        )
    )

    response = client.get("/proxy-hls", params={"url": UPSTREAM})

    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"
    assert response.headers["cache-control"] == "no-cache"
    assert response.content == b"\x47" * 188


def test_proxy_defaults_to_hls_manifest_type() -> None:
    client = build_client(lambda request: httpx.Response(200, content=b"#EXTM3U\n"))

    response = client.get("/proxy-hls", params={"url": UPSTREAM})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/vnd.apple.mpegurl"


def test_proxy_streams_chunked_upstream() -> None:
    async def chunks():
        for part in (b"#EXTM3U\n", b"#EXT-X-VERSION:3\n", b"seg0.ts\n"):
            yield part

    client = build_client(
        lambda request: httpx.Response(
            200,
            headers={"content-type": "application/vnd.apple.mpegurl"},
            content=chunks(),
        )
    )

    response = client.get("/proxy-hls", params={"url": UPSTREAM})

    assert response.content == b"#EXTM3U\n#EXT-X-VERSION:3\nseg0.ts\n"


def test_proxy_without_url_returns_400() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    client = build_client(handler)

    response = client.get("/proxy-hls")

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "URL parameter is required"
    assert calls == []


def test_proxy_upstream_error_status_returns_500() -> None:
    client = build_client(lambda request: httpx.Response(404, content=b"gone"))

    response = client.get("/proxy-hls", params={"url": UPSTREAM})

    assert response.status_code == 500
    message = response.json()["error"]["message"]
    assert message.startswith("Failed to proxy HLS stream:")
    assert "404" in message


def test_proxy_connection_error_returns_500() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = build_client(handler)

    response = client.get("/proxy-hls", params={"url": UPSTREAM})

    assert response.status_code == 500
    assert "connection refused" in response.json()["error"]["message"]


def test_proxy_timeout_returns_500() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = build_client(handler)

    response = client.get("/proxy-hls", params={"url": UPSTREAM})

    assert response.status_code == 500
    assert "timed out" in response.json()["error"]["message"]


def test_proxy_preflight() -> None:
    client = build_client(lambda request: httpx.Response(200))

    response = client.options("/proxy-hls")

    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_service_rejects_missing_url_before_fetch() -> None:
    service = PlaybackProxyService()

    with pytest.raises(InvalidRequestError):
        await service.open("")


@pytest.mark.asyncio
async def test_service_rejects_invalid_url() -> None:
    service = PlaybackProxyService()

    with pytest.raises(ProxyError):
        await service.open("not a url")


@pytest.mark.asyncio
async def test_service_closes_upstream_after_relay() -> None:
    closed: list[bool] = []

    class TrackingStream(httpx.AsyncByteStream):
        async def __aiter__(self):
            yield b"ABC"

        async def aclose(self) -> None:
            closed.append(True)

    service = PlaybackProxyService(
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, stream=TrackingStream())
        )
    )

    response = await service.open(UPSTREAM)
    body = b"".join([chunk async for chunk in response.body_iterator])

    assert body == b"ABC"
    assert closed == [True]
