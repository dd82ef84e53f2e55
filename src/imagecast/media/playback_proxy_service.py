"""Relay remote HLS manifests and segments to viewers."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import httpx
from fastapi.responses import StreamingResponse

from ..exceptions import InvalidRequestError, ProxyError

logger = logging.getLogger(__name__)

HLS_MANIFEST_TYPE = "application/vnd.apple.mpegurl"
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@dataclass(slots=True)
class PlaybackProxyService:
    """Fetch a playback resource and stream it back as bytes arrive."""

    timeout_seconds: float = 30.0
    default_content_type: str = HLS_MANIFEST_TYPE
    transport: httpx.AsyncBaseTransport | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def open(self, remote_url: str | None) -> StreamingResponse:
        """Start relaying ``remote_url``; raises before any bytes are sent."""
        if not remote_url:
            raise InvalidRequestError("URL parameter is required")

        self.log.info("proxy.request.start", extra={"remote_url": remote_url})
        client = httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self.transport,
            follow_redirects=True,
        )
        try:
            upstream = await client.send(client.build_request("GET", remote_url), stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            await client.aclose()
            self.log.error(
                "proxy.request.failed",
                extra={"remote_url": remote_url, "error": str(exc)},
            )
            raise ProxyError(str(exc) or type(exc).__name__) from exc

        if upstream.is_error:
            await upstream.aclose()
            await client.aclose()
            self.log.error(
                "proxy.response.error",
                extra={"remote_url": remote_url, "status_code": upstream.status_code},
            )
            raise ProxyError(
                f"Upstream responded with status {upstream.status_code}",
                status_code=upstream.status_code,
            )

        headers = {
            "Content-Type": upstream.headers.get("content-type") or self.default_content_type,
            "Cache-Control": "no-cache",
            **CORS_HEADERS,
        }
        return StreamingResponse(self._relay(upstream, client, remote_url), headers=headers)

    async def _relay(
        self,
        upstream: httpx.Response,
        client: httpx.AsyncClient,
        remote_url: str,
    ) -> AsyncIterator[bytes]:
        relayed = 0
        try:
            async for chunk in upstream.aiter_bytes():
                relayed += len(chunk)
                yield chunk
        except httpx.HTTPError as exc:
            # Headers are already sent, so the stream can only be cut short.
            self.log.warning(
                "proxy.stream.interrupted",
                extra={"remote_url": remote_url, "bytes": relayed, "error": str(exc)},
            )
        finally:
            await upstream.aclose()
            await client.aclose()
            self.log.info(
                "proxy.stream.closed", extra={"remote_url": remote_url, "bytes": relayed}
            )
