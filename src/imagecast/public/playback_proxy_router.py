"""Public playback relay endpoints (viewer access)."""

from fastapi import APIRouter, Response, status

from ..api.errors import internal_error, invalid_request_error
from ..exceptions import InvalidRequestError, ProxyError
from ..media.playback_proxy_service import CORS_HEADERS, PlaybackProxyService


def build_playback_proxy_router(service: PlaybackProxyService) -> APIRouter:
    router = APIRouter(tags=["playback"])

    @router.get("/proxy-hls")
    async def proxy_hls(url: str | None = None):
        try:
            return await service.open(url)
        except InvalidRequestError as exc:
            raise invalid_request_error(str(exc), headers=CORS_HEADERS) from exc
        except ProxyError as exc:
            raise internal_error(
                f"Failed to proxy HLS stream: {exc}", headers=CORS_HEADERS
            ) from exc

    @router.options("/proxy-hls")
    async def proxy_hls_preflight() -> Response:
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=CORS_HEADERS)

    return router
