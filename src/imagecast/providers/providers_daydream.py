"""Daydream stream-management client."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..exceptions import ProvisioningError
from .providers_base import StreamHandle, StreamProvisioner

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DaydreamProvisioner(StreamProvisioner):
    """Create one Daydream stream per call via ``POST /v1/streams``."""

    api_url: str
    pipeline_id: str
    api_token: str = field(repr=False)
    timeout_seconds: float = 30.0
    transport: httpx.AsyncBaseTransport | None = None
    log: logging.Logger = field(default_factory=lambda: logger)

    async def provision(self) -> StreamHandle:
        headers = {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }
        body = {"pipeline_id": self.pipeline_id}
        self.log.info(
            "provision.request.start",
            extra={"pipeline_id": self.pipeline_id, "url": self.api_url},
        )
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(self.api_url, headers=headers, json=body)
        except httpx.HTTPError as exc:
            self.log.error(
                "provision.request.transport_error",
                extra={"pipeline_id": self.pipeline_id, "error": str(exc)},
            )
            raise ProvisioningError(f"Stream service request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            payload = _error_payload(response)
            self.log.error(
                "provision.response.error status=%s payload=%s",
                response.status_code,
                payload,
                extra={
                    "pipeline_id": self.pipeline_id,
                    "status_code": response.status_code,
                },
            )
            raise ProvisioningError(
                f"Stream service responded with status {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProvisioningError(
                "Stream service returned a non-JSON body",
                status_code=response.status_code,
                payload=response.text[:500],
            ) from exc
        if not isinstance(data, dict):
            raise ProvisioningError(
                "Stream service returned an unexpected body",
                status_code=response.status_code,
                payload=data,
            )

        handle = _handle_from_body(data)
        self.log.info(
            "provision.request.success",
            extra={"pipeline_id": self.pipeline_id, "stream_id": handle.id},
        )
        return handle


def _handle_from_body(data: dict[str, Any]) -> StreamHandle:
    return StreamHandle(
        id=str(data.get("id") or ""),
        publish_endpoint=str(data.get("whip_url") or ""),
        hls_playback_url=str(data.get("hls_url") or ""),
        webrtc_playback_url=str(data.get("webrtc_url") or ""),
    )


def _error_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500]
