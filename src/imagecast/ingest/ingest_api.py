"""HTTP routes for the upload pipeline."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Request, UploadFile, status

from ..api.errors import ApiError, internal_error, invalid_request_error
from ..exceptions import InvalidRequestError
from .ingest_errors import PayloadTooLargeError, UnsupportedMediaError, UploadReadError
from .ingest_schemas import UploadBatchResponse
from .ingest_service import IngestService

router = APIRouter(tags=["ingest"])
logger = logging.getLogger(__name__)


def get_ingest_service(request: Request) -> IngestService:
    """Fetch ingest service from application state."""
    try:
        return request.app.state.ingest_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("IngestService is not configured") from exc


@router.post(
    "/upload-images",
    response_model=UploadBatchResponse,
    response_model_exclude_none=True,
)
async def upload_images(
    images: list[UploadFile] | None = File(None),
    service: IngestService = Depends(get_ingest_service),
) -> dict[str, Any]:
    """Stream every uploaded image and report a result per file."""
    try:
        staged = await service.stage_uploads(images)
    except InvalidRequestError as exc:
        logger.warning("ingest.invalid_request", extra={"reason": str(exc)})
        raise invalid_request_error(str(exc)) from exc
    except UnsupportedMediaError as exc:
        raise ApiError(
            status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, "unsupported_media_type", str(exc)
        ) from exc
    except PayloadTooLargeError as exc:
        raise ApiError(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "payload_too_large", str(exc)
        ) from exc
    except UploadReadError as exc:
        raise invalid_request_error(f"Upload could not be read: {exc}") from exc
    except Exception as exc:
        logger.exception("ingest.stage.unexpected_error")
        raise internal_error(f"Failed to process images: {exc}") from exc

    try:
        results = await service.process_images(staged)
    except Exception as exc:
        logger.exception("ingest.batch.unexpected_error")
        raise internal_error(f"Failed to process images: {exc}") from exc

    return {"success": True, "results": [result.to_payload() for result in results]}
