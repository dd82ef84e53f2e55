"""Upload validation utilities."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import UploadFile

from .ingest_errors import PayloadTooLargeError, UnsupportedMediaError, UploadReadError
from .ingest_models import UploadValidationResult

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UploadValidator:
    """Validate uploads: image MIME types only, bounded size."""

    max_bytes: int
    chunk_size_bytes: int = 1 * 1024 * 1024

    async def validate(self, upload: UploadFile) -> UploadValidationResult:
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            logger.warning(
                "ingest.upload.unsupported_media",
                extra={"content_type": content_type, "upload_filename": upload.filename},
            )
            raise UnsupportedMediaError(
                f"Only image files are allowed (got '{content_type or 'unknown'}')"
            )

        size = 0
        try:
            while True:
                chunk = await upload.read(self.chunk_size_bytes)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_bytes:
                    logger.warning(
                        "ingest.upload.payload_too_large",
                        extra={"size_bytes": size, "limit_bytes": self.max_bytes},
                    )
                    raise PayloadTooLargeError(
                        f"File '{upload.filename}' exceeds {self.max_bytes} bytes"
                    )
        except PayloadTooLargeError:
            raise
        except Exception as exc:  # pragma: no cover - defensive branch
            await upload.close()
            logger.error("ingest.upload.read_failed", exc_info=exc)
            raise UploadReadError(str(exc)) from exc
        finally:
            if not upload.file.closed:
                await upload.seek(0)

        result = UploadValidationResult(
            content_type=content_type,
            size_bytes=size,
            filename=upload.filename or "upload",
        )
        logger.info(
            "ingest.upload.validated",
            extra={
                "upload_filename": result.filename,
                "size_bytes": result.size_bytes,
                "content_type": result.content_type,
            },
        )
        return result
