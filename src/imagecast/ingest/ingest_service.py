"""Domain service coordinating the per-image streaming pipeline."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol
from urllib.parse import quote

from fastapi import UploadFile

from ..exceptions import AppError, InvalidRequestError, ProvisioningError
from ..media.upload_store import UploadStore
from ..providers.providers_base import StreamHandle, StreamProvisioner
from .ingest_models import ImageFailed, ImageSucceeded, ProcessingResult, UploadedImage
from .validation import UploadValidator

logger = logging.getLogger(__name__)

PROXY_PATH = "/proxy-hls"


class StreamPusher(Protocol):
    async def push(self, image_path: Path | str, publish_endpoint: str) -> None: ...


@dataclass(slots=True)
class IngestService:
    """Stage uploads, then provision and push one stream per image."""

    provisioner: StreamProvisioner
    pusher: StreamPusher
    validator: UploadValidator
    upload_store: UploadStore
    retain_uploads: bool = False
    max_parallel_encodes: int = 1
    proxy_path: str = PROXY_PATH
    log: logging.Logger = field(default_factory=lambda: logger)

    async def stage_uploads(self, uploads: Sequence[UploadFile] | None) -> list[UploadedImage]:
        """Validate every upload, then copy them into the staging area.

        Nothing is staged unless all uploads pass validation. If staging
        fails midway the files written so far are removed.
        """
        if not uploads:
            raise InvalidRequestError("No images uploaded")

        checked = [await self.validator.validate(upload) for upload in uploads]
        self.log.info(
            "ingest.stage.validated",
            extra={
                "image_count": len(checked),
                "total_bytes": sum(item.size_bytes for item in checked),
            },
        )

        staged: list[UploadedImage] = []
        try:
            for upload in uploads:
                staged.append(await self.upload_store.persist_upload(upload))
        except Exception:
            for image in staged:
                self.upload_store.discard(image)
            raise
        return staged

    async def process_images(self, images: Sequence[UploadedImage]) -> list[ProcessingResult]:
        """Return one result per image, in input order."""
        if images is None:
            raise InvalidRequestError("Image collection is missing")

        self.log.info(
            "ingest.batch.start",
            extra={"image_count": len(images), "parallelism": self.max_parallel_encodes},
        )
        if self.max_parallel_encodes <= 1:
            results = [await self.process_image(image) for image in images]
        else:
            semaphore = asyncio.Semaphore(self.max_parallel_encodes)

            async def _bounded(image: UploadedImage) -> ProcessingResult:
                async with semaphore:
                    return await self.process_image(image)

            results = list(await asyncio.gather(*(_bounded(image) for image in images)))

        failed = sum(1 for result in results if isinstance(result, ImageFailed))
        self.log.info(
            "ingest.batch.done",
            extra={"image_count": len(results), "failed_count": failed},
        )
        return results

    async def process_image(self, image: UploadedImage) -> ProcessingResult:
        """Provision a stream and push one image; failures become results."""
        self.log.info(
            "ingest.image.start",
            extra={"upload_filename": image.filename, "original_name": image.original_name},
        )
        result: ProcessingResult
        try:
            handle = await self.provisioner.provision()
            if not handle.publish_endpoint:
                raise ProvisioningError("missing publish endpoint", payload=handle)
            await self.pusher.push(image.storage_path, handle.publish_endpoint)
        except AppError as exc:
            self.log.warning(
                "ingest.image.failed",
                extra={
                    "upload_filename": image.filename,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            result = ImageFailed(
                filename=image.filename,
                original_name=image.original_name,
                error=str(exc),
            )
        except Exception as exc:
            self.log.exception(
                "ingest.image.unexpected_error", extra={"upload_filename": image.filename}
            )
            result = ImageFailed(
                filename=image.filename,
                original_name=image.original_name,
                error=str(exc) or type(exc).__name__,
            )
        else:
            result = self._success(image, handle)
            self.log.info(
                "ingest.image.completed",
                extra={"upload_filename": image.filename, "stream_id": handle.id},
            )
        finally:
            if not self.retain_uploads:
                self.upload_store.discard(image)
        return result

    def playback_link(self, hls_playback_url: str) -> str:
        """Route HLS playback through the local relay."""
        return f"{self.proxy_path}?url={quote(hls_playback_url, safe='')}"

    def _success(self, image: UploadedImage, handle: StreamHandle) -> ImageSucceeded:
        return ImageSucceeded(
            filename=image.filename,
            original_name=image.original_name,
            hls_url=self.playback_link(handle.hls_playback_url),
            webrtc_url=handle.webrtc_playback_url,
            stream_id=handle.id,
        )
