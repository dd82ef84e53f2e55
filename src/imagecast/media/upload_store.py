"""Staging storage for uploaded images."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from fastapi import UploadFile

from ..ingest.ingest_models import UploadedImage

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB
FIELD_PREFIX = "images"


@dataclass(slots=True)
class UploadStore:
    """Persists uploads under collision-free names and removes them later."""

    root: Path
    chunk_size: int = CHUNK_SIZE
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def ensure_structure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    async def persist_upload(self, upload: UploadFile) -> UploadedImage:
        """Copy upload contents into the staging directory."""
        directory = self.ensure_structure()
        filename = self.unique_filename(upload.filename)
        target = directory / filename

        with target.open("wb") as sink:
            while True:
                chunk = await upload.read(self.chunk_size)
                if not chunk:
                    break
                sink.write(chunk)
        await upload.seek(0)

        image = UploadedImage(
            storage_path=target,
            filename=filename,
            original_name=upload.filename or filename,
            mime_type=upload.content_type or "application/octet-stream",
        )
        self.log.info(
            "media.upload.staged",
            extra={
                "upload_filename": filename,
                "original_name": image.original_name,
                "path": str(target),
            },
        )
        return image

    def discard(self, image: UploadedImage) -> None:
        """Remove a staged file; missing files are ignored."""
        try:
            image.storage_path.unlink(missing_ok=True)
        except OSError as exc:
            self.log.warning(
                "media.upload.discard_failed",
                extra={"path": str(image.storage_path), "error": str(exc)},
            )
            return
        self.log.info("media.upload.discarded", extra={"path": str(image.storage_path)})

    def list_stale(self, max_age: timedelta, reference_time: datetime | None = None) -> list[Path]:
        """Return staged files last modified more than ``max_age`` ago."""
        if not self.root.exists():
            return []
        now = reference_time or datetime.now(timezone.utc)
        cutoff = (now - max_age).timestamp()
        return sorted(
            path
            for path in self.root.iterdir()
            if path.is_file() and path.stat().st_mtime < cutoff
        )

    def purge_stale(self, max_age: timedelta, reference_time: datetime | None = None) -> int:
        """Delete stale staged files and return how many were removed."""
        removed = 0
        for path in self.list_stale(max_age, reference_time):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                self.log.warning(
                    "media.upload.purge_failed", extra={"path": str(path), "error": str(exc)}
                )
                continue
            removed += 1
            self.log.info("media.upload.purged", extra={"path": str(path)})
        return removed

    @staticmethod
    def unique_filename(original: str | None) -> str:
        """Build ``images-<epoch ms>-<random><ext>`` for an upload."""
        suffix = Path(original).suffix.lower() if original else ""
        stamp = int(time.time() * 1000)
        nonce = random.randint(0, 10**9)
        return f"{FIELD_PREFIX}-{stamp}-{nonce}{suffix}"
