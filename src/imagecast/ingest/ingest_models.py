"""Data structures for the upload pipeline."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class UploadedImage:
    """One staged upload, read-only for the pipeline."""

    storage_path: Path
    filename: str
    original_name: str
    mime_type: str


@dataclass(slots=True)
class UploadValidationResult:
    """Outcome of validating an uploaded image."""

    content_type: str
    size_bytes: int
    filename: str


@dataclass(slots=True, frozen=True)
class ImageSucceeded:
    """Image was streamed; carries the viewer URLs."""

    filename: str
    original_name: str
    hls_url: str
    webrtc_url: str
    stream_id: str

    def to_payload(self) -> dict[str, str]:
        return {
            "filename": self.filename,
            "originalName": self.original_name,
            "hls_url": self.hls_url,
            "webrtc_url": self.webrtc_url,
            "stream_id": self.stream_id,
        }


@dataclass(slots=True, frozen=True)
class ImageFailed:
    """Image could not be streamed."""

    filename: str
    original_name: str
    error: str

    def to_payload(self) -> dict[str, str]:
        return {
            "filename": self.filename,
            "originalName": self.original_name,
            "error": self.error,
        }


ProcessingResult = ImageSucceeded | ImageFailed
