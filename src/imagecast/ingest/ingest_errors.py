"""Intake-specific exceptions raised while validating uploads."""

from ..exceptions import AppError


class IngestError(AppError):
    """Base class for intake-related errors."""


class UnsupportedMediaError(IngestError):
    """Raised when an upload is not an image."""


class PayloadTooLargeError(IngestError):
    """Raised when an uploaded file exceeds the configured limit."""


class UploadReadError(IngestError):
    """Raised when streaming the upload fails."""
