"""Domain level exceptions shared by the streaming pipeline."""

from __future__ import annotations

from typing import Any

__all__ = [
    "AppError",
    "InvalidRequestError",
    "ProvisioningError",
    "EncodingError",
    "ProxyError",
]


class AppError(Exception):
    """Base class for application specific errors."""


class InvalidRequestError(AppError):
    """Raised when a request is rejected before any processing starts."""


class ProvisioningError(AppError):
    """Raised when the stream-management service cannot supply a stream.

    ``payload`` keeps whatever the upstream returned (decoded JSON or raw
    text) so the failure can be diagnosed from logs.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class EncodingError(AppError):
    """Raised when the encoder cannot be started or exits unsuccessfully."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        diagnostics: str = "",
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.diagnostics = diagnostics
        self.timed_out = timed_out


class ProxyError(AppError):
    """Raised when a playback resource cannot be fetched from upstream."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
