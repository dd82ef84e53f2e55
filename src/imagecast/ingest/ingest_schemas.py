"""Pydantic schemas for upload responses."""

from pydantic import BaseModel, ConfigDict, Field


class ImageResultSchema(BaseModel):
    """Per-image entry; either the stream URLs or ``error`` is present."""

    model_config = ConfigDict(populate_by_name=True)

    filename: str
    original_name: str = Field(alias="originalName")
    hls_url: str | None = None
    webrtc_url: str | None = None
    stream_id: str | None = None
    error: str | None = None


class UploadBatchResponse(BaseModel):
    success: bool
    results: list[ImageResultSchema]
