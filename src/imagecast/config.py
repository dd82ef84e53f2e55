"""Application configuration builder.

Every value comes from the environment (``IMAGECAST_`` prefix). The stream
service endpoint, pipeline identifier and bearer token are mandatory: the
application refuses to start without them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Pydantic settings container for the service."""

    model_config = SettingsConfigDict(
        env_prefix="IMAGECAST_",
        populate_by_name=True,
        extra="ignore",
    )

    stream_api_url: str = Field(
        min_length=1,
        description="Stream-management endpoint used to provision new streams.",
    )
    pipeline_id: str = Field(
        min_length=1,
        description="Identifier of the pre-configured remote pipeline.",
    )
    stream_api_token: SecretStr = Field(
        description="Bearer credential for the stream-management service.",
    )
    host: str = "0.0.0.0"
    port: int = Field(
        default=3001,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "IMAGECAST_PORT", "port"),
    )
    upload_dir: Path = Field(
        default=Path("uploads"),
        description="Staging directory for uploaded images.",
    )
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)
    upload_chunk_bytes: int = Field(default=1 * 1024 * 1024, ge=1)
    retain_uploads: bool = Field(
        default=False,
        description="Keep staged images after processing instead of deleting them.",
    )
    provision_timeout_seconds: float = Field(default=30.0, gt=0)
    encoder_binary: str = "ffmpeg"
    encoder_timeout_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Upper bound on one encoder run; 0 disables the bound.",
    )
    max_parallel_encodes: int = Field(default=1, ge=1, le=16)
    proxy_timeout_seconds: float = Field(default=30.0, gt=0)
    log_level: str = "INFO"


def load_config() -> AppConfig:
    """Load configuration from environment and prepare the staging directory."""
    config = AppConfig()  # type: ignore[call-arg]
    config.upload_dir.mkdir(parents=True, exist_ok=True)
    return config
