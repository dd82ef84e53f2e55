"""Dependency wiring helpers."""

from fastapi import FastAPI

from .config import AppConfig
from .encoder.ffmpeg_pusher import FfmpegPusher
from .health.health_api import router as health_router
from .ingest.ingest_api import router as ingest_router
from .ingest.ingest_service import IngestService
from .ingest.validation import UploadValidator
from .media.playback_proxy_service import PlaybackProxyService
from .media.upload_store import UploadStore
from .providers.providers_daydream import DaydreamProvisioner
from .public.playback_proxy_router import build_playback_proxy_router


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach services."""
    provisioner = DaydreamProvisioner(
        api_url=config.stream_api_url,
        pipeline_id=config.pipeline_id,
        api_token=config.stream_api_token.get_secret_value(),
        timeout_seconds=config.provision_timeout_seconds,
    )
    pusher = FfmpegPusher(
        binary=config.encoder_binary,
        timeout_seconds=config.encoder_timeout_seconds or None,
    )
    upload_store = UploadStore(root=config.upload_dir, chunk_size=config.upload_chunk_bytes)
    validator = UploadValidator(
        max_bytes=config.max_upload_bytes,
        chunk_size_bytes=config.upload_chunk_bytes,
    )
    ingest_service = IngestService(
        provisioner=provisioner,
        pusher=pusher,
        validator=validator,
        upload_store=upload_store,
        retain_uploads=config.retain_uploads,
        max_parallel_encodes=config.max_parallel_encodes,
    )
    proxy_service = PlaybackProxyService(timeout_seconds=config.proxy_timeout_seconds)

    app.state.config = config
    app.state.ingest_service = ingest_service
    app.state.proxy_service = proxy_service

    app.include_router(health_router)
    app.include_router(ingest_router)
    app.include_router(build_playback_proxy_router(proxy_service))
