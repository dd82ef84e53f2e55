"""Push a looped still image to a publish endpoint with ffmpeg."""

from __future__ import annotations

import asyncio
import contextlib
import os
import signal
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from ..exceptions import EncodingError
from .encoder_models import (
    EncodeExited,
    EncodeLaunchFailed,
    EncodeOutcome,
    EncoderProfile,
    EncodeSucceeded,
)

logger = structlog.get_logger(__name__)

READ_CHUNK_BYTES = 4096
MESSAGE_DIAGNOSTIC_CHARS = 2000
EXIT_POLL_SECONDS = 0.05


class _DiagnosticBuffer:
    """Byte buffer that keeps only the most recent ``limit`` bytes."""

    def __init__(self, limit: int) -> None:
        self._limit = max(1, limit)
        self._data = bytearray()

    def append(self, chunk: bytes) -> None:
        self._data.extend(chunk)
        overflow = len(self._data) - self._limit
        if overflow > 0:
            del self._data[:overflow]

    def text(self) -> str:
        return self._data.decode("utf-8", errors="replace")


@dataclass(slots=True)
class FfmpegPusher:
    """Run ffmpeg once per image and stream its output to the endpoint."""

    binary: str = "ffmpeg"
    profile: EncoderProfile = field(default_factory=EncoderProfile)
    timeout_seconds: float | None = 60.0
    kill_grace_seconds: float = 5.0
    max_diagnostic_bytes: int = 64 * 1024
    log: Any = field(default_factory=lambda: logger)

    def build_args(self, image_path: Path | str, publish_endpoint: str) -> list[str]:
        profile = self.profile
        return [
            "-loop", "1",
            "-i", str(image_path),
            "-t", str(profile.duration_seconds),
            "-vf", profile.video_filter,
            "-c:v", profile.video_codec,
            "-pix_fmt", profile.pixel_format,
            "-preset", profile.preset,
            "-tune", profile.tune,
            "-g", str(profile.keyframe_interval),
            "-keyint_min", str(profile.keyframe_interval),
            "-f", profile.container,
            "-movflags", profile.movflags,
            publish_endpoint,
        ]

    async def push(self, image_path: Path | str, publish_endpoint: str) -> None:
        """Encode and deliver one image, raising :class:`EncodingError` on failure."""
        outcome = await self.run(image_path, publish_endpoint)
        if isinstance(outcome, EncodeSucceeded):
            return
        if isinstance(outcome, EncodeLaunchFailed):
            raise EncodingError(f"Failed to start encoder: {outcome.reason}")

        tail = outcome.diagnostics[-MESSAGE_DIAGNOSTIC_CHARS:]
        if outcome.timed_out:
            message = f"FFmpeg timed out after {self.timeout_seconds:g}s: {tail}"
        else:
            message = f"FFmpeg failed with code {outcome.returncode}: {tail}"
        raise EncodingError(
            message,
            returncode=outcome.returncode,
            diagnostics=outcome.diagnostics,
            timed_out=outcome.timed_out,
        )

    async def run(self, image_path: Path | str, publish_endpoint: str) -> EncodeOutcome:
        """Run the encoder to completion and report exactly one outcome.

        stdout and stderr are drained by separate tasks while the process
        runs so a chatty encoder never blocks on a full pipe. The encoder
        runs in its own process group, and the whole group is terminated
        when the timeout expires or the caller is cancelled. Readers get
        ``kill_grace_seconds`` to finish after exit; pipes still held open
        by leftover descendants are abandoned and the group is killed.
        """
        args = self.build_args(image_path, publish_endpoint)
        log = self.log.bind(image=str(image_path), binary=self.binary)
        log.info("encoder.start", args=args)

        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as exc:
            log.error("encoder.launch_failed", error=str(exc))
            return EncodeLaunchFailed(reason=str(exc))

        diagnostics = _DiagnosticBuffer(self.max_diagnostic_bytes)
        readers = [
            asyncio.create_task(self._drain(process.stderr, "stderr", log, diagnostics)),
            asyncio.create_task(self._drain(process.stdout, "stdout", log)),
        ]
        timed_out = False
        try:
            try:
                await asyncio.wait_for(_wait_exit(process), timeout=self.timeout_seconds or None)
            except asyncio.TimeoutError:
                timed_out = True
                log.warning("encoder.timeout", timeout_seconds=self.timeout_seconds)
                await self._stop(process)
        except asyncio.CancelledError:
            log.warning("encoder.cancelled", pid=process.pid)
            await self._stop(process)
            raise
        finally:
            await self._collect_readers(process, readers, log)

        returncode = process.returncode
        if returncode == 0 and not timed_out:
            log.info("encoder.completed")
            return EncodeSucceeded()

        text = diagnostics.text()
        log.error(
            "encoder.failed",
            returncode=returncode,
            timed_out=timed_out,
            diagnostics=text[-MESSAGE_DIAGNOSTIC_CHARS:],
        )
        return EncodeExited(returncode=returncode, diagnostics=text, timed_out=timed_out)

    async def _drain(
        self,
        stream: asyncio.StreamReader | None,
        channel: str,
        log: Any,
        sink: _DiagnosticBuffer | None = None,
    ) -> None:
        if stream is None:
            return
        while True:
            chunk = await stream.read(READ_CHUNK_BYTES)
            if not chunk:
                break
            if sink is not None:
                sink.append(chunk)
            log.debug(
                "encoder.output",
                channel=channel,
                text=chunk.decode("utf-8", errors="replace").rstrip(),
            )

    async def _collect_readers(
        self,
        process: asyncio.subprocess.Process,
        readers: list[asyncio.Task[None]],
        log: Any,
    ) -> None:
        done, pending = await asyncio.wait(readers, timeout=self.kill_grace_seconds)
        if pending:
            log.warning("encoder.readers_abandoned", pending=len(pending), pid=process.pid)
            _signal_group(process, signal.SIGKILL)
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            error = task.exception()
            if error is not None:
                log.warning("encoder.reader_failed", error=str(error))

    async def _stop(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        _signal_group(process, signal.SIGTERM)
        try:
            await asyncio.wait_for(_wait_exit(process), timeout=self.kill_grace_seconds)
        except asyncio.TimeoutError:
            _signal_group(process, signal.SIGKILL)
            await _wait_exit(process)


def _signal_group(process: asyncio.subprocess.Process, signum: int) -> None:
    # The encoder leads its own session, so its pid is also the group id.
    with contextlib.suppress(ProcessLookupError):
        os.killpg(process.pid, signum)


async def _wait_exit(process: asyncio.subprocess.Process) -> int:
    """Return once the encoder itself has exited.

    ``Process.wait()`` also waits for the output pipes to close, which never
    happens while a leftover descendant still holds them.
    """
    while process.returncode is None:
        await asyncio.sleep(EXIT_POLL_SECONDS)
    return process.returncode
