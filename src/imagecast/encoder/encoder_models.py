"""Data structures describing encoder runs."""

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class EncoderProfile:
    """Fixed output profile for a looped still image."""

    duration_seconds: int = 10
    width: int = 1280
    height: int = 720
    video_codec: str = "libx264"
    pixel_format: str = "yuv420p"
    preset: str = "ultrafast"
    tune: str = "zerolatency"
    keyframe_interval: int = 30
    container: str = "mp4"
    movflags: str = "+faststart"

    @property
    def video_filter(self) -> str:
        """Scale into the frame keeping aspect ratio, then pad to fill it."""
        w, h = self.width, self.height
        return (
            f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
            f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2"
        )


@dataclass(slots=True, frozen=True)
class EncodeSucceeded:
    """Encoder exited with status zero."""


@dataclass(slots=True, frozen=True)
class EncodeExited:
    """Encoder exited with a non-zero status or was stopped after a timeout."""

    returncode: int | None
    diagnostics: str
    timed_out: bool = False


@dataclass(slots=True, frozen=True)
class EncodeLaunchFailed:
    """Encoder process could not be started."""

    reason: str


EncodeOutcome = EncodeSucceeded | EncodeExited | EncodeLaunchFailed
