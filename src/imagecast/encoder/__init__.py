"""ffmpeg-based still-image stream pusher."""

from .encoder_models import (
    EncodeExited,
    EncodeLaunchFailed,
    EncodeOutcome,
    EncodeSucceeded,
    EncoderProfile,
)
from .ffmpeg_pusher import FfmpegPusher

__all__ = [
    "EncodeExited",
    "EncodeLaunchFailed",
    "EncodeOutcome",
    "EncodeSucceeded",
    "EncoderProfile",
    "FfmpegPusher",
]
