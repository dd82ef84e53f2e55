"""Stream-management service clients."""

from .providers_base import StreamHandle, StreamProvisioner
from .providers_daydream import DaydreamProvisioner

__all__ = ["DaydreamProvisioner", "StreamHandle", "StreamProvisioner"]
