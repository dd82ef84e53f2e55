"""Abstract stream provisioner definition."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class StreamHandle:
    """Identifiers and endpoints of one provisioned stream."""

    id: str
    publish_endpoint: str
    hls_playback_url: str = ""
    webrtc_playback_url: str = ""


class StreamProvisioner(ABC):
    """Base interface for stream-management clients."""

    @abstractmethod
    async def provision(self) -> StreamHandle:
        """Create a fresh remote stream and return its handle."""
