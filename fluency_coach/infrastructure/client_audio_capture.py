"""Capture device owned by a remote client."""

import logging

from ..domain.exceptions import DeviceUnavailable

logger = logging.getLogger(__name__)


class ClientAudioCapture:
    """AudioCapture for sessions whose microphone lives on the client.
    
    Frames are pushed over the transport, so starting and stopping only
    tracks whether the session currently owns the client's capture stream.
    Availability is reported by the client: a capture error marks the device
    unavailable and every session start states whether access is held now.
    """
    
    def __init__(self, client_id: str = "client"):
        self.client_id = client_id
        self.is_active = False
        self.available = True
    
    async def start(self) -> None:
        if not self.available:
            raise DeviceUnavailable(f"Microphone on {self.client_id} is unavailable")
        self.is_active = True
        logger.info(f"Audio capture started for {self.client_id}")
    
    async def stop(self) -> None:
        if not self.is_active:
            return
        self.is_active = False
        logger.info(f"Audio capture stopped for {self.client_id}")
    
    def mark_available(self) -> None:
        """Record that the client holds microphone access again."""
        if not self.available:
            logger.info(f"Microphone on {self.client_id} available again")
        self.available = True
    
    def mark_unavailable(self) -> None:
        """Record that the client lost or was denied microphone access."""
        self.available = False
        logger.warning(f"Microphone on {self.client_id} marked unavailable")
