"""Audio capture device interface."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AudioCapture(Protocol):
    """Protocol for the live capture device feeding a session.
    
    The device is singly owned by the active session. Implementations must
    not retry acquisition on their own.
    """
    
    async def start(self) -> None:
        """Begin capturing audio.
        
        Raises:
            DeviceUnavailable: If the device cannot be acquired.
        """
        ...
    
    async def stop(self) -> None:
        """Stop capturing audio. Calling it when already stopped is a no-op."""
        ...
