"""Inbound event entities for practice sessions."""

from dataclasses import dataclass

from .audio import AudioFrame


class InboundEvent:
    """Base class for inbound events."""
    
    pass


@dataclass
class AudioFrameEvent(InboundEvent):
    """Event carrying one captured audio frame."""
    
    frame: AudioFrame


@dataclass
class TranscriptEvent(InboundEvent):
    """Event carrying a speech-to-text hypothesis."""
    
    text: str
    is_final: bool
    timestamp: float


@dataclass
class RecognitionErrorEvent(InboundEvent):
    """Event reporting a failure of the speech-to-text source."""
    
    message: str
