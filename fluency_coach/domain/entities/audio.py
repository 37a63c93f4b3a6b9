"""Audio-related entities."""

from typing import Sequence
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class AudioFrame:
    """Container for one frame of frequency-bin magnitudes with metadata."""
    
    def __init__(self, magnitudes: Sequence[float], sample_rate: int, timestamp: float):
        self.magnitudes = magnitudes
        self.sample_rate = sample_rate
        self.timestamp = timestamp
        self.frame_id = str(uuid4())


class AudioFeatures(BaseModel):
    """Scalar features derived from a single audio frame.
    
    ``estimated_words_per_minute`` is not derived from the frame itself; it is
    filled in by the session controller from elapsed time and transcript length.
    """
    
    model_config = ConfigDict(frozen=True)
    
    volume: float = Field(default=0.0, ge=0, le=100, description="Normalized loudness (0-100)")
    dominant_frequency: float = Field(default=0.0, ge=0, description="Frequency of the loudest bin in Hz")
    clarity: float = Field(default=0.0, ge=0, le=100, description="Share of energy in the speech band (0-100)")
    estimated_words_per_minute: float = Field(default=0.0, ge=0)
