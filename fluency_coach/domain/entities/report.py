"""Fluency report entities."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PaceAssessment(str, Enum):
    """Qualitative speaking pace."""
    TOO_SLOW = "too slow"
    NATURAL = "natural pace"
    TOO_FAST = "too fast"


class ClarityAssessment(str, Enum):
    """Qualitative clarity derived from the speech-band energy share."""
    CLEAR = "clear"
    MODERATE = "moderate"
    UNCLEAR = "unclear"
    UNKNOWN = "unknown"


class PauseAssessment(str, Enum):
    """Qualitative use of pauses derived from the share of silent frames."""
    INSUFFICIENT = "insufficient"
    BALANCED = "balanced"
    EXCESSIVE = "excessive"
    UNKNOWN = "unknown"


class FluencyReport(BaseModel):
    """Immutable post-hoc assessment of a completed session."""
    
    model_config = ConfigDict(frozen=True)
    
    word_count: int = Field(ge=0)
    words_per_minute: int = Field(ge=0)
    filler_word_count: int = Field(ge=0)
    filler_ratio: float = Field(ge=0)
    repetition_count: int = Field(ge=0)
    repetition_ratio: float = Field(ge=0)
    coherence: float = Field(ge=0, le=100, description="Vocabulary variety of non-filler words (0-100)")
    overall_score: int = Field(ge=0, le=100)
    pace: PaceAssessment
    clarity: ClarityAssessment = ClarityAssessment.UNKNOWN
    pauses: PauseAssessment = PauseAssessment.UNKNOWN
    strengths: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
