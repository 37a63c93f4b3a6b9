"""Domain services for the fluency coach."""

from .audio_feature_extractor import AudioFeatureExtractor, FrameWatchdog, spectrum_from_pcm
from .fluency_scorer import FluencyScorer
from .realtime_feedback import RealtimeFeedbackRules
from .session_controller import SessionController
from .transcript_matcher import MatchDecision, TranscriptMatcher

__all__ = [
    "AudioFeatureExtractor",
    "FrameWatchdog",
    "spectrum_from_pcm",
    "FluencyScorer",
    "RealtimeFeedbackRules",
    "SessionController",
    "MatchDecision",
    "TranscriptMatcher",
]
