"""Threshold rules turning audio features into advisory feedback."""

from typing import Optional

from ..entities.audio import AudioFeatures
from ..entities.exercise import FocusArea
from ..entities.messages import FeedbackMessage

FOCUS_REINFORCEMENT = {
    FocusArea.PACING: "Lovely steady pace, keep it flowing",
    FocusArea.CLARITY: "Crystal clear! Your articulation is spot on",
    FocusArea.FLUENCY: "Smooth and gentle, you're speaking with ease",
    FocusArea.CONFIDENCE: "Strong, confident voice. Keep projecting",
    FocusArea.SPONTANEITY: "Great flow, trust that first thought",
}


class RealtimeFeedbackRules:
    """Map a feature snapshot to at most one feedback message.
    
    Feedback is purely advisory; it never influences the session lifecycle.
    """
    
    def __init__(
        self,
        quiet_volume: float = 20.0,
        loud_volume: float = 85.0,
        clear_threshold: float = 70.0,
        comfortable_volume: tuple[float, float] = (30.0, 70.0),
        fast_wpm: float = 180.0,
    ):
        self.quiet_volume = quiet_volume
        self.loud_volume = loud_volume
        self.clear_threshold = clear_threshold
        self.comfortable_volume = comfortable_volume
        self.fast_wpm = fast_wpm
    
    def evaluate(
        self,
        features: AudioFeatures,
        focus_area: FocusArea,
        target_words_per_minute: Optional[float] = None,
    ) -> Optional[FeedbackMessage]:
        """Pick the most pressing feedback for one frame.
        
        Args:
            features: Feature snapshot including the estimated speaking rate.
            focus_area: Focus of the current exercise.
            target_words_per_minute: Pace ceiling for pacing exercises,
                defaults to ``fast_wpm``.
        """
        if features.volume < self.quiet_volume:
            return FeedbackMessage(
                message="Speak a little louder so every word comes through",
                feedback_type="corrective",
            )
        if features.volume > self.loud_volume:
            return FeedbackMessage(
                message="You're coming through loud, ease off the volume a little",
                feedback_type="corrective",
            )
        pace_ceiling = target_words_per_minute if target_words_per_minute is not None else self.fast_wpm
        if focus_area is FocusArea.PACING and features.estimated_words_per_minute > pace_ceiling:
            return FeedbackMessage(
                message="Slow down a touch and pause between phrases",
                feedback_type="corrective",
            )
        low, high = self.comfortable_volume
        if features.clarity > self.clear_threshold and low < features.volume < high:
            return FeedbackMessage(
                message=FOCUS_REINFORCEMENT[focus_area],
                feedback_type="positive",
            )
        return None
