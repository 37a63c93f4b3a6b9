"""Post-hoc fluency scoring of a completed session."""

import logging
from typing import Iterable, Optional, Union

from ..entities.report import (
    ClarityAssessment,
    FluencyReport,
    PaceAssessment,
    PauseAssessment,
)
from .transcript_matcher import tokenize

logger = logging.getLogger(__name__)

DEFAULT_FILLER_WORDS = (
    "um", "uh", "like", "you know", "so", "well", "actually", "basically",
)


class FluencyScorer:
    """Compute pacing, filler, repetition and coherence metrics.
    
    The scorer is a pure function of its inputs and its configuration, so the
    same transcript and duration always produce the same report.
    
    The overall score is a flat subtraction of three penalties, clamped:
    ``100 - filler_ratio*30 - repetition_ratio*20 - |wpm - 150| / 2``.
    The constants are tunable through the constructor.
    """
    
    def __init__(
        self,
        filler_words: Iterable[str] = DEFAULT_FILLER_WORDS,
        slow_wpm: int = 120,
        fast_wpm: int = 180,
        reference_wpm: int = 150,
        filler_weight: float = 30.0,
        repetition_weight: float = 20.0,
        pace_divisor: float = 2.0,
    ):
        if slow_wpm > fast_wpm:
            raise ValueError("slow_wpm must not exceed fast_wpm")
        if pace_divisor <= 0:
            raise ValueError("pace_divisor must be positive")
        fillers = {tuple(tokenize(filler)) for filler in filler_words}
        fillers.discard(())
        # Longest phrases first so "you know" wins over a bare "you"
        self.filler_phrases = sorted(fillers, key=len, reverse=True)
        self.slow_wpm = slow_wpm
        self.fast_wpm = fast_wpm
        self.reference_wpm = reference_wpm
        self.filler_weight = filler_weight
        self.repetition_weight = repetition_weight
        self.pace_divisor = pace_divisor
    
    def score(
        self,
        transcript: Union[str, list[str]],
        elapsed_ms: float,
        mean_clarity: Optional[float] = None,
        pause_ratio: Optional[float] = None,
    ) -> FluencyReport:
        """Score a full session transcript.
        
        Args:
            transcript: The accumulated text, as one string or as fragments.
            elapsed_ms: Speaking time in milliseconds.
            mean_clarity: Average per-frame clarity, if audio was captured.
            pause_ratio: Share of silent frames, if audio was captured.
        
        Returns:
            FluencyReport: An immutable report. An empty transcript scores 0.
        """
        if not isinstance(transcript, str):
            transcript = " ".join(transcript)
        words = tokenize(transcript)
        word_count = len(words)
        
        if elapsed_ms > 0:
            words_per_minute = round(word_count / (elapsed_ms / 60000.0))
        else:
            words_per_minute = 0
        
        filler_count, content_words = self._count_fillers(words)
        repetition_count = sum(
            1 for previous, current in zip(words, words[1:]) if previous == current
        )
        filler_ratio = filler_count / max(word_count, 1)
        repetition_ratio = repetition_count / max(word_count, 1)
        
        if content_words:
            coherence = len(set(content_words)) / len(content_words) * 100.0
        else:
            coherence = 0.0
        
        pace = self.assess_pace(words_per_minute)
        clarity = self.assess_clarity(mean_clarity)
        pauses = self.assess_pauses(pause_ratio)
        
        if word_count == 0:
            overall_score = 0
        else:
            overall_score = self.overall_score(filler_ratio, repetition_ratio, words_per_minute)
        
        strengths, suggestions = self._build_feedback(
            filler_ratio, repetition_ratio, pace, clarity, pauses, coherence, word_count
        )
        
        logger.info(
            f"Scored transcript: {word_count} words, {words_per_minute} wpm, "
            f"filler ratio {filler_ratio:.3f}, repetition ratio {repetition_ratio:.3f}, "
            f"overall {overall_score}"
        )
        
        return FluencyReport(
            word_count=word_count,
            words_per_minute=words_per_minute,
            filler_word_count=filler_count,
            filler_ratio=filler_ratio,
            repetition_count=repetition_count,
            repetition_ratio=repetition_ratio,
            coherence=coherence,
            overall_score=overall_score,
            pace=pace,
            clarity=clarity,
            pauses=pauses,
            strengths=tuple(strengths),
            suggestions=tuple(suggestions),
        )
    
    def overall_score(
        self, filler_ratio: float, repetition_ratio: float, words_per_minute: float
    ) -> int:
        raw = (
            100.0
            - (filler_ratio * self.filler_weight)
            - (repetition_ratio * self.repetition_weight)
            - (abs(words_per_minute - self.reference_wpm) / self.pace_divisor)
        )
        return round(max(0.0, min(100.0, raw)))
    
    def assess_pace(self, words_per_minute: float) -> PaceAssessment:
        if words_per_minute < self.slow_wpm:
            return PaceAssessment.TOO_SLOW
        if words_per_minute > self.fast_wpm:
            return PaceAssessment.TOO_FAST
        return PaceAssessment.NATURAL
    
    @staticmethod
    def assess_clarity(mean_clarity: Optional[float]) -> ClarityAssessment:
        if mean_clarity is None:
            return ClarityAssessment.UNKNOWN
        if mean_clarity >= 70:
            return ClarityAssessment.CLEAR
        if mean_clarity >= 40:
            return ClarityAssessment.MODERATE
        return ClarityAssessment.UNCLEAR
    
    @staticmethod
    def assess_pauses(pause_ratio: Optional[float]) -> PauseAssessment:
        if pause_ratio is None:
            return PauseAssessment.UNKNOWN
        if pause_ratio < 0.1:
            return PauseAssessment.INSUFFICIENT
        if pause_ratio > 0.4:
            return PauseAssessment.EXCESSIVE
        return PauseAssessment.BALANCED
    
    def _count_fillers(self, words: list[str]) -> tuple[int, list[str]]:
        """Count filler occurrences and collect the remaining content words."""
        count = 0
        content: list[str] = []
        index = 0
        while index < len(words):
            for phrase in self.filler_phrases:
                if tuple(words[index:index + len(phrase)]) == phrase:
                    count += 1
                    index += len(phrase)
                    break
            else:
                content.append(words[index])
                index += 1
        return count, content
    
    @staticmethod
    def _build_feedback(
        filler_ratio: float,
        repetition_ratio: float,
        pace: PaceAssessment,
        clarity: ClarityAssessment,
        pauses: PauseAssessment,
        coherence: float,
        word_count: int,
    ) -> tuple[list[str], list[str]]:
        strengths: list[str] = []
        suggestions: list[str] = []
        
        if word_count == 0:
            suggestions.append("We didn't catch any words this time. Take a breath and give it another go.")
            return strengths, suggestions
        
        if filler_ratio < 0.05:
            strengths.append("Minimal filler words")
        elif filler_ratio > 0.1:
            suggestions.append("Try pausing silently instead of filling gaps with words like 'um' or 'like'")
        
        if repetition_ratio < 0.02:
            strengths.append("Smooth delivery without repeated words")
        elif repetition_ratio > 0.05:
            suggestions.append("Repeated words crept in; slow down slightly and let each word land once")
        
        if pace is PaceAssessment.NATURAL:
            strengths.append("Natural speaking pace")
        elif pace is PaceAssessment.TOO_SLOW:
            suggestions.append("Your pace was a little slow; try linking words into longer phrases")
        else:
            suggestions.append("Your pace was fast; slow down and pause between phrases")
        
        if clarity is ClarityAssessment.CLEAR:
            strengths.append("Clear, well-articulated speech")
        elif clarity is ClarityAssessment.UNCLEAR:
            suggestions.append("Over-articulate each sound and keep the microphone close")
        
        if pauses is PauseAssessment.BALANCED:
            strengths.append("Good use of pauses")
        elif pauses is PauseAssessment.INSUFFICIENT:
            suggestions.append("Give yourself short pauses between phrases")
        elif pauses is PauseAssessment.EXCESSIVE:
            suggestions.append("Long silences broke the flow; trust your first thought and keep going")
        
        if coherence >= 60:
            strengths.append("Varied vocabulary")
        
        return strengths, suggestions
