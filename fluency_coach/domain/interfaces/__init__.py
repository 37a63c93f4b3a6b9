"""Domain interfaces for the fluency coach."""

from .audio_capture import AudioCapture
from .exercise_provider import ExerciseProvider
from .speech_recognizer import SpeechRecognizer

__all__ = ["AudioCapture", "ExerciseProvider", "SpeechRecognizer"]
