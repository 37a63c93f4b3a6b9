"""Infrastructure layer components."""

from .client_audio_capture import ClientAudioCapture
from .client_speech_recognizer import ClientSpeechRecognizer
from .local_exercise_provider import LocalExerciseProvider

__all__ = [
    "ClientAudioCapture",
    "ClientSpeechRecognizer",
    "LocalExerciseProvider",
]
