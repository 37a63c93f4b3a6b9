"""Exceptions raised by the fluency coaching engine."""

from typing import Optional


class FluencyCoachError(Exception):
    """Base exception for coaching engine failures."""

    def __init__(self, message: str, session_id: Optional[str] = None):
        self.message = message
        self.session_id = session_id
        if session_id:
            super().__init__(f"[Session: {session_id}] {message}")
        else:
            super().__init__(message)


class DeviceUnavailable(FluencyCoachError):
    """Raised when the audio capture device cannot be acquired."""
    pass


class CaptureStalled(FluencyCoachError):
    """Raised when no audio frame arrived within the liveness window."""

    def __init__(self, silence_seconds: float, session_id: Optional[str] = None):
        self.silence_seconds = silence_seconds
        super().__init__(
            f"No audio frame received for {silence_seconds:.1f}s",
            session_id=session_id,
        )


class RecognitionError(FluencyCoachError):
    """Raised when the speech-to-text source reports an error."""
    pass


class ExerciseNotFound(FluencyCoachError, ValueError):
    """Raised when an exercise identifier is not in the catalog."""

    def __init__(self, exercise_id: str):
        self.exercise_id = exercise_id
        super().__init__(f"Exercise with id {exercise_id} not found")


class SessionAlreadyActive(FluencyCoachError):
    """Raised when a session is started while another one is active."""
    pass
