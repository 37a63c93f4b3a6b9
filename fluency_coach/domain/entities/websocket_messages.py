"""WebSocket message models for the fluency coach."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from .messages import ErrorCode
from .practice_session import AbortReason
from .report import FluencyReport


# ===== Client → Server Messages =====


class SessionStart(BaseModel):
    """Request to start practising an exercise."""
    
    type: Literal["session.start"] = "session.start"
    exercise_id: str = Field(min_length=1)
    capture_ready: bool = Field(default=True, description="Whether the client currently has microphone access")


class SessionAbort(BaseModel):
    """User-initiated stop."""
    
    type: Literal["session.abort"] = "session.abort"


class InputAudioFrame(BaseModel):
    """Frequency-bin magnitudes captured by the client.
    
    Raw PCM16LE audio may instead be sent as a binary WebSocket frame.
    """
    
    type: Literal["audio.frame"] = "audio.frame"
    magnitudes: list[Annotated[float, Field(ge=0)]]
    sample_rate: int = Field(default=16000, gt=0)
    timestamp: Optional[float] = None


class InputTranscript(BaseModel):
    """Partial or final hypothesis from the client's speech recognizer."""
    
    type: Literal["transcript"] = "transcript"
    text: str
    is_final: bool = False
    timestamp: Optional[float] = None


class InputRecognitionError(BaseModel):
    """Error reported by the client's speech recognizer."""
    
    type: Literal["recognition.error"] = "recognition.error"
    message: str = "Speech recognition failed"


class InputCaptureError(BaseModel):
    """Capture failure reported by the client, such as a revoked microphone permission."""
    
    type: Literal["capture.error"] = "capture.error"
    message: str = "Audio capture failed"


# Union type for all client messages
ClientMessage = Annotated[
    Union[SessionStart, SessionAbort, InputAudioFrame, InputTranscript, InputRecognitionError, InputCaptureError],
    Field(discriminator="type"),
]

client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


# ===== Server → Client Messages =====


class SessionStarted(BaseModel):
    """Session started confirmation from server."""
    
    type: Literal["session.started"] = "session.started"
    session_id: str
    exercise_id: str
    total_targets: int
    first_target: str


class ResponseFeedback(BaseModel):
    """Real-time feedback message from server."""
    
    type: Literal["feedback"] = "feedback"
    message: str
    feedback_type: Literal["positive", "corrective", "encouragement"] = "positive"


class ProgressUpdate(BaseModel):
    """Progress snapshot from server."""
    
    type: Literal["progress"] = "progress"
    current_target_index: int = Field(ge=0)
    current_target_progress: int = Field(ge=0, le=100)
    overall_progress_percent: int = Field(ge=0, le=100)
    current_target: Optional[str] = None


class SessionCompleted(BaseModel):
    """Completion event from server."""
    
    type: Literal["session.completed"] = "session.completed"
    exercise_id: str
    overall_score: int = Field(ge=0, le=100)
    report: FluencyReport


class SessionAborted(BaseModel):
    """Abort event from server."""
    
    type: Literal["session.aborted"] = "session.aborted"
    reason: AbortReason
    message: str = ""


class ErrorMessage(BaseModel):
    """Error message from server."""
    
    type: Literal["error"] = "error"
    code: ErrorCode
    message: str


# Union type for all server messages
ServerMessage = Union[SessionStarted, ResponseFeedback, ProgressUpdate, SessionCompleted, SessionAborted, ErrorMessage]
