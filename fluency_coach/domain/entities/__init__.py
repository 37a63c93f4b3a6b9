"""Domain entities for the fluency coach."""

from .audio import AudioFeatures, AudioFrame
from .events import (
    AudioFrameEvent,
    InboundEvent,
    RecognitionErrorEvent,
    TranscriptEvent,
)
from .exercise import Difficulty, ExerciseDefinition, FocusArea, Target, TargetType
from .messages import (
    ErrorCode,
    ErrorOutMessage,
    FeedbackMessage,
    OutboundMessage,
    ProgressMessage,
    SessionAbortedMessage,
    SessionCompletedMessage,
    SessionStartedMessage,
)
from .practice_session import AbortReason, PracticeSession, SessionStatus
from .report import ClarityAssessment, FluencyReport, PaceAssessment, PauseAssessment
from .websocket_messages import (
    ClientMessage,
    ErrorMessage,
    InputAudioFrame,
    InputCaptureError,
    InputRecognitionError,
    InputTranscript,
    ProgressUpdate,
    ResponseFeedback,
    ServerMessage,
    SessionAbort,
    SessionAborted,
    SessionCompleted,
    SessionStart,
    SessionStarted,
    client_message_adapter,
)

__all__ = [
    # Session entities
    "PracticeSession",
    "SessionStatus",
    "AbortReason",
    # Exercise entities
    "ExerciseDefinition",
    "Target",
    "TargetType",
    "FocusArea",
    "Difficulty",
    # Audio entities
    "AudioFrame",
    "AudioFeatures",
    # Report entities
    "FluencyReport",
    "PaceAssessment",
    "ClarityAssessment",
    "PauseAssessment",
    # Event entities
    "InboundEvent",
    "AudioFrameEvent",
    "TranscriptEvent",
    "RecognitionErrorEvent",
    # Message entities
    "OutboundMessage",
    "SessionStartedMessage",
    "FeedbackMessage",
    "ProgressMessage",
    "SessionCompletedMessage",
    "SessionAbortedMessage",
    "ErrorOutMessage",
    "ErrorCode",
    # WebSocket message entities
    "ClientMessage",
    "ServerMessage",
    "SessionStart",
    "SessionAbort",
    "InputAudioFrame",
    "InputTranscript",
    "InputRecognitionError",
    "InputCaptureError",
    "SessionStarted",
    "ResponseFeedback",
    "ProgressUpdate",
    "SessionCompleted",
    "SessionAborted",
    "ErrorMessage",
    "client_message_adapter",
]
