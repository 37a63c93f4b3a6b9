"""Outbound message entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from .practice_session import AbortReason
from .report import FluencyReport


class ErrorCode(str, Enum):
    """Error codes reported to the consumer."""
    
    INVALID_MESSAGE = "INVALID_MESSAGE"
    EXERCISE_NOT_FOUND = "EXERCISE_NOT_FOUND"
    SESSION_ALREADY_ACTIVE = "SESSION_ALREADY_ACTIVE"
    DEVICE_UNAVAILABLE = "DEVICE_UNAVAILABLE"
    RECOGNITION_ERROR = "RECOGNITION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class OutboundMessage:
    """Base class for outbound messages."""
    
    pass


@dataclass
class SessionStartedMessage(OutboundMessage):
    """Message indicating a session is active and accepting events."""
    
    session_id: str
    exercise_id: str
    total_targets: int
    first_target: str


@dataclass
class FeedbackMessage(OutboundMessage):
    """Advisory, human-readable feedback."""
    
    message: str
    feedback_type: Literal["positive", "corrective", "encouragement"] = "positive"
    timestamp: float = field(default_factory=lambda: datetime.utcnow().timestamp())


@dataclass
class ProgressMessage(OutboundMessage):
    """Snapshot of progress through the exercise."""
    
    current_target_index: int
    current_target_progress: int
    overall_progress_percent: int
    current_target: Optional[str] = None


@dataclass
class SessionCompletedMessage(OutboundMessage):
    """Completion event handed to reporting and gamification consumers."""
    
    exercise_id: str
    overall_score: int
    report: FluencyReport


@dataclass
class SessionAbortedMessage(OutboundMessage):
    """Message indicating the session was aborted."""
    
    reason: AbortReason
    message: str = ""


@dataclass
class ErrorOutMessage(OutboundMessage):
    """Message containing an error."""
    
    code: ErrorCode
    message: str
