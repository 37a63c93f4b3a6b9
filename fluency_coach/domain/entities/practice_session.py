"""Practice session entity for the fluency coach."""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from .audio import AudioFeatures


class SessionStatus(str, Enum):
    """Session lifecycle state."""
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    ABORTED = "aborted"


class AbortReason(str, Enum):
    """Why an active session was aborted."""
    USER_REQUESTED = "user_requested"
    CAPTURE_STALLED = "capture_stalled"
    PERMISSION_DENIED = "permission_denied"
    RECOGNITION_FAILED = "recognition_failed"
    DISCONNECTED = "disconnected"


class PracticeSession(BaseModel):
    """Mutable aggregate for one practice session.
    
    Owned exclusively by the session controller. The mutation helpers keep the
    progress invariants: progress stays within [0, 100], the target index never
    decreases nor passes ``total_targets``, progress resets whenever the index
    advances, and the transcript is append-only.
    """
    
    model_config = ConfigDict(
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "id": "12345678-1234-5678-1234-567812345678",
                "exercise_id": "slow-motion",
                "total_targets": 3,
                "status": "active",
                "current_target_index": 1,
                "current_target_progress": 40,
                "accumulated_transcript": ["I speak slowly"],
            }
        },
    )
    
    id: UUID = Field(default_factory=uuid.uuid4)
    exercise_id: str
    total_targets: int = Field(ge=1)
    status: SessionStatus = SessionStatus.IDLE
    started_at: datetime = Field(default_factory=datetime.utcnow)
    last_activity_at: datetime = Field(default_factory=datetime.utcnow)
    ended_at: Optional[datetime] = None
    abort_reason: Optional[AbortReason] = None
    
    current_target_index: int = Field(default=0, ge=0)
    current_target_progress: int = Field(default=0, ge=0, le=100)
    accumulated_transcript: list[str] = Field(default_factory=list)
    audio_features: AudioFeatures = Field(default_factory=AudioFeatures)
    
    # Running audio statistics used for the final report
    frame_count: int = Field(default=0, ge=0)
    silent_frame_count: int = Field(default=0, ge=0)
    clarity_total: float = Field(default=0.0, ge=0)
    
    @property
    def is_finished(self) -> bool:
        """True once every target has been accepted."""
        return self.current_target_index >= self.total_targets
    
    @property
    def overall_progress_percent(self) -> int:
        """Progress through the whole exercise, counting partial progress on the current target."""
        if self.is_finished:
            return 100
        done = self.current_target_index + self.current_target_progress / 100
        return round(done / self.total_targets * 100)
    
    @property
    def word_count(self) -> int:
        return sum(len(fragment.split()) for fragment in self.accumulated_transcript)
    
    @property
    def mean_clarity(self) -> Optional[float]:
        if self.frame_count == 0:
            return None
        return self.clarity_total / self.frame_count
    
    @property
    def pause_ratio(self) -> Optional[float]:
        if self.frame_count == 0:
            return None
        return self.silent_frame_count / self.frame_count
    
    def record_progress(self, percent: int) -> None:
        """Update progress on the current target without advancing."""
        self.current_target_progress = max(0, min(100, int(percent)))
        self.last_activity_at = datetime.utcnow()
    
    def accept_target(self, text: str) -> None:
        """Append an accepted hypothesis and move on to the next target."""
        if self.is_finished:
            raise ValueError("All targets have already been accepted")
        self.accumulated_transcript.append(text)
        self.current_target_index += 1
        self.current_target_progress = 0
        self.last_activity_at = datetime.utcnow()
    
    def record_audio(self, features: AudioFeatures, silence_volume: float) -> None:
        """Store the latest audio snapshot and fold it into the running statistics."""
        self.audio_features = features
        self.frame_count += 1
        self.clarity_total += features.clarity
        if features.volume < silence_volume:
            self.silent_frame_count += 1
