"""Exercise and target entities for the fluency coach."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TargetType(str, Enum):
    """Granularity of a practice target."""
    WORD = "word"
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"


class FocusArea(str, Enum):
    """Skill an exercise concentrates on."""
    PACING = "pacing"
    CLARITY = "clarity"
    FLUENCY = "fluency"
    CONFIDENCE = "confidence"
    SPONTANEITY = "spontaneity"


class Difficulty(str, Enum):
    """Exercise difficulty."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Target(BaseModel):
    """A single word, sentence or paragraph the speaker must produce."""
    
    model_config = ConfigDict(frozen=True)
    
    text: str = Field(min_length=1, description="Text the speaker should say")
    target_type: TargetType = Field(default=TargetType.WORD, description="Granularity of the target")
    position: int = Field(ge=0, description="Position of the target within its exercise")


class ExerciseDefinition(BaseModel):
    """An ordered sequence of targets sharing a focus area.
    
    Exercise definitions are immutable and loaded once from configuration.
    Target positions must be strictly increasing, which also makes them
    unique within the exercise.
    """
    
    model_config = ConfigDict(frozen=True)
    
    exercise_id: str = Field(min_length=1, description="Unique identifier for the exercise")
    title: str = Field(min_length=1, max_length=200)
    focus_area: FocusArea
    targets: tuple[Target, ...] = Field(min_length=1)
    target_words_per_minute: int = Field(default=150, gt=0)
    description: Optional[str] = None
    difficulty: Difficulty = Difficulty.BEGINNER
    duration_minutes: int = Field(default=3, ge=1)
    instructions: tuple[str, ...] = ()
    
    @model_validator(mode="after")
    def _check_positions(self) -> "ExerciseDefinition":
        positions = [target.position for target in self.targets]
        for previous, current in zip(positions, positions[1:]):
            if current <= previous:
                raise ValueError(
                    f"Target positions must be strictly increasing, got {positions}"
                )
        return self
    
    @property
    def total_targets(self) -> int:
        return len(self.targets)
    
    @classmethod
    def from_texts(
        cls,
        exercise_id: str,
        title: str,
        focus_area: FocusArea,
        texts: list[str],
        target_type: TargetType = TargetType.WORD,
        **kwargs,
    ) -> "ExerciseDefinition":
        """Build an exercise whose targets share one type, numbered in order."""
        targets = tuple(
            Target(text=text, target_type=target_type, position=index)
            for index, text in enumerate(texts)
        )
        return cls(
            exercise_id=exercise_id,
            title=title,
            focus_area=focus_area,
            targets=targets,
            **kwargs,
        )
