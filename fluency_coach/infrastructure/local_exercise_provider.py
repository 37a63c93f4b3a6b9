"""Local in-memory implementation of ExerciseProvider."""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from ..domain.entities.exercise import (
    Difficulty,
    ExerciseDefinition,
    FocusArea,
    TargetType,
)
from ..domain.exceptions import ExerciseNotFound
from ..domain.interfaces.exercise_provider import ExerciseProvider

logger = logging.getLogger(__name__)


def _default_exercises() -> list[ExerciseDefinition]:
    return [
        ExerciseDefinition.from_texts(
            exercise_id="gentle-onset",
            title="Gentle Voice Starts",
            focus_area=FocusArea.FLUENCY,
            texts=["apple", "open", "easy", "ocean", "morning"],
            target_type=TargetType.WORD,
            description="Practice starting words smoothly and gently",
            difficulty=Difficulty.BEGINNER,
            duration_minutes=3,
            target_words_per_minute=120,
            instructions=(
                "Take a deep breath",
                "Start with an 'ahh' sound softly",
                "Gradually add the first letter",
                "No pressure, just flow naturally",
            ),
        ),
        ExerciseDefinition.from_texts(
            exercise_id="breathing-speech",
            title="Breath-Powered Speech",
            focus_area=FocusArea.FLUENCY,
            texts=[
                "I breathe in slowly",
                "I speak on the exhale",
                "My breath carries my words",
            ],
            target_type=TargetType.SENTENCE,
            description="Connect breathing with confident speaking",
            difficulty=Difficulty.BEGINNER,
            duration_minutes=4,
            target_words_per_minute=130,
            instructions=(
                "Breathe in deeply and slowly",
                "Speak on the exhale",
                "Let your breath carry the words",
                "Trust your natural rhythm",
            ),
        ),
        ExerciseDefinition.from_texts(
            exercise_id="slow-motion",
            title="Slow Motion Speech",
            focus_area=FocusArea.PACING,
            texts=[
                "I take my time with every word",
                "Slow and steady wins the race",
                "There is no rush to finish",
            ],
            target_type=TargetType.SENTENCE,
            description="Practice deliberately slower speech patterns",
            difficulty=Difficulty.BEGINNER,
            duration_minutes=4,
            target_words_per_minute=120,
            instructions=(
                "Speak each word slowly",
                "Pause between phrases",
                "Focus on clarity over speed",
                "Enjoy the peaceful pace",
            ),
        ),
        ExerciseDefinition.from_texts(
            exercise_id="articulation-drills",
            title="Crystal Clear Words",
            focus_area=FocusArea.CLARITY,
            texts=["particular", "statistics", "thoroughly", "rural", "specific"],
            target_type=TargetType.WORD,
            description="Enhance pronunciation and clarity",
            difficulty=Difficulty.INTERMEDIATE,
            duration_minutes=6,
            instructions=(
                "Over-articulate each sound",
                "Move your mouth deliberately",
                "Practice difficult consonants",
                "Celebrate clear speech",
            ),
        ),
        ExerciseDefinition.from_texts(
            exercise_id="pacing-practice",
            title="Perfect Pacing",
            focus_area=FocusArea.PACING,
            texts=[
                "When I speak at a comfortable pace, my listeners can follow every idea. "
                "I pause at the end of each thought, and I let the important words land. "
                "If I notice myself rushing, I slow down and return to my natural rhythm.",
            ],
            target_type=TargetType.PARAGRAPH,
            description="Find your ideal speaking rhythm",
            difficulty=Difficulty.ADVANCED,
            duration_minutes=5,
            instructions=(
                "Start slower than feels natural",
                "Gradually find your sweet spot",
                "Notice when you feel rushed",
                "Return to a comfortable pace",
            ),
        ),
        ExerciseDefinition.from_texts(
            exercise_id="first-thought",
            title="Trust Your Instincts",
            focus_area=FocusArea.SPONTANEITY,
            texts=[
                "My favourite place to relax is",
                "Something that made me smile today was",
                "If I could learn any skill it would be",
            ],
            target_type=TargetType.SENTENCE,
            description="Practice responding with your first thought",
            difficulty=Difficulty.BEGINNER,
            duration_minutes=3,
            instructions=(
                "Notice your first reaction",
                "Say it without editing",
                "Trust your initial wisdom",
                "Let authenticity shine",
            ),
        ),
        ExerciseDefinition.from_texts(
            exercise_id="voice-confidence",
            title="Voice Confidence",
            focus_area=FocusArea.CONFIDENCE,
            texts=[
                "My voice matters exactly as it is",
                "Every word I speak is a victory",
                "I am ready to be heard",
            ],
            target_type=TargetType.SENTENCE,
            description="Build vocal strength and communication power",
            difficulty=Difficulty.INTERMEDIATE,
            duration_minutes=4,
            instructions=(
                "Stand or sit tall",
                "Project from your chest",
                "Keep your volume steady",
                "Finish every sentence strongly",
            ),
        ),
    ]


class LocalExerciseProvider(ExerciseProvider):
    """Local implementation of the ExerciseProvider protocol.

    Stores exercise definitions in a dictionary. Without arguments it is
    pre-populated with the built-in practice catalog.
    """

    def __init__(self, exercises: Optional[Iterable[ExerciseDefinition]] = None):
        """Initialize the local exercise provider.

        Args:
            exercises: Exercises to serve, in catalog order. Defaults to the
                      built-in catalog.
        """
        self._exercises: Dict[str, ExerciseDefinition] = {}
        for exercise in exercises if exercises is not None else _default_exercises():
            self.add_exercise(exercise)

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "LocalExerciseProvider":
        """Load a catalog from a JSON file holding a list of exercise objects.

        Args:
            path: Path to the JSON file.

        Raises:
            FileNotFoundError: If the file does not exist.
            pydantic.ValidationError: If an exercise is malformed.
        """
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        exercises = [ExerciseDefinition.model_validate(item) for item in raw]
        logger.info(f"Loaded {len(exercises)} exercises from {path}")
        return cls(exercises)

    def get_exercise(self, exercise_id: str) -> ExerciseDefinition:
        """Retrieve an exercise by identifier.

        Raises:
            ExerciseNotFound: If the exercise is not found.
        """
        if exercise_id not in self._exercises:
            raise ExerciseNotFound(exercise_id)

        return self._exercises[exercise_id]

    def list_exercises(self) -> list[ExerciseDefinition]:
        return list(self._exercises.values())

    def get_exercises_by_focus(self, focus_area: FocusArea) -> list[ExerciseDefinition]:
        return [exercise for exercise in self._exercises.values() if exercise.focus_area == focus_area]

    def add_exercise(self, exercise: ExerciseDefinition) -> None:
        """Add or replace an exercise in the catalog.

        Args:
            exercise: The exercise definition to store.
        """
        self._exercises[exercise.exercise_id] = exercise

    def remove_exercise(self, exercise_id: str) -> None:
        """Remove an exercise from the catalog.

        Raises:
            ExerciseNotFound: If the exercise is not found.
        """
        if exercise_id not in self._exercises:
            raise ExerciseNotFound(exercise_id)

        del self._exercises[exercise_id]
