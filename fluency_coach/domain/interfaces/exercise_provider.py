"""Exercise provider protocol."""

from typing import Protocol, runtime_checkable

from ..entities.exercise import ExerciseDefinition, FocusArea


@runtime_checkable
class ExerciseProvider(Protocol):
    """Protocol for practice target catalogs.
    
    The catalog is static configuration: exercises are resolved once when a
    session starts and are never mutated afterwards.
    """
    
    def get_exercise(self, exercise_id: str) -> ExerciseDefinition:
        """Retrieve an exercise by identifier.
        
        Args:
            exercise_id: The unique identifier of the exercise.
            
        Returns:
            ExerciseDefinition: The exercise with its ordered targets.
            
        Raises:
            ExerciseNotFound: If the identifier is unknown.
        """
        ...
    
    def list_exercises(self) -> list[ExerciseDefinition]:
        """List all available exercises in catalog order."""
        ...
    
    def get_exercises_by_focus(self, focus_area: FocusArea) -> list[ExerciseDefinition]:
        """Retrieve all exercises sharing a focus area.
        
        Args:
            focus_area: The focus area to filter by.
            
        Returns:
            list[ExerciseDefinition]: Matching exercises, possibly empty.
        """
        ...
