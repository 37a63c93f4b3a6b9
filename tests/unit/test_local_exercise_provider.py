"""Unit tests for LocalExerciseProvider."""

import json

import pytest
from pydantic import ValidationError

from fluency_coach.domain.entities import ExerciseDefinition, FocusArea
from fluency_coach.domain.exceptions import ExerciseNotFound
from fluency_coach.domain.interfaces import ExerciseProvider
from fluency_coach.infrastructure import LocalExerciseProvider


@pytest.fixture
def fruit_exercise():
    return ExerciseDefinition.from_texts(
        exercise_id="fruit",
        title="Fruit Words",
        focus_area=FocusArea.CLARITY,
        texts=["apple", "orange", "elephant"],
    )


def test_local_provider_implements_protocol():
    """Test that LocalExerciseProvider implements the ExerciseProvider protocol."""
    provider = LocalExerciseProvider()

    assert isinstance(provider, ExerciseProvider)
    assert callable(getattr(provider, "get_exercise"))
    assert callable(getattr(provider, "list_exercises"))


def test_default_catalog_covers_every_focus_area():
    """Test that the built-in catalog offers an exercise for each focus area."""
    provider = LocalExerciseProvider()

    assert len(provider.list_exercises()) >= 5
    for focus_area in FocusArea:
        assert provider.get_exercises_by_focus(focus_area), focus_area


def test_default_catalog_lookup():
    provider = LocalExerciseProvider()
    exercise = provider.get_exercise("gentle-onset")

    assert exercise.focus_area == FocusArea.FLUENCY
    assert exercise.targets[0].text == "apple"
    assert exercise.instructions


def test_unknown_exercise_raises():
    """Test that an unknown identifier raises ExerciseNotFound."""
    provider = LocalExerciseProvider()

    with pytest.raises(ExerciseNotFound) as exc_info:
        provider.get_exercise("does-not-exist")
    assert exc_info.value.exercise_id == "does-not-exist"
    assert "does-not-exist" in str(exc_info.value)


def test_custom_catalog_replaces_defaults(fruit_exercise):
    provider = LocalExerciseProvider([fruit_exercise])

    assert provider.list_exercises() == [fruit_exercise]
    with pytest.raises(ExerciseNotFound):
        provider.get_exercise("gentle-onset")


def test_add_and_remove_exercise(fruit_exercise):
    provider = LocalExerciseProvider([])
    provider.add_exercise(fruit_exercise)
    assert provider.get_exercise("fruit") is fruit_exercise

    provider.remove_exercise("fruit")
    with pytest.raises(ExerciseNotFound):
        provider.remove_exercise("fruit")


def test_from_json_file(tmp_path, fruit_exercise):
    """Test loading a catalog from a JSON file."""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([fruit_exercise.model_dump(mode="json")]), encoding="utf-8")

    provider = LocalExerciseProvider.from_json_file(path)

    assert provider.get_exercise("fruit") == fruit_exercise


def test_from_json_file_rejects_malformed_exercise(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([{"exercise_id": "x", "title": "X", "focus_area": "pacing", "targets": []}]))

    with pytest.raises(ValidationError):
        LocalExerciseProvider.from_json_file(path)
