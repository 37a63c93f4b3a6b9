"""Integration tests for the HTTP and WebSocket surface."""

import pytest
from fastapi.testclient import TestClient

from fluency_coach.application.api import app

pytestmark = pytest.mark.integration


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


class TestRestEndpoints:
    """Tests for the REST endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["providers"]["exercise_provider"] == "LocalExerciseProvider"

    def test_list_exercises(self, client):
        """Test that the catalog is listed without targets."""
        response = client.get("/exercises")

        assert response.status_code == 200
        exercises = response.json()["exercises"]
        ids = [exercise["exercise_id"] for exercise in exercises]
        assert "gentle-onset" in ids
        assert all("targets" not in exercise for exercise in exercises)
        assert all(exercise["total_targets"] >= 1 for exercise in exercises)

    def test_list_exercises_by_focus(self, client):
        response = client.get("/exercises", params={"focus_area": "pacing"})

        assert response.status_code == 200
        exercises = response.json()["exercises"]
        assert exercises
        assert {exercise["focus_area"] for exercise in exercises} == {"pacing"}

    def test_list_exercises_invalid_focus(self, client):
        response = client.get("/exercises", params={"focus_area": "juggling"})
        assert response.status_code == 422

    def test_get_exercise(self, client):
        response = client.get("/exercises/gentle-onset")

        assert response.status_code == 200
        body = response.json()
        assert body["targets"][0] == {"text": "apple", "target_type": "word", "position": 0}
        assert body["instructions"]

    def test_get_unknown_exercise(self, client):
        response = client.get("/exercises/nope")

        assert response.status_code == 404
        assert "nope" in response.json()["detail"]


class TestWebSocket:
    """Tests for the practice session WebSocket."""

    def test_session_flow(self, client):
        """Test starting a session, matching a target and aborting."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "session.start", "exercise_id": "gentle-onset"})

            started = websocket.receive_json()
            assert started["type"] == "session.started"
            assert started["first_target"] == "apple"
            assert started["total_targets"] == 5

            progress = websocket.receive_json()
            assert progress["type"] == "progress"
            assert progress["current_target_index"] == 0

            websocket.send_json({"type": "transcript", "text": "Apple!", "is_final": True})

            progress = websocket.receive_json()
            assert progress["type"] == "progress"
            assert progress["current_target_index"] == 1
            assert progress["current_target"] == "open"

            feedback = websocket.receive_json()
            assert feedback["type"] == "feedback"
            assert feedback["feedback_type"] == "encouragement"

            websocket.send_json({"type": "session.abort"})

            aborted = websocket.receive_json()
            assert aborted["type"] == "session.aborted"
            assert aborted["reason"] == "user_requested"

    def test_unknown_exercise_reports_error(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "session.start", "exercise_id": "nope"})

            error = websocket.receive_json()
            assert error["type"] == "error"
            assert error["code"] == "EXERCISE_NOT_FOUND"

    def test_malformed_message_reports_error(self, client):
        """Test that unknown message types are rejected without closing the socket."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_text('{"type": "dance"}')

            error = websocket.receive_json()
            assert error["type"] == "error"
            assert error["code"] == "INVALID_MESSAGE"

            websocket.send_json({"type": "session.start", "exercise_id": "gentle-onset"})
            assert websocket.receive_json()["type"] == "session.started"

    def test_capture_error_aborts_session(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "session.start", "exercise_id": "gentle-onset"})
            websocket.receive_json()
            websocket.receive_json()

            websocket.send_json({"type": "capture.error", "message": "Permission denied"})

            aborted = websocket.receive_json()
            assert aborted["type"] == "session.aborted"
            assert aborted["reason"] == "permission_denied"
            assert aborted["message"] == "Permission denied"

    def test_new_session_after_capture_error(self, client):
        """Test that the client can start again once microphone access is back."""
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "session.start", "exercise_id": "gentle-onset"})
            websocket.receive_json()
            websocket.receive_json()
            websocket.send_json({"type": "capture.error", "message": "Permission denied"})
            assert websocket.receive_json()["type"] == "session.aborted"

            websocket.send_json({"type": "session.start", "exercise_id": "gentle-onset", "capture_ready": False})
            error = websocket.receive_json()
            assert error["code"] == "DEVICE_UNAVAILABLE"

            websocket.send_json({"type": "session.start", "exercise_id": "gentle-onset"})
            assert websocket.receive_json()["type"] == "session.started"
