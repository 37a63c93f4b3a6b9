"""Fluency Coach Controller for handling wiring and coordination."""

import logging
from typing import Optional
from uuid import uuid4

from fastapi import WebSocket

from ..domain.entities import ExerciseDefinition, FocusArea
from ..domain.interfaces.exercise_provider import ExerciseProvider
from ..domain.services import (
    AudioFeatureExtractor,
    FluencyScorer,
    RealtimeFeedbackRules,
    SessionController,
    TranscriptMatcher,
)
from ..infrastructure.client_audio_capture import ClientAudioCapture
from ..infrastructure.client_speech_recognizer import ClientSpeechRecognizer
from .config import Settings
from .websocket_handler import WebSocketHandler

logger = logging.getLogger(__name__)


class FluencyCoachController:
    """
    Controller for coordinating fluency coach operations.

    This controller is injected with the exercise catalog and settings and
    builds one SessionController per connection, keeping the API layer thin.
    Each connection owns its own capture stream and recognizer, so sessions
    never share devices.
    """

    def __init__(self, exercise_provider: ExerciseProvider, settings: Settings):
        """
        Initialize the controller with injected dependencies.

        Args:
            exercise_provider: Provider for the practice target catalog
            settings: Application settings holding engine thresholds
        """
        self.exercise_provider = exercise_provider
        self.settings = settings
        self.active_connections = 0

        logger.info("FluencyCoachController initialized")

    def create_session_controller(
        self,
        audio_capture: ClientAudioCapture,
        speech_recognizer: ClientSpeechRecognizer,
    ) -> SessionController:
        """Build a SessionController configured from settings."""
        s = self.settings
        return SessionController(
            exercise_provider=self.exercise_provider,
            audio_capture=audio_capture,
            speech_recognizer=speech_recognizer,
            feature_extractor=AudioFeatureExtractor(
                max_magnitude=s.max_magnitude,
                speech_band_hz=(s.speech_band_low_hz, s.speech_band_high_hz),
            ),
            matcher=TranscriptMatcher(acceptance_threshold=s.acceptance_threshold),
            scorer=FluencyScorer(
                filler_words=s.filler_words,
                slow_wpm=s.slow_wpm,
                fast_wpm=s.fast_wpm,
                reference_wpm=s.reference_wpm,
                filler_weight=s.filler_weight,
                repetition_weight=s.repetition_weight,
                pace_divisor=s.pace_divisor,
            ),
            feedback_rules=RealtimeFeedbackRules(
                quiet_volume=s.quiet_volume,
                loud_volume=s.loud_volume,
                fast_wpm=s.fast_wpm,
            ),
            liveness_timeout=s.liveness_timeout_seconds,
            watchdog_interval=s.watchdog_interval_seconds,
            recognition_error_limit=s.recognition_error_limit,
            feedback_cooldown=s.feedback_cooldown_seconds,
            silence_volume=s.silence_volume,
        )

    async def handle_websocket_connection(self, websocket: WebSocket) -> None:
        client_id = f"client-{uuid4().hex[:8]}"
        logger.info(f"Handling new WebSocket connection from {websocket.client} as {client_id}")

        audio_capture = ClientAudioCapture(client_id)
        speech_recognizer = ClientSpeechRecognizer(client_id)
        session_controller = self.create_session_controller(audio_capture, speech_recognizer)
        handler = WebSocketHandler(
            session_controller=session_controller,
            audio_capture=audio_capture,
            sample_rate=self.settings.sample_rate_hz,
            fft_size=self.settings.fft_size,
        )

        self.active_connections += 1
        try:
            await handler.handle_websocket(websocket)
        finally:
            self.active_connections -= 1
            logger.info(f"Connection {client_id} finished in state {session_controller.status.value}")

    def get_health_status(self) -> dict:
        """
        Get application health status.

        Returns:
            Dict containing health status information
        """
        return {
            "status": "healthy",
            "active_connections": self.active_connections,
            "providers": {
                "exercise_provider": type(self.exercise_provider).__name__,
            },
        }

    def list_exercises(self, focus_area: Optional[FocusArea] = None) -> list[dict]:
        """
        List catalog exercises, optionally filtered by focus area.

        Args:
            focus_area: Only return exercises with this focus area.

        Returns:
            List of exercise dictionaries.
        """
        if focus_area is None:
            exercises = self.exercise_provider.list_exercises()
        else:
            exercises = self.exercise_provider.get_exercises_by_focus(focus_area)
        return [self._exercise_summary(exercise) for exercise in exercises]

    def get_exercise(self, exercise_id: str) -> dict:
        """
        Get a single exercise with its targets.

        Raises:
            ExerciseNotFound: If the exercise is unknown.
        """
        return self.exercise_provider.get_exercise(exercise_id).model_dump(mode="json")

    @staticmethod
    def _exercise_summary(exercise: ExerciseDefinition) -> dict:
        data = exercise.model_dump(mode="json", exclude={"targets"})
        data["total_targets"] = exercise.total_targets
        return data
