"""Unit tests for WebSocketHandler message routing."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.websockets import WebSocketDisconnect

from fluency_coach.application.websocket_handler import WebSocketHandler, to_server_message
from fluency_coach.domain.entities import (
    AbortReason,
    ErrorCode,
    ErrorOutMessage,
    FeedbackMessage,
    InputAudioFrame,
    InputCaptureError,
    InputTranscript,
    ProgressMessage,
    SessionAbortedMessage,
    SessionStart,
)
from fluency_coach.domain.exceptions import DeviceUnavailable
from fluency_coach.infrastructure import ClientAudioCapture


@pytest.fixture
def session_controller():
    controller = AsyncMock()
    controller.outbound_queue = asyncio.Queue()
    return controller


@pytest.fixture
def audio_capture():
    return ClientAudioCapture("test")


@pytest.fixture
def handler(session_controller, audio_capture):
    return WebSocketHandler(session_controller, audio_capture, fft_size=256)


class TestToServerMessage:
    """Tests for domain to wire conversion."""

    def test_feedback(self):
        message = to_server_message(FeedbackMessage("Nice", feedback_type="positive"))
        assert message.type == "feedback"
        assert message.message == "Nice"

    def test_progress(self):
        message = to_server_message(ProgressMessage(1, 40, 47, "orange"))
        assert message.model_dump() == {
            "type": "progress",
            "current_target_index": 1,
            "current_target_progress": 40,
            "overall_progress_percent": 47,
            "current_target": "orange",
        }

    def test_aborted(self):
        message = to_server_message(SessionAbortedMessage(AbortReason.CAPTURE_STALLED, "lost"))
        assert '"reason":"capture_stalled"' in message.model_dump_json()

    def test_error(self):
        message = to_server_message(ErrorOutMessage(ErrorCode.INVALID_MESSAGE, "bad"))
        assert message.code == ErrorCode.INVALID_MESSAGE

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            to_server_message(object())


class TestClientMessageRouting:
    """Tests for routing validated client messages."""

    @pytest.mark.asyncio
    async def test_transcripts_routed_by_finality(self, handler, session_controller):
        await handler._handle_client_message(InputTranscript(text="apple", is_final=True))
        await handler._handle_client_message(InputTranscript(text="app"))

        session_controller.submit_final_transcript.assert_awaited_once_with("apple", None)
        session_controller.submit_partial_transcript.assert_awaited_once_with("app", None)

    @pytest.mark.asyncio
    async def test_audio_frame_routed(self, handler, session_controller):
        await handler._handle_client_message(InputAudioFrame(magnitudes=[1.0, 2.0], sample_rate=8000))
        session_controller.submit_audio_frame.assert_awaited_once_with([1.0, 2.0], 8000, None)

    @pytest.mark.asyncio
    async def test_start_failure_reported_as_error(self, handler, session_controller):
        """Test that a start failure becomes an error message instead of closing the socket."""
        session_controller.start.side_effect = DeviceUnavailable("Microphone unavailable")

        await handler._handle_client_message(SessionStart(exercise_id="gentle-onset"))

        error = session_controller.outbound_queue.get_nowait()
        assert isinstance(error, ErrorOutMessage)
        assert error.code == ErrorCode.DEVICE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_capture_error_then_new_start_restores_capture(self, handler, session_controller, audio_capture):
        """Test that a later session.start with microphone access clears an earlier capture error."""
        await handler._handle_client_message(InputCaptureError(message="Permission denied"))
        assert audio_capture.available is False
        session_controller.abort.assert_awaited_once_with(AbortReason.PERMISSION_DENIED, "Permission denied")

        await handler._handle_client_message(SessionStart(exercise_id="gentle-onset"))

        assert audio_capture.available is True
        session_controller.start.assert_awaited_once_with("gentle-onset")

    @pytest.mark.asyncio
    async def test_start_without_capture_marks_device_unavailable(self, handler, audio_capture):
        await handler._handle_client_message(SessionStart(exercise_id="gentle-onset", capture_ready=False))
        assert audio_capture.available is False

    @pytest.mark.asyncio
    async def test_binary_frame_converted_to_spectrum(self, handler, session_controller):
        """Test that binary PCM frames are submitted as magnitude bins."""
        websocket = MagicMock()
        websocket.receive = AsyncMock(side_effect=[
            {"type": "websocket.receive", "bytes": b"\x00\x10" * 256},
            {"type": "websocket.disconnect"},
        ])

        await handler._receive_loop(websocket)

        magnitudes, sample_rate = session_controller.submit_audio_frame.await_args.args
        assert len(magnitudes) == 128
        assert sample_rate == 16000

    @pytest.mark.asyncio
    async def test_disconnect_aborts_session(self, handler, session_controller):
        websocket = MagicMock()
        websocket.receive = AsyncMock(side_effect=WebSocketDisconnect())
        websocket.close = AsyncMock()
        websocket.send_text = AsyncMock()

        await handler.handle_websocket(websocket)

        session_controller.abort.assert_awaited_once_with(AbortReason.DISCONNECTED)
        websocket.close.assert_awaited_once()
