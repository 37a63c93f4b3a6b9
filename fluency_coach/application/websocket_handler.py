import asyncio
import logging

from pydantic import ValidationError
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..domain.entities import (
    AbortReason,
    ClientMessage,
    ErrorCode,
    ErrorMessage,
    ErrorOutMessage,
    FeedbackMessage,
    InputAudioFrame,
    InputCaptureError,
    InputRecognitionError,
    InputTranscript,
    OutboundMessage,
    ProgressMessage,
    ProgressUpdate,
    ResponseFeedback,
    ServerMessage,
    SessionAbort,
    SessionAborted,
    SessionAbortedMessage,
    SessionCompleted,
    SessionCompletedMessage,
    SessionStart,
    SessionStarted,
    SessionStartedMessage,
    client_message_adapter,
)
from ..domain.exceptions import DeviceUnavailable, ExerciseNotFound, SessionAlreadyActive
from ..domain.services import SessionController, spectrum_from_pcm
from ..infrastructure.client_audio_capture import ClientAudioCapture

logger = logging.getLogger(__name__)


def to_server_message(item: OutboundMessage) -> ServerMessage:
    """Convert a domain outbound message into its wire model."""
    match item:
        case SessionStartedMessage():
            return SessionStarted(
                session_id=item.session_id,
                exercise_id=item.exercise_id,
                total_targets=item.total_targets,
                first_target=item.first_target,
            )
        case FeedbackMessage():
            return ResponseFeedback(message=item.message, feedback_type=item.feedback_type)
        case ProgressMessage():
            return ProgressUpdate(
                current_target_index=item.current_target_index,
                current_target_progress=item.current_target_progress,
                overall_progress_percent=item.overall_progress_percent,
                current_target=item.current_target,
            )
        case SessionCompletedMessage():
            return SessionCompleted(
                exercise_id=item.exercise_id,
                overall_score=item.overall_score,
                report=item.report,
            )
        case SessionAbortedMessage():
            return SessionAborted(reason=item.reason, message=item.message)
        case ErrorOutMessage():
            return ErrorMessage(code=item.code, message=item.message)
        case _:
            # Unknown message type
            raise ValueError(f"Unknown OutboundMessage type: {type(item)}")


class WebSocketHandler:
    """Bridges one WebSocket connection to a SessionController.

    JSON text frames carry commands, spectrum frames and transcripts; binary
    frames carry raw PCM16LE audio which is turned into a spectrum here.
    """

    def __init__(
        self,
        session_controller: SessionController,
        audio_capture: ClientAudioCapture,
        sample_rate: int = 16000,
        fft_size: int = 2048,
    ):
        self._session_controller = session_controller
        self._audio_capture = audio_capture
        self._sample_rate = sample_rate
        self._fft_size = fft_size

    async def handle_websocket(self, websocket: WebSocket) -> None:
        # Note: websocket.accept() is called by the API endpoint before this
        send_task = asyncio.create_task(self._send_loop(websocket))
        receive_task = asyncio.create_task(self._receive_loop(websocket))
        done, pending = await asyncio.wait(
            {send_task, receive_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        try:
            for task in done:
                exc = task.exception()
                if exc:
                    raise exc
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {websocket.client}")
        except Exception as e:
            logger.error(f"WebSocket error: {e}", exc_info=True)
        finally:
            await self._session_controller.abort(AbortReason.DISCONNECTED)
            for t in (send_task, receive_task):
                if not t.done():
                    t.cancel()
            await asyncio.gather(send_task, receive_task, return_exceptions=True)

            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket: {e}")
            logger.info(f"WebSocket connection closed: {websocket.client}")

    async def _send_loop(self, websocket: WebSocket) -> None:
        while True:
            item: OutboundMessage = await self._session_controller.outbound_queue.get()
            message = to_server_message(item)
            logger.debug(f"_send_loop sending {message.type}")
            await websocket.send_text(message.model_dump_json())

    async def _receive_loop(self, websocket: WebSocket) -> None:
        """Receive messages from client and forward to the session controller."""
        while True:
            data = await websocket.receive()

            # Handle disconnect
            if data.get("type") == "websocket.disconnect":
                logger.info("Client disconnected")
                break

            # Handle binary messages (audio)
            if data.get("bytes") is not None:
                magnitudes = spectrum_from_pcm(data["bytes"], fft_size=self._fft_size)
                await self._session_controller.submit_audio_frame(magnitudes, self._sample_rate)

            # Handle text messages (JSON control messages)
            elif data.get("text") is not None:
                try:
                    message = client_message_adapter.validate_json(data["text"])
                except ValidationError as e:
                    logger.error(f"Invalid client message: {e}")
                    await self._report_error(ErrorCode.INVALID_MESSAGE, "Unrecognized or malformed message")
                    continue
                await self._handle_client_message(message)

    async def _handle_client_message(self, message: ClientMessage) -> None:
        """Dispatch a validated client message."""
        controller = self._session_controller

        match message:
            case SessionStart():
                if message.capture_ready:
                    self._audio_capture.mark_available()
                else:
                    self._audio_capture.mark_unavailable()
                try:
                    await controller.start(message.exercise_id)
                except ExerciseNotFound as e:
                    await self._report_error(ErrorCode.EXERCISE_NOT_FOUND, e.message)
                except SessionAlreadyActive as e:
                    await self._report_error(ErrorCode.SESSION_ALREADY_ACTIVE, e.message)
                except DeviceUnavailable as e:
                    await self._report_error(ErrorCode.DEVICE_UNAVAILABLE, e.message)

            case SessionAbort():
                await controller.abort(AbortReason.USER_REQUESTED)

            case InputAudioFrame():
                await controller.submit_audio_frame(
                    message.magnitudes, message.sample_rate, message.timestamp
                )

            case InputTranscript():
                if message.is_final:
                    await controller.submit_final_transcript(message.text, message.timestamp)
                else:
                    await controller.submit_partial_transcript(message.text, message.timestamp)

            case InputRecognitionError():
                await controller.submit_recognition_error(message.message)

            case InputCaptureError():
                self._audio_capture.mark_unavailable()
                await controller.abort(AbortReason.PERMISSION_DENIED, message.message)

    async def _report_error(self, code: ErrorCode, text: str) -> None:
        await self._session_controller.outbound_queue.put(ErrorOutMessage(code, text))
