"""Session controller owning the practice session lifecycle."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..entities.audio import AudioFeatures, AudioFrame
from ..entities.events import (
    AudioFrameEvent,
    InboundEvent,
    RecognitionErrorEvent,
    TranscriptEvent,
)
from ..entities.exercise import ExerciseDefinition, Target
from ..entities.messages import (
    ErrorCode,
    ErrorOutMessage,
    FeedbackMessage,
    OutboundMessage,
    ProgressMessage,
    SessionAbortedMessage,
    SessionCompletedMessage,
    SessionStartedMessage,
)
from ..entities.practice_session import AbortReason, PracticeSession, SessionStatus
from ..entities.report import FluencyReport
from ..exceptions import CaptureStalled, RecognitionError, SessionAlreadyActive
from ..interfaces.audio_capture import AudioCapture
from ..interfaces.exercise_provider import ExerciseProvider
from ..interfaces.speech_recognizer import SpeechRecognizer
from .audio_feature_extractor import AudioFeatureExtractor, FrameWatchdog
from .fluency_scorer import FluencyScorer
from .realtime_feedback import RealtimeFeedbackRules
from .transcript_matcher import TranscriptMatcher

logger = logging.getLogger(__name__)

ABORT_MESSAGES = {
    AbortReason.USER_REQUESTED: "Session stopped",
    AbortReason.CAPTURE_STALLED: "We lost the microphone signal. Check your mic and start again",
    AbortReason.PERMISSION_DENIED: "Microphone access was lost. Allow access and start again",
    AbortReason.RECOGNITION_FAILED: "Speech recognition kept failing. Please try again in a moment",
    AbortReason.DISCONNECTED: "Connection closed",
}


class SessionController:
    """
    Owns at most one practice session and fuses audio and transcript events into it.

    This controller owns:
    - The single mutable PracticeSession (never shared)
    - The capture device and recognizer for the duration of a session
    - One inbound queue drained by a single consumer task, so the audio loop
      and the transcript stream never interleave mutations
    - A liveness watchdog that aborts the session when audio stops arriving
    - Emitting feedback, progress, completion and abort messages via an async queue

    The controller is unit-testable without sockets or devices.
    """

    def __init__(
        self,
        exercise_provider: ExerciseProvider,
        audio_capture: AudioCapture,
        speech_recognizer: SpeechRecognizer,
        feature_extractor: Optional[AudioFeatureExtractor] = None,
        matcher: Optional[TranscriptMatcher] = None,
        scorer: Optional[FluencyScorer] = None,
        feedback_rules: Optional[RealtimeFeedbackRules] = None,
        liveness_timeout: float = 3.0,
        watchdog_interval: float = 0.5,
        recognition_error_limit: int = 3,
        feedback_cooldown: float = 3.0,
        silence_volume: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.exercise_provider = exercise_provider
        self.audio_capture = audio_capture
        self.speech_recognizer = speech_recognizer
        self.feature_extractor = feature_extractor or AudioFeatureExtractor()
        self.matcher = matcher or TranscriptMatcher()
        self.scorer = scorer or FluencyScorer()
        self.feedback_rules = feedback_rules or RealtimeFeedbackRules()

        self.watchdog_interval = watchdog_interval
        self.recognition_error_limit = recognition_error_limit
        self.feedback_cooldown = feedback_cooldown
        self.silence_volume = silence_volume
        self._clock = clock
        self._watchdog = FrameWatchdog(liveness_timeout)

        self.session: Optional[PracticeSession] = None
        self.exercise: Optional[ExerciseDefinition] = None

        # Asyncio queues for communication
        self.inbound_queue: asyncio.Queue[InboundEvent] = asyncio.Queue()
        self.outbound_queue: asyncio.Queue[OutboundMessage] = asyncio.Queue()

        # Serializes lifecycle transitions with event handling
        self._lock = asyncio.Lock()

        # Service state
        self._running = False
        self._consumer_task: Optional[asyncio.Task] = None
        self._watchdog_task: Optional[asyncio.Task] = None
        self._started_at: float = 0.0
        self._recognition_errors = 0
        self._last_feedback: Optional[tuple[str, float]] = None

    @property
    def status(self) -> SessionStatus:
        if self.session is None:
            return SessionStatus.IDLE
        return self.session.status

    @property
    def current_target(self) -> Optional[Target]:
        if self.session is None or self.exercise is None or self.session.is_finished:
            return None
        return self.exercise.targets[self.session.current_target_index]

    # ===== Commands =====

    async def start(self, exercise_id: str) -> PracticeSession:
        """
        Start a new session for an exercise.

        Args:
            exercise_id: Identifier of the exercise in the catalog

        Returns:
            The newly active session

        Raises:
            SessionAlreadyActive: If a session is already active
            ExerciseNotFound: If the exercise identifier is unknown
            DeviceUnavailable: If the capture device cannot be acquired
        """
        async with self._lock:
            if self.status is SessionStatus.ACTIVE:
                raise SessionAlreadyActive(
                    "A practice session is already active",
                    session_id=str(self.session.id),
                )

            exercise = self.exercise_provider.get_exercise(exercise_id)

            await self.audio_capture.start()
            try:
                await self.speech_recognizer.start()
            except Exception:
                logger.error(f"Recognizer failed to start for exercise {exercise_id}", exc_info=True)
                await self.audio_capture.stop()
                raise

            self._discard_pending_events()
            session = PracticeSession(
                exercise_id=exercise.exercise_id,
                total_targets=exercise.total_targets,
            )
            session.status = SessionStatus.ACTIVE
            self.session = session
            self.exercise = exercise

            now = self._clock()
            self._started_at = now
            self._watchdog.reset(now)
            self._recognition_errors = 0
            self._last_feedback = None

            self._running = True
            self._consumer_task = asyncio.create_task(self._process_inbound_events())
            self._watchdog_task = asyncio.create_task(self._watch_liveness())

            logger.info(
                f"Session {session.id} started for exercise {exercise.exercise_id} "
                f"({exercise.total_targets} targets)"
            )
            await self._emit(SessionStartedMessage(
                session_id=str(session.id),
                exercise_id=exercise.exercise_id,
                total_targets=exercise.total_targets,
                first_target=exercise.targets[0].text,
            ))
            await self._emit_progress()
            return session

    async def complete(self) -> Optional[FluencyReport]:
        """Finish the active session and score it. A no-op unless Active."""
        async with self._lock:
            if self.status is not SessionStatus.ACTIVE:
                logger.debug(f"Ignoring complete() while {self.status.value}")
                return None
            return await self._complete_locked()

    async def abort(self, reason: AbortReason = AbortReason.USER_REQUESTED, message: str = "") -> bool:
        """
        Abort the active session.

        Stops capture and recognition before returning. Calling it on a session
        that is not active has no effect, so a second call never emits a
        second abort event.

        Returns:
            True if an active session was aborted, False otherwise
        """
        async with self._lock:
            if self.status is not SessionStatus.ACTIVE:
                logger.debug(f"Ignoring abort({reason.value}) while {self.status.value}")
                return False
            await self._abort_locked(reason, message)
            return True

    # ===== Producer API (called by capture and recognition sources) =====

    async def submit_audio_frame(
        self,
        magnitudes: Sequence[float],
        sample_rate: int,
        timestamp: Optional[float] = None,
    ) -> None:
        """
        Submit one captured frame of frequency-bin magnitudes.

        Args:
            magnitudes: Non-negative frequency-bin magnitudes
            sample_rate: Sampling rate in Hz
            timestamp: Capture timestamp, defaults to now
        """
        if not self._accepting_events("audio frame"):
            return
        now = self._clock()
        self._watchdog.mark_frame(now)
        frame = AudioFrame(magnitudes, sample_rate, timestamp if timestamp is not None else now)
        await self.inbound_queue.put(AudioFrameEvent(frame))

    async def submit_partial_transcript(self, text: str, timestamp: Optional[float] = None) -> None:
        """Submit an interim hypothesis from the recognizer."""
        await self._submit_transcript(text, False, timestamp)

    async def submit_final_transcript(self, text: str, timestamp: Optional[float] = None) -> None:
        """Submit a final hypothesis from the recognizer."""
        await self._submit_transcript(text, True, timestamp)

    async def submit_recognition_error(self, message: str) -> None:
        """Report a failure of the speech-to-text source."""
        if not self._accepting_events("recognition error"):
            return
        await self.inbound_queue.put(RecognitionErrorEvent(message))

    async def drain(self) -> None:
        """Wait until every submitted event has been processed."""
        if not self._running:
            self._discard_pending_events()
            return
        await self.inbound_queue.join()

    async def _submit_transcript(self, text: str, is_final: bool, timestamp: Optional[float]) -> None:
        if not self._accepting_events("transcript"):
            return
        event = TranscriptEvent(
            text=text,
            is_final=is_final,
            timestamp=timestamp if timestamp is not None else self._clock(),
        )
        await self.inbound_queue.put(event)

    def _accepting_events(self, kind: str) -> bool:
        if self.status is SessionStatus.ACTIVE:
            return True
        logger.debug(f"Dropping {kind} received while {self.status.value}")
        return False

    # ===== Event Handlers =====

    async def _process_inbound_events(self):
        """Main event processing loop."""
        logger.info(f"Event processing started for session {self.session.id}")

        try:
            while self._running:
                try:
                    # Wait for inbound events with timeout to allow periodic checks
                    event = await asyncio.wait_for(
                        self.inbound_queue.get(),
                        timeout=1.0
                    )
                except asyncio.TimeoutError:
                    continue
                try:
                    await self._handle_event(event)
                except Exception as e:
                    logger.error(f"Error processing event: {e}", exc_info=True)
                    await self._emit(ErrorOutMessage(
                        ErrorCode.INTERNAL_ERROR,
                        f"Internal processing error: {str(e)}"
                    ))
                finally:
                    self.inbound_queue.task_done()
        finally:
            logger.info("Event processing ended")

    async def _handle_event(self, event: InboundEvent):
        """Route event to appropriate handler based on type."""
        async with self._lock:
            if self.status is not SessionStatus.ACTIVE:
                logger.debug(f"Discarding {type(event).__name__} for {self.status.value} session")
                return

            try:
                # A stalled capture wins over anything still queued behind it
                self._watchdog.check(self._clock(), session_id=str(self.session.id))
                await self._dispatch(event)
            except CaptureStalled:
                await self._abort_locked(AbortReason.CAPTURE_STALLED)
            except RecognitionError as e:
                logger.error(str(e))
                await self._abort_locked(AbortReason.RECOGNITION_FAILED, e.message)

    async def _dispatch(self, event: InboundEvent) -> None:
        if isinstance(event, AudioFrameEvent):
            features = self.feature_extractor.extract(
                event.frame.magnitudes, event.frame.sample_rate
            )
            await self.on_audio_frame(features)
        elif isinstance(event, TranscriptEvent):
            if event.is_final:
                await self.on_final_transcript(event.text)
            else:
                await self.on_partial_transcript(event.text)
        elif isinstance(event, RecognitionErrorEvent):
            await self._on_recognition_error(event.message)
        else:
            logger.warning(f"Unknown event type: {type(event)}")

    async def on_audio_frame(self, features: AudioFeatures) -> None:
        """Store the latest audio snapshot and emit advisory feedback."""
        if self.status is not SessionStatus.ACTIVE:
            return
        session = self.session
        features = self.feature_extractor.with_speaking_rate(
            features, session.word_count, self._elapsed_ms()
        )
        session.record_audio(features, self.silence_volume)

        feedback = self.feedback_rules.evaluate(
            features, self.exercise.focus_area, self.exercise.target_words_per_minute
        )
        if feedback is not None and self._should_emit_feedback(feedback.message):
            await self._emit(feedback)

    async def on_partial_transcript(self, text: str) -> None:
        """Update progress on the current target from an interim hypothesis."""
        target = self.current_target
        if self.status is not SessionStatus.ACTIVE or target is None:
            return
        decision = self.matcher.evaluate_interim(text, target.text)
        self.session.record_progress(decision.percent)
        await self._emit_progress()

    async def on_final_transcript(self, text: str) -> None:
        """Accept or reject the current target from a final hypothesis."""
        target = self.current_target
        if self.status is not SessionStatus.ACTIVE or target is None:
            return
        self._recognition_errors = 0
        session = self.session
        decision = self.matcher.evaluate_final(text, target.text)

        if not decision.accepted:
            session.record_progress(decision.percent)
            await self._emit(FeedbackMessage(
                message=f"Almost! Try saying \"{target.text}\" again",
                feedback_type="corrective",
            ))
            await self._emit_progress()
            return

        session.accept_target(text)
        logger.info(
            f"Session {session.id}: target {target.position} accepted at {decision.percent}% "
            f"({session.current_target_index}/{session.total_targets})"
        )
        await self._emit_progress()

        if session.is_finished:
            await self._complete_locked()
        else:
            await self._emit(FeedbackMessage(
                message=f"Great job! Next up: \"{self.current_target.text}\"",
                feedback_type="encouragement",
            ))

    async def _on_recognition_error(self, message: str) -> None:
        """Report a recognizer failure.

        Raises:
            RecognitionError: Once the consecutive failure limit is reached.
        """
        self._recognition_errors += 1
        logger.warning(
            f"Recognition error {self._recognition_errors}/{self.recognition_error_limit}: {message}"
        )
        await self._emit(ErrorOutMessage(ErrorCode.RECOGNITION_ERROR, message))
        if self._recognition_errors >= self.recognition_error_limit:
            raise RecognitionError(message, session_id=str(self.session.id))

    # ===== Lifecycle transitions (caller holds the lock) =====

    async def _complete_locked(self) -> FluencyReport:
        session = self.session
        elapsed_ms = self._elapsed_ms()
        session.status = SessionStatus.COMPLETED
        session.ended_at = datetime.utcnow()
        self._running = False
        self._discard_pending_events()

        report = self.scorer.score(
            session.accumulated_transcript,
            elapsed_ms,
            mean_clarity=session.mean_clarity,
            pause_ratio=session.pause_ratio,
        )
        await self._stop_producers()
        await self._cancel_tasks()

        logger.info(f"Session {session.id} completed with score {report.overall_score}")
        await self._emit(SessionCompletedMessage(
            exercise_id=session.exercise_id,
            overall_score=report.overall_score,
            report=report,
        ))
        return report

    async def _abort_locked(self, reason: AbortReason, message: str = "") -> None:
        session = self.session
        session.status = SessionStatus.ABORTED
        session.abort_reason = reason
        session.ended_at = datetime.utcnow()
        self._running = False
        self._discard_pending_events()

        await self._stop_producers()
        await self._cancel_tasks()

        logger.info(f"Session {session.id} aborted: {reason.value}")
        await self._emit(SessionAbortedMessage(
            reason=reason,
            message=message or ABORT_MESSAGES[reason],
        ))

    async def _stop_producers(self) -> None:
        for name, source in (("capture", self.audio_capture), ("recognizer", self.speech_recognizer)):
            try:
                await source.stop()
            except Exception as e:
                logger.error(f"Error stopping {name}: {e}", exc_info=True)

    async def _cancel_tasks(self) -> None:
        current = asyncio.current_task()
        tasks = [
            task for task in (self._consumer_task, self._watchdog_task)
            if task is not None and task is not current and not task.done()
        ]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _watch_liveness(self) -> None:
        """Abort the session when no audio frame arrives within the liveness window."""
        while self._running:
            await asyncio.sleep(self.watchdog_interval)
            try:
                self._watchdog.check(self._clock(), session_id=str(self.session.id))
            except CaptureStalled:
                await self.abort(AbortReason.CAPTURE_STALLED)
                return

    # ===== Helpers =====

    def _discard_pending_events(self) -> None:
        while True:
            try:
                self.inbound_queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self.inbound_queue.task_done()

    def _elapsed_ms(self) -> float:
        return max(0.0, (self._clock() - self._started_at) * 1000.0)

    def _should_emit_feedback(self, message: str) -> bool:
        now = self._clock()
        if self._last_feedback is not None:
            last_message, last_time = self._last_feedback
            if last_message == message and now - last_time < self.feedback_cooldown:
                return False
        self._last_feedback = (message, now)
        return True

    async def _emit(self, message: OutboundMessage) -> None:
        await self.outbound_queue.put(message)

    async def _emit_progress(self) -> None:
        session = self.session
        target = self.current_target
        await self._emit(ProgressMessage(
            current_target_index=session.current_target_index,
            current_target_progress=session.current_target_progress,
            overall_progress_percent=session.overall_progress_percent,
            current_target=target.text if target else None,
        ))

    def get_session_state(self) -> dict:
        """Get the current session state as a dictionary.

        Returns:
            Dictionary representation of session state
        """
        session = self.session
        if session is None:
            return {"status": SessionStatus.IDLE.value}
        return {
            "session_id": str(session.id),
            "exercise_id": session.exercise_id,
            "status": session.status.value,
            "current_target_index": session.current_target_index,
            "current_target_progress": session.current_target_progress,
            "overall_progress_percent": session.overall_progress_percent,
            "total_targets": session.total_targets,
            "accumulated_transcript": list(session.accumulated_transcript),
            "audio_features": session.audio_features.model_dump(),
            "abort_reason": session.abort_reason.value if session.abort_reason else None,
            "pending_events": self.inbound_queue.qsize(),
            "last_activity": session.last_activity_at.isoformat() if session.last_activity_at else None,
        }
