"""
Session Scheduler - Drives the monitoring pipeline on a fixed cadence

States:
    UNINITIALIZED -> CALIBRATING -> MONITORING -> TERMINATED

- UNINITIALIZED: perception models still loading, no evaluation
- CALIBRATING: pose-only evaluation keeps the centering signal live
- MONITORING: full evaluation and alert prioritization every tick
- TERMINATED: loop stopped, baseline torn down

CALIBRATING -> MONITORING happens only on a successful capture. Going back
to CALIBRATING requires an explicit reset.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, Optional

from ..config import Settings
from .adapters import CaptureSource, FaceAdapter, FrameSource, ObjectAdapter, PoseAdapter, SignalHub
from .baseline import BaselineManager, CaptureResult, create_store
from .errors import FrameNotReady, NoCenteredFace
from .evaluation import FrameEvaluator
from .scoring import AlertPrioritizer
from .session import MonitorSession
from .types import Observation, WarningState
from .utils.logging import (
    log_capture_attempt,
    log_session_end,
    log_session_start,
    log_state_change,
    log_warning_changed
)

logger = logging.getLogger(__name__)

LOADING_STATUS = "Loading models..."
ALIGN_STATUS = "Align your face in the center and capture."
MODELS_NOT_READY_STATUS = "Models are still loading. Please wait..."
CAMERA_NOT_READY_STATUS = "Camera is not ready yet."
SESSION_ENDED_STATUS = "Session has ended."


class MonitorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CALIBRATING = "calibrating"
    MONITORING = "monitoring"
    TERMINATED = "terminated"


class SessionScheduler:
    """
    Sole driver of the monitoring pipeline for one session.

    Ticks and capture attempts share one lock, so they never overlap and
    the baseline is only touched by one of them at a time.
    """

    DEFAULT_TICK_INTERVAL = 0.3

    def __init__(
        self,
        hub: SignalHub,
        source: FrameSource,
        baseline: BaselineManager,
        evaluator: FrameEvaluator,
        tick_interval: float = DEFAULT_TICK_INTERVAL
    ):
        """
        Initialize the scheduler.

        Args:
            hub: Signal hub wrapping the perception adapters
            source: Live frame source
            baseline: Baseline manager for the session
            evaluator: Frame evaluator bound to the same baseline
            tick_interval: Seconds between tick starts
        """
        self.hub = hub
        self.source = source
        self.baseline = baseline
        self.evaluator = evaluator
        self.tick_interval = tick_interval

        self._state = MonitorState.UNINITIALIZED
        self._calibration_status = LOADING_STATUS
        self._warning_state = WarningState()
        self._active_message = ""

        self._tick_lock = asyncio.Lock()
        self._stop_event: Optional[asyncio.Event] = None
        self._stopping = False
        self._task: Optional[asyncio.Task] = None

        self.tick_count = 0
        self.overrun_count = 0

    # ------------------------------------------------------------------
    # Read-only presentation state
    # ------------------------------------------------------------------

    @property
    def session(self) -> MonitorSession:
        return self.baseline.session

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def active_message(self) -> str:
        return self._active_message

    @property
    def calibration_status(self) -> str:
        return self._calibration_status

    @property
    def warning_state(self) -> WarningState:
        return self._warning_state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self):
        """Start the driver loop"""
        if self._state is MonitorState.TERMINATED:
            raise RuntimeError("Scheduler has been stopped")
        if self._task is not None:
            raise RuntimeError("Scheduler already started")

        self._stop_event = asyncio.Event()
        self.baseline.restore()
        log_session_start(self.session.id, self.tick_interval)
        self._task = asyncio.create_task(self._run(), name=f"monitor-{self.session.id}")

    async def stop(self):
        """
        Stop the loop before the next tick and tear down the baseline.

        An in-flight tick is allowed to finish; its results are discarded.
        """
        if self._state is MonitorState.TERMINATED:
            return

        self._stopping = True
        if self._stop_event is not None:
            self._stop_event.set()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        async with self._tick_lock:
            self._set_state(MonitorState.TERMINATED)
            self._calibration_status = SESSION_ENDED_STATUS
            captured = self.session.captured
            self.baseline.teardown()

        self.hub.close()
        self.source.release()
        log_session_end(self.session.id, self.tick_count, captured)

    async def reset(self):
        """Clear the baseline and return to calibration (operator action)"""
        async with self._tick_lock:
            if self._state is MonitorState.TERMINATED:
                return
            self.baseline.reset()
            self._warning_state = WarningState()
            self._publish_message("")
            if self._state is MonitorState.MONITORING:
                self._set_state(MonitorState.CALIBRATING)
            if self._state is MonitorState.CALIBRATING:
                self._calibration_status = ALIGN_STATUS

    async def _run(self):
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while not self._stop_event.is_set():
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Tick failed for session {self.session.id}: {e}")

            next_tick += self.tick_interval
            now = loop.time()
            if next_tick < now:
                # Overran the slot: start the next tick now, skip missed slots
                self.overrun_count += 1
                next_tick = now

            if await self._wait_for_stop(next_tick - now):
                break

    async def _wait_for_stop(self, timeout: float) -> bool:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(0.0, timeout))
            return True
        except asyncio.TimeoutError:
            return False

    # ------------------------------------------------------------------
    # Ticks
    # ------------------------------------------------------------------

    async def tick(self) -> Optional[WarningState]:
        """
        Run one evaluation cycle.

        Returns:
            The published WarningState, or None if the tick was skipped
        """
        async with self._tick_lock:
            if self._stopping or self._state is MonitorState.TERMINATED:
                return None

            if self._state is MonitorState.UNINITIALIZED:
                await self._try_initialize()
                if self._state is MonitorState.UNINITIALIZED:
                    return None
            else:
                await self._retry_pending_adapters()

            monitoring = self._state is MonitorState.MONITORING

            try:
                frame = await asyncio.to_thread(self.source.read)
            except FrameNotReady as e:
                logger.debug(f"Skipping tick: {e}")
                return None

            observation = await self.hub.observe(
                frame,
                frame.timestamp,
                include_faces=monitoring,
                include_objects=monitoring
            )

            if self._stopping:
                return None

            try:
                state = self.evaluator.evaluate(observation, full=monitoring)
            except Exception as e:
                logger.warning(f"Tick evaluation failed: {e}")
                return None

            self.tick_count += 1
            self._warning_state = state
            self._publish_message(state.active_message if monitoring else "")
            return state

    async def _try_initialize(self):
        status = await self.hub.initialize()
        if not status.get("pose"):
            return

        missing = [name for name, ready in status.items() if not ready]
        if missing:
            logger.warning(f"Monitoring with degraded streams: {', '.join(missing)}")

        if self.session.captured:
            self._set_state(MonitorState.MONITORING)
        else:
            self._set_state(MonitorState.CALIBRATING)
            self._calibration_status = ALIGN_STATUS

    async def _retry_pending_adapters(self):
        """Load adapters that failed or were still loading on an earlier tick"""
        pending = [name for name, ready in self.hub.status().items() if not ready]
        if not pending:
            return
        status = await self.hub.initialize()
        recovered = [name for name in pending if status.get(name)]
        if recovered:
            logger.info(f"Streams recovered: {', '.join(recovered)}")

    # ------------------------------------------------------------------
    # Capture
    # ------------------------------------------------------------------

    async def request_capture(self) -> str:
        """
        Try to capture the baseline identity from the current frame.

        Waits for the centering settle delay before deciding. The outcome
        is reported through `calibration_status`, which is also returned.
        """
        async with self._tick_lock:
            if self._state is MonitorState.TERMINATED or self._stopping:
                return SESSION_ENDED_STATUS

            if self.session.captured:
                result = self.baseline.try_capture_identity(Observation(), 0.0)
                self._calibration_status = result.message
                return self._calibration_status

            if self._state is not MonitorState.UNINITIALIZED:
                await self._retry_pending_adapters()

            if self._state is MonitorState.UNINITIALIZED or not self.hub.face.ready:
                self._calibration_status = MODELS_NOT_READY_STATUS
                log_capture_attempt(self.session.id, "models_not_ready")
                return self._calibration_status

            try:
                frame = await asyncio.to_thread(self.source.read)
            except FrameNotReady:
                self._calibration_status = CAMERA_NOT_READY_STATUS
                log_capture_attempt(self.session.id, "frame_not_ready")
                return self._calibration_status

            observation = await self.hub.observe(
                frame,
                frame.timestamp,
                include_faces=True,
                include_objects=False,
                measure_light=True
            )

            centered = await self.evaluator.settle_centering(observation)
            if self._stopping:
                return SESSION_ENDED_STATUS

            if not centered:
                result = CaptureResult(error=NoCenteredFace())
            else:
                result = self.baseline.try_capture_identity(observation, observation.brightness)

            self._calibration_status = result.message
            outcome = "captured" if result.ok else type(result.error).__name__
            log_capture_attempt(self.session.id, outcome, observation.brightness)

            if result.ok:
                self._set_state(MonitorState.MONITORING)
            return self._calibration_status

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_state(self, state: MonitorState):
        if state is self._state:
            return
        log_state_change(self.session.id, self._state.value, state.value)
        self._state = state

    def _publish_message(self, message: str):
        if message != self._active_message:
            log_warning_changed(self.session.id, message)
        self._active_message = message

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view for the presentation layer"""
        return {
            "session_id": self.session.id,
            "state": self._state.value,
            "active_message": self._active_message,
            "calibration_status": self._calibration_status,
            "captured": self.session.captured,
            "tick_count": self.tick_count,
            "streams": self.hub.status(),
            "warning": self._warning_state.to_dict(),
        }


def create_scheduler(
    settings: Settings,
    source: Optional[FrameSource] = None,
    session_id: Optional[str] = None
) -> SessionScheduler:
    """
    Wire a scheduler from configuration.

    Args:
        settings: Service settings
        source: Optional frame source (defaults to the configured camera)
        session_id: Resume the persisted anchors of this session id
    """
    session = MonitorSession(id=session_id) if session_id else MonitorSession()
    store = create_store(
        settings.BASELINE_STORE,
        path=settings.BASELINE_STORE_PATH,
        redis_url=settings.REDIS_URL,
        ttl=settings.BASELINE_TTL
    )
    baseline = BaselineManager(
        session,
        store,
        center_tolerance=settings.CENTER_TOLERANCE,
        min_brightness=settings.MIN_BRIGHTNESS,
        max_brightness=settings.MAX_BRIGHTNESS,
        low_light_hint=settings.LOW_LIGHT_HINT,
        descriptor_length=settings.DESCRIPTOR_LENGTH
    )
    evaluator = FrameEvaluator(
        baseline,
        prioritizer=AlertPrioritizer(movement_threshold=settings.MOVEMENT_THRESHOLD),
        center_tolerance=settings.CENTER_TOLERANCE,
        identity_threshold=settings.IDENTITY_THRESHOLD,
        object_confidence=settings.OBJECT_CONFIDENCE,
        forbidden_objects=settings.FORBIDDEN_OBJECTS,
        settle_delay=settings.SETTLE_DELAY_SECONDS,
        descriptor_length=settings.DESCRIPTOR_LENGTH
    )
    hub = SignalHub(
        pose=PoseAdapter(model_path=settings.POSE_MODEL_PATH, max_poses=settings.MAX_POSES),
        face=FaceAdapter(
            predictor_path=settings.DLIB_PREDICTOR_PATH,
            face_model_path=settings.DLIB_FACE_MODEL_PATH
        ),
        objects=ObjectAdapter(model_path=settings.YOLO_MODEL_PATH, confidence=settings.OBJECT_CONFIDENCE)
    )
    return SessionScheduler(
        hub,
        source or CaptureSource(settings.CAMERA_SOURCE),
        baseline,
        evaluator,
        tick_interval=settings.TICK_INTERVAL_SECONDS
    )
