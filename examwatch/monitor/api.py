"""
Monitor API - FastAPI endpoints for the live proctoring monitor

Exactly one monitoring session is active at a time.

Endpoints:
- POST /api/monitor/start - Start the monitoring session
- POST /api/monitor/capture - Capture the baseline identity
- GET /api/monitor/status - Current warning and calibration status
- POST /api/monitor/reset - Clear the baseline and recalibrate
- POST /api/monitor/stop - Stop the session
- GET /api/monitor/models-status - Model weight availability
- GET /api/monitor/health - Health check
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config import settings
from .scheduler import MonitorState, SessionScheduler, create_scheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/monitor", tags=["Monitoring"])

# The single active session
_monitor: Optional[SessionScheduler] = None


# ============== Request/Response Models ==============

class StartSessionRequest(BaseModel):
    """Optional start parameters"""
    session_id: Optional[str] = Field(None, description="Resume the persisted anchors of this session")


class StartSessionResponse(BaseModel):
    """Response after starting a session"""
    session_id: str
    state: str
    message: str


class CaptureResponse(BaseModel):
    """Outcome of a capture request"""
    captured: bool
    state: str
    calibration_status: str


class WarningResponse(BaseModel):
    """Signals from the most recent tick"""
    multiple_people: bool
    face_detected: bool
    unauthorized_person: bool
    horizontal_drift: float
    vertical_drift: float
    forbidden_objects: List[str] = Field(default_factory=list)
    face_centered: bool
    people_count: int
    identity_distance: Optional[float] = None
    active_message: str


class MonitorStatusResponse(BaseModel):
    """Current session status"""
    session_id: str
    state: str
    active_message: str = Field(..., description="Top-priority warning, empty when none")
    calibration_status: str
    captured: bool
    tick_count: int
    streams: Dict[str, bool]
    warning: WarningResponse


class StopSessionResponse(BaseModel):
    """Final session summary"""
    session_id: str
    state: str
    ticks: int
    captured: bool


class ModelStatusResponse(BaseModel):
    """Model availability status"""
    pose_landmarker: bool
    dlib_predictor: bool
    dlib_face_encoder: bool
    yolo_model: bool
    mediapipe: bool


def _require_monitor() -> SessionScheduler:
    if _monitor is None or _monitor.state is MonitorState.TERMINATED:
        raise HTTPException(status_code=404, detail="No active monitoring session")
    return _monitor


def _status_response(monitor: SessionScheduler) -> MonitorStatusResponse:
    snapshot = monitor.snapshot()
    return MonitorStatusResponse(
        session_id=snapshot["session_id"],
        state=snapshot["state"],
        active_message=snapshot["active_message"],
        calibration_status=snapshot["calibration_status"],
        captured=snapshot["captured"],
        tick_count=snapshot["tick_count"],
        streams=snapshot["streams"],
        warning=WarningResponse(**snapshot["warning"])
    )


# ============== API Endpoints ==============

@router.post("/start", response_model=StartSessionResponse)
async def start_session(request: Optional[StartSessionRequest] = None):
    """
    Start the monitoring session.

    Models load in the background; the session reports the
    'uninitialized' state until they are ready. Passing the id of an
    interrupted session picks up its persisted reference head position.
    """
    global _monitor

    if _monitor is not None and _monitor.state is not MonitorState.TERMINATED:
        raise HTTPException(status_code=409, detail="A monitoring session is already active")

    try:
        session_id = request.session_id if request else None
        monitor = create_scheduler(settings, session_id=session_id)
        await monitor.start()
    except Exception as e:
        logger.error(f"Failed to start monitoring session: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    _monitor = monitor
    logger.info(f"Started monitoring session: {monitor.session.id}")

    return StartSessionResponse(
        session_id=monitor.session.id,
        state=monitor.state.value,
        message="Monitoring session started"
    )


@router.post("/capture", response_model=CaptureResponse)
async def capture_face():
    """
    Capture the baseline identity from the current frame.

    Precondition failures (not centered, poor lighting, no face) are not
    errors; they come back as guidance in `calibration_status`.
    """
    monitor = _require_monitor()

    try:
        status = await monitor.request_capture()
    except Exception as e:
        logger.error(f"Capture error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return CaptureResponse(
        captured=monitor.session.captured,
        state=monitor.state.value,
        calibration_status=status
    )


@router.get("/status", response_model=MonitorStatusResponse)
async def get_status():
    """Get the current warning and calibration status"""
    return _status_response(_require_monitor())


@router.post("/reset", response_model=MonitorStatusResponse)
async def reset_baseline():
    """
    Clear the captured baseline and return to calibration.
    """
    monitor = _require_monitor()
    await monitor.reset()
    logger.info(f"Baseline reset for session {monitor.session.id}")
    return _status_response(monitor)


@router.post("/stop", response_model=StopSessionResponse)
async def stop_session():
    """
    Stop the monitoring session and clear its baseline.
    """
    global _monitor

    monitor = _require_monitor()
    captured = monitor.session.captured

    try:
        await monitor.stop()
    except Exception as e:
        logger.error(f"Error stopping session: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        _monitor = None

    return StopSessionResponse(
        session_id=monitor.session.id,
        state=monitor.state.value,
        ticks=monitor.tick_count,
        captured=captured
    )


@router.get("/models-status", response_model=ModelStatusResponse)
async def get_models_status():
    """
    Check which perception models are available.
    """
    from .models.model_loader import check_models

    return ModelStatusResponse(**check_models())


@router.get("/health")
async def health_check():
    """Health check for the monitoring module"""
    return {
        "status": "healthy",
        "active_session": _monitor.session.id if _monitor is not None else None,
        "state": _monitor.state.value if _monitor is not None else None,
        "module": "monitoring"
    }


async def shutdown_monitor():
    """Stop the active session (service shutdown)"""
    global _monitor

    if _monitor is not None:
        await _monitor.stop()
        _monitor = None
