"""
Monitor Logger - Structured log lines for monitoring events
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def log_monitor_event(
    session_id: str,
    event_type: str,
    details: Optional[Dict[str, Any]] = None,
    level: str = "info"
):
    """
    Log a monitoring event.

    Args:
        session_id: Monitor session ID
        event_type: Type of event (session_start, state_change, capture, ...)
        details: Optional event details
        level: Log level (debug, info, warning, error)
    """
    message = f"[MONITOR] session={session_id} event={event_type}"

    if details:
        detail_str = " ".join(f"{k}={v}" for k, v in details.items())
        message += f" {detail_str}"

    if level == "debug":
        logger.debug(message)
    elif level == "warning":
        logger.warning(message)
    elif level == "error":
        logger.error(message)
    else:
        logger.info(message)


def log_session_start(session_id: str, tick_interval: float):
    log_monitor_event(
        session_id=session_id,
        event_type="session_start",
        details={"tick_interval": tick_interval}
    )


def log_session_end(session_id: str, ticks: int, captured: bool):
    log_monitor_event(
        session_id=session_id,
        event_type="session_end",
        details={"ticks": ticks, "captured": captured}
    )


def log_state_change(session_id: str, previous: str, current: str):
    log_monitor_event(
        session_id=session_id,
        event_type="state_change",
        details={"from": previous, "to": current}
    )


def log_capture_attempt(session_id: str, outcome: str, brightness: Optional[float] = None):
    """Log the result of a baseline capture attempt"""
    details = {"outcome": outcome}
    if brightness is not None:
        details["brightness"] = round(brightness, 1)
    log_monitor_event(
        session_id=session_id,
        event_type="capture",
        details=details,
        level="info" if outcome == "captured" else "warning"
    )


def log_warning_changed(session_id: str, message: str):
    """Log when the active warning message changes"""
    log_monitor_event(
        session_id=session_id,
        event_type="warning",
        details={"message": repr(message) if message else "cleared"},
        level="warning" if message else "info"
    )
