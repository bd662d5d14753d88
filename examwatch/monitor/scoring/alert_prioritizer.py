"""
Alert Prioritizer - Picks the single warning shown for a tick

Rules are evaluated top to bottom and the first match wins. The order is a
severity ranking: presence and identity violations outrank forbidden
objects, which outrank head movement. Messages are never combined.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, List, NamedTuple

from ..types import WarningState

logger = logging.getLogger(__name__)

DEFAULT_MOVEMENT_THRESHOLD = 0.02

MULTIPLE_PEOPLE_MESSAGE = "Critical Warning: More than one person detected!"
UNAUTHORIZED_PERSON_MESSAGE = "Warning: Unauthorized person detected!"
NO_FACE_MESSAGE = "Warning: No face detected!"
HEAD_MOVEMENT_MESSAGE = "Head movement detected!"


class AlertLevel(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    NONE = "none"


class AlertRule(NamedTuple):
    name: str
    level: AlertLevel
    matches: Callable[[WarningState, float], bool]
    message: Callable[[WarningState], str]


def forbidden_objects_message(state: WarningState) -> str:
    return f"{', '.join(sorted(state.forbidden_objects))} detected! Please remove it."


ALERT_RULES: List[AlertRule] = [
    AlertRule(
        "multiple_people",
        AlertLevel.CRITICAL,
        lambda s, _: s.multiple_people,
        lambda s: MULTIPLE_PEOPLE_MESSAGE,
    ),
    AlertRule(
        "unauthorized_person",
        AlertLevel.CRITICAL,
        lambda s, _: s.unauthorized_person,
        lambda s: UNAUTHORIZED_PERSON_MESSAGE,
    ),
    AlertRule(
        "no_face",
        AlertLevel.WARNING,
        lambda s, _: not s.face_detected,
        lambda s: NO_FACE_MESSAGE,
    ),
    AlertRule(
        "forbidden_objects",
        AlertLevel.CRITICAL,
        lambda s, _: len(s.forbidden_objects) > 0,
        forbidden_objects_message,
    ),
    AlertRule(
        "head_movement",
        AlertLevel.WARNING,
        lambda s, t: s.horizontal_drift > t or s.vertical_drift > t,
        lambda s: HEAD_MOVEMENT_MESSAGE,
    ),
]


def prioritize(state: WarningState, movement_threshold: float = DEFAULT_MOVEMENT_THRESHOLD) -> str:
    """
    Return the highest-priority warning message, or "" when nothing applies.

    Pure function of the signal fields; `active_message` is ignored.
    """
    for rule in ALERT_RULES:
        if rule.matches(state, movement_threshold):
            return rule.message(state)
    return ""


class AlertPrioritizer:
    """
    Applies the alert table to warning states.

    Wraps `prioritize` with a configurable movement threshold and exposes
    the level and name of the winning rule.
    """

    def __init__(self, movement_threshold: float = DEFAULT_MOVEMENT_THRESHOLD):
        """
        Initialize prioritizer.

        Args:
            movement_threshold: Normalized drift above which head movement is flagged
        """
        self.movement_threshold = movement_threshold

    def select(self, state: WarningState) -> str:
        return prioritize(state, self.movement_threshold)

    def apply(self, state: WarningState) -> WarningState:
        """Return a copy of `state` with `active_message` filled in"""
        return replace(state, active_message=self.select(state))

    def matched_rule(self, state: WarningState) -> str:
        """Name of the winning rule ('none' if no warning)"""
        for rule in ALERT_RULES:
            if rule.matches(state, self.movement_threshold):
                return rule.name
        return "none"

    def level(self, state: WarningState) -> AlertLevel:
        for rule in ALERT_RULES:
            if rule.matches(state, self.movement_threshold):
                return rule.level
        return AlertLevel.NONE
