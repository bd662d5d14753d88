"""
Frame Evaluator - Turns one tick's observations into warning signals

Pipeline per tick:
1. Centering (and reference position refresh)
2. Multi-person detection
3. Head movement drift against the current reference
4. Identity verification against the captured baseline
5. Forbidden object detection
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Iterable, Optional

from ..scoring import AlertPrioritizer
from ..types import Observation, WarningState
from .signals import (
    descriptor_distance,
    find_centered_pose,
    forbidden_labels,
    select_centered_face,
    usable_faces
)

if TYPE_CHECKING:
    from ..baseline import BaselineManager

logger = logging.getLogger(__name__)


class FrameEvaluator:
    """
    Evaluates observations against the session baseline.

    The evaluator holds no state of its own between ticks. The only thing
    it writes is the reference head position, through the baseline manager.
    """

    DEFAULT_TOLERANCE = 0.08
    DEFAULT_IDENTITY_THRESHOLD = 0.6
    DEFAULT_OBJECT_CONFIDENCE = 0.5
    DEFAULT_SETTLE_DELAY = 0.3
    DEFAULT_DESCRIPTOR_LENGTH = 128

    FORBIDDEN_OBJECTS = frozenset({
        "cell phone",
        "phone",
        "tablet",
        "book",
        "remote",
        "backpack",
        "mouse",
        "tv",
        "television",
        "keyboard",
        "laptop",
    })

    def __init__(
        self,
        baseline: "BaselineManager",
        prioritizer: Optional[AlertPrioritizer] = None,
        center_tolerance: float = DEFAULT_TOLERANCE,
        identity_threshold: float = DEFAULT_IDENTITY_THRESHOLD,
        object_confidence: float = DEFAULT_OBJECT_CONFIDENCE,
        forbidden_objects: Optional[Iterable[str]] = None,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        descriptor_length: int = DEFAULT_DESCRIPTOR_LENGTH
    ):
        """
        Initialize the frame evaluator.

        Args:
            baseline: Baseline manager for the active session
            prioritizer: Alert prioritizer used to pick the active message
            center_tolerance: Centering tolerance on each axis (normalized)
            identity_threshold: Descriptor distance above which the person is unauthorized
            object_confidence: Minimum confidence (exclusive) for forbidden objects
            forbidden_objects: Disallowed object labels (case-insensitive)
            settle_delay: Seconds to wait before resolving centering for capture
            descriptor_length: Expected face descriptor length
        """
        self.baseline = baseline
        self.prioritizer = prioritizer or AlertPrioritizer()
        self.center_tolerance = center_tolerance
        self.identity_threshold = identity_threshold
        self.object_confidence = object_confidence
        self.forbidden_objects = frozenset(
            name.lower() for name in (forbidden_objects or self.FORBIDDEN_OBJECTS)
        )
        self.settle_delay = settle_delay
        self.descriptor_length = descriptor_length

    def is_face_centered(self, observation: Observation) -> bool:
        return find_centered_pose(observation.poses, self.center_tolerance) is not None

    async def settle_centering(self, observation: Observation) -> bool:
        """
        Resolve the centering predicate after the settle delay.

        The delay is a fixed latency so a UI caller can reflect the guide
        overlay before the capture decision lands.
        """
        centered = self.is_face_centered(observation)
        if self.settle_delay > 0:
            await asyncio.sleep(self.settle_delay)
        return centered

    def evaluate(self, observation: Observation, full: bool = True) -> WarningState:
        """
        Evaluate a single tick.

        Args:
            observation: Fresh observations for this tick
            full: False during calibration (pose signals only)

        Returns:
            WarningState with `active_message` set when `full` is True
        """
        poses = observation.poses
        centered_pose = find_centered_pose(poses, self.center_tolerance)
        tracked = centered_pose or (poses[0] if poses and poses[0].landmarks else None)

        # 1. Centering: refresh the reference to the latest good position
        horizontal_drift = 0.0
        vertical_drift = 0.0
        if tracked is not None:
            nose = tracked.nose
            if centered_pose is not None or self.baseline.reference_head_position is None:
                self.baseline.update_reference_head_position(nose)

            # 3. Drift against the (possibly just refreshed) reference
            reference = self.baseline.reference_head_position
            horizontal_drift = abs(nose.x - reference.x)
            vertical_drift = abs(nose.y - reference.y)

        # 2. Multi-person
        multiple_people = len(poses) > 1

        face_detected = len(poses) > 0
        unauthorized_person = False
        identity_distance = None
        forbidden = frozenset()

        if full:
            # 4. Identity
            if self.baseline.captured:
                face = select_centered_face(usable_faces(observation.faces, self.descriptor_length))
                if face is None:
                    face_detected = False
                else:
                    face_detected = True
                    identity_distance = descriptor_distance(face.descriptor, self.baseline.baseline_identity)
                    unauthorized_person = identity_distance > self.identity_threshold

            # 5. Forbidden objects
            forbidden = forbidden_labels(observation.objects, self.forbidden_objects, self.object_confidence)

        state = WarningState(
            multiple_people=multiple_people,
            face_detected=face_detected,
            unauthorized_person=unauthorized_person,
            horizontal_drift=horizontal_drift,
            vertical_drift=vertical_drift,
            forbidden_objects=forbidden,
            face_centered=centered_pose is not None,
            people_count=len(poses),
            identity_distance=identity_distance
        )

        if not full:
            return state
        return self.prioritizer.apply(state)
