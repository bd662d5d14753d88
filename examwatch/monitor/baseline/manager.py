"""
Baseline Manager - Establishes and persists the session's calibration anchors

Two anchors are kept:
- Identity: the face descriptor captured once under good framing and lighting
- Reference head position: the most recent centered nose position, which
  moves forward in time so small posture changes are absorbed
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from ..errors import AlreadyCaptured, CaptureFailure, NoCenteredFace, NoFaceDetected, PoorLighting
from ..evaluation.signals import find_centered_pose, select_centered_face, usable_faces
from ..session import MonitorSession
from ..types import Observation, Point
from ..utils.frame_quality import classify_lighting
from .store import BaselineStore

logger = logging.getLogger(__name__)

REFERENCE_POSITION_KEY = "referenceNosePosition"
FACE_LANDMARKS_KEY = "faceLandmarks"


@dataclass
class CaptureResult:
    """Outcome of an identity capture attempt"""
    descriptor: Optional[np.ndarray] = None
    error: Optional[CaptureFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.descriptor is not None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error.guidance
        return "Face captured successfully!"


class BaselineManager:
    """
    Owns all writes to the session baseline.

    The frame evaluator reads the baseline through this manager and asks it
    to refresh the reference head position; nothing else mutates it.
    """

    DEFAULT_TOLERANCE = 0.08
    DEFAULT_MIN_BRIGHTNESS = 50.0
    DEFAULT_MAX_BRIGHTNESS = 200.0
    DEFAULT_LOW_LIGHT_HINT = 70.0
    DEFAULT_DESCRIPTOR_LENGTH = 128

    def __init__(
        self,
        session: MonitorSession,
        store: BaselineStore,
        center_tolerance: float = DEFAULT_TOLERANCE,
        min_brightness: float = DEFAULT_MIN_BRIGHTNESS,
        max_brightness: float = DEFAULT_MAX_BRIGHTNESS,
        low_light_hint: float = DEFAULT_LOW_LIGHT_HINT,
        descriptor_length: int = DEFAULT_DESCRIPTOR_LENGTH
    ):
        """
        Initialize the baseline manager.

        Args:
            session: Session whose anchors this manager owns
            store: Key-value store used to persist anchors across reloads
            center_tolerance: Centering tolerance on each axis (normalized)
            min_brightness: Low-light floor for capture (0-255)
            max_brightness: High-light ceiling for capture (0-255)
            low_light_hint: Below this, a failed face detection suggests better lighting
            descriptor_length: Expected face descriptor length
        """
        self.session = session
        self.store = store
        self.center_tolerance = center_tolerance
        self.min_brightness = min_brightness
        self.max_brightness = max_brightness
        self.low_light_hint = low_light_hint
        self.descriptor_length = descriptor_length

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def captured(self) -> bool:
        return self.session.captured

    @property
    def baseline_identity(self) -> Optional[np.ndarray]:
        return self.session.baseline_identity

    def try_capture_identity(self, observation: Observation, lighting_level: float) -> CaptureResult:
        """
        Attempt to capture the baseline identity from an observation.

        Args:
            observation: Poses and faces from the current frame
            lighting_level: Mean frame brightness (0-255)

        Returns:
            CaptureResult with the stored descriptor, or the failure that
            blocked capture. Failures never touch the stored identity.
        """
        if self.session.captured:
            return CaptureResult(error=AlreadyCaptured())

        if find_centered_pose(observation.poses, self.center_tolerance) is None:
            return CaptureResult(error=NoCenteredFace())

        lighting = classify_lighting(lighting_level, self.min_brightness, self.max_brightness)
        if lighting != "ok":
            return CaptureResult(error=PoorLighting(lighting_level, too_dark=lighting == "too_dark"))

        face = select_centered_face(usable_faces(observation.faces, self.descriptor_length))
        if face is None:
            if lighting_level < self.low_light_hint:
                return CaptureResult(error=NoFaceDetected(NoFaceDetected.LOW_LIGHT))
            return CaptureResult(error=NoFaceDetected())

        descriptor = face.descriptor.copy()
        descriptor.setflags(write=False)
        self.session.baseline_identity = descriptor
        self.store.set(self._key(FACE_LANDMARKS_KEY), [p.to_dict() for p in face.landmarks])

        logger.info(
            f"Baseline identity captured for session {self.session.id} "
            f"(brightness={lighting_level:.1f}, faces={len(observation.faces)})"
        )
        return CaptureResult(descriptor=descriptor)

    def load_face_landmarks(self) -> List[Point]:
        """Landmark snapshot persisted at capture time"""
        stored = self.store.get(self._key(FACE_LANDMARKS_KEY)) or []
        return [Point.from_dict(p) for p in stored]

    # ------------------------------------------------------------------
    # Reference head position
    # ------------------------------------------------------------------

    @property
    def reference_head_position(self) -> Optional[Point]:
        return self.session.baseline_head_position

    def update_reference_head_position(self, point: Point):
        """Overwrite the reference head position and persist it"""
        self.session.baseline_head_position = point
        self.store.set(self._key(REFERENCE_POSITION_KEY), point.to_dict())

    def load_reference_head_position(self) -> Optional[Point]:
        """Read the persisted reference position back from the store"""
        stored = self.store.get(self._key(REFERENCE_POSITION_KEY))
        return Point.from_dict(stored) if stored else None

    def restore(self):
        """Re-hydrate the reference position from the store (after a reload)"""
        point = self.load_reference_head_position()
        if point is not None:
            self.session.baseline_head_position = point
            logger.info(f"Restored reference head position for session {self.session.id}")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self):
        """Clear all anchors (explicit operator action)"""
        self.session.reset()
        self._clear_store()
        logger.info(f"Baseline reset for session {self.session.id}")

    def teardown(self):
        """Clear persisted anchors at session end"""
        self.session.reset()
        self._clear_store()

    def snapshot(self) -> Dict[str, Any]:
        reference = self.session.baseline_head_position
        return {
            "captured": self.session.captured,
            "reference_head_position": reference.to_dict() if reference else None,
        }

    def _clear_store(self):
        self.store.delete(self._key(REFERENCE_POSITION_KEY))
        self.store.delete(self._key(FACE_LANDMARKS_KEY))

    def _key(self, name: str) -> str:
        return f"{self.session.id}:{name}"
