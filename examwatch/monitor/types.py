"""
Monitor Types - Observations and per-tick warning state

All spatial values are normalized to the frame: (0, 0) is the top-left
corner and (1, 1) the bottom-right.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import numpy as np

FRAME_CENTER: Tuple[float, float] = (0.5, 0.5)


@dataclass(frozen=True)
class Point:
    """Normalized 2D point"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class BoundingBox:
    """Normalized box: top-left corner plus size"""
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def center_offset(self) -> float:
        """Manhattan distance from the box centre to the frame centre"""
        c = self.center
        return abs(c.x - FRAME_CENTER[0]) + abs(c.y - FRAME_CENTER[1])


@dataclass
class PoseObservation:
    """One detected person skeleton (landmark 0 is the nose)"""
    landmarks: List[Point]

    @property
    def nose(self) -> Point:
        return self.landmarks[0]


@dataclass
class FaceObservation:
    """One detected face with an optional identity descriptor"""
    box: BoundingBox
    descriptor: Optional[np.ndarray] = None
    landmarks: List[Point] = field(default_factory=list)


@dataclass
class ObjectDetection:
    """One classified item"""
    label: str
    confidence: float
    box: Optional[BoundingBox] = None


@dataclass
class Frame:
    """A decoded video frame (BGR, as delivered by OpenCV)"""
    image: np.ndarray
    width: int
    height: int
    timestamp: float


@dataclass
class Observation:
    """Snapshot of all perception streams for a single tick"""
    poses: List[PoseObservation] = field(default_factory=list)
    faces: List[FaceObservation] = field(default_factory=list)
    objects: List[ObjectDetection] = field(default_factory=list)
    timestamp: float = 0.0
    frame_width: int = 0
    frame_height: int = 0
    brightness: Optional[float] = None
    missing: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WarningState:
    """
    Signals derived from one tick.

    Replaced wholesale every tick; nothing here carries over from a previous
    tick. `active_message` is filled in by the alert prioritizer from the
    other fields.
    """
    multiple_people: bool = False
    face_detected: bool = False
    unauthorized_person: bool = False
    horizontal_drift: float = 0.0
    vertical_drift: float = 0.0
    forbidden_objects: FrozenSet[str] = frozenset()
    face_centered: bool = False
    people_count: int = 0
    identity_distance: Optional[float] = None
    active_message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "multiple_people": self.multiple_people,
            "face_detected": self.face_detected,
            "unauthorized_person": self.unauthorized_person,
            "horizontal_drift": round(self.horizontal_drift, 4),
            "vertical_drift": round(self.vertical_drift, 4),
            "forbidden_objects": sorted(self.forbidden_objects),
            "face_centered": self.face_centered,
            "people_count": self.people_count,
            "identity_distance": (
                round(self.identity_distance, 4)
                if self.identity_distance is not None else None
            ),
            "active_message": self.active_message,
        }
