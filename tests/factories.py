"""
Test doubles and builders for monitoring tests
"""
from typing import List, Optional

import numpy as np

from examwatch.monitor.adapters import FrameSource, SignalAdapter
from examwatch.monitor.errors import FrameNotReady
from examwatch.monitor.types import BoundingBox, FaceObservation, Frame, Point, PoseObservation

DESCRIPTOR_LENGTH = 128


class FakeAdapter(SignalAdapter):
    """Adapter returning canned detections"""

    def __init__(self, name: str, results: Optional[List] = None, load_error=None, detect_error=None):
        super().__init__()
        self.name = name
        self.results = list(results or [])
        self.load_error = load_error
        self.detect_error = detect_error
        self.calls = 0
        self.closed = False

    def _load(self):
        if self.load_error is not None:
            raise self.load_error

    def _detect(self, frame, timestamp):
        self.calls += 1
        if self.detect_error is not None:
            raise self.detect_error
        return list(self.results)

    def close(self):
        super().close()
        self.closed = True


class FakeFrameSource(FrameSource):
    """Uniform grey frames at a fixed brightness"""

    def __init__(self, brightness: int = 120, available: bool = True):
        self.brightness = brightness
        self.available = available
        self.reads = 0
        self.released = False

    @property
    def ready(self) -> bool:
        return self.available

    def read(self) -> Frame:
        if not self.available:
            raise FrameNotReady("no frame")
        self.reads += 1
        image = np.full((48, 64, 3), self.brightness, dtype=np.uint8)
        return Frame(image=image, width=64, height=48, timestamp=float(self.reads))

    def release(self):
        self.released = True


def pose_at(x: float, y: float) -> PoseObservation:
    return PoseObservation(landmarks=[Point(x, y), Point(x + 0.02, y - 0.02)])


def descriptor(distance: float = 0.0) -> np.ndarray:
    """Descriptor at the given Euclidean distance from the zero descriptor"""
    values = np.zeros(DESCRIPTOR_LENGTH)
    values[0] = distance
    return values


def face_at(cx: float, cy: float, distance: float = 0.0, size: float = 0.25) -> FaceObservation:
    half = size / 2
    return FaceObservation(
        box=BoundingBox(x=cx - half, y=cy - half, width=size, height=size),
        descriptor=descriptor(distance),
        landmarks=[Point(cx, cy), Point(cx - 0.05, cy - 0.05)]
    )
