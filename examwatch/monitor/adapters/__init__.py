"""Signal adapters for the perception collaborators"""

from .base import SignalAdapter
from .capture import CaptureSource, FrameSource
from .face_adapter import FaceAdapter
from .hub import SignalHub
from .object_adapter import ObjectAdapter
from .pose_adapter import PoseAdapter

__all__ = [
    "SignalAdapter",
    "CaptureSource",
    "FrameSource",
    "FaceAdapter",
    "SignalHub",
    "ObjectAdapter",
    "PoseAdapter"
]
