"""
Face Adapter - Face boxes, landmarks and identity descriptors via dlib

Uses:
- HOG frontal face detector for boxes
- 68-point shape predictor for landmarks
- ResNet face recognition model for 128-d descriptors
"""

import logging
from typing import List, Optional

import cv2
import numpy as np

from ..models import get_dlib_detector, get_dlib_face_encoder, get_dlib_predictor
from ..types import BoundingBox, FaceObservation, Frame, Point
from .base import SignalAdapter

logger = logging.getLogger(__name__)


class FaceAdapter(SignalAdapter):
    """Detects faces and computes one descriptor per face"""

    name = "face"

    def __init__(
        self,
        predictor_path: Optional[str] = None,
        face_model_path: Optional[str] = None,
        upsample: int = 0
    ):
        """
        Initialize face adapter.

        Args:
            predictor_path: Path to the 68-point shape predictor
            face_model_path: Path to the ResNet face recognition model
            upsample: Detector upsampling passes (finds smaller faces, slower)
        """
        super().__init__()
        self.predictor_path = predictor_path
        self.face_model_path = face_model_path
        self.upsample = upsample
        self._detector = None
        self._predictor = None
        self._encoder = None

    def _load(self):
        self._detector = get_dlib_detector()
        self._predictor = get_dlib_predictor(self.predictor_path)
        self._encoder = get_dlib_face_encoder(self.face_model_path)

    def _detect(self, frame: Frame, timestamp: float) -> List[FaceObservation]:
        rgb = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
        width = float(frame.width)
        height = float(frame.height)

        faces = []
        for rect in self._detector(rgb, self.upsample):
            shape = self._predictor(rgb, rect)
            landmarks = [Point(p.x / width, p.y / height) for p in shape.parts()]
            box = BoundingBox(
                x=rect.left() / width,
                y=rect.top() / height,
                width=rect.width() / width,
                height=rect.height() / height
            )

            descriptor = None
            try:
                descriptor = np.array(self._encoder.compute_face_descriptor(rgb, shape))
            except Exception as e:
                logger.warning(f"Could not compute face descriptor: {e}")

            faces.append(FaceObservation(box=box, descriptor=descriptor, landmarks=landmarks))
        return faces
