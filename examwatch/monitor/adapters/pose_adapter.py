"""
Pose Adapter - Person skeletons from MediaPipe Tasks PoseLandmarker

Runs in VIDEO mode, which requires strictly increasing timestamps per
landmarker instance.
"""

import logging
from typing import List, Optional

import cv2

from ..models import get_pose_model_path
from ..types import Frame, Point, PoseObservation
from .base import SignalAdapter

logger = logging.getLogger(__name__)


class PoseAdapter(SignalAdapter):
    """
    Detects up to `max_poses` people per frame.

    Landmarks are normalized to the frame; index 0 is the nose.
    """

    name = "pose"

    DEFAULT_MAX_POSES = 4

    def __init__(self, model_path: Optional[str] = None, max_poses: int = DEFAULT_MAX_POSES):
        """
        Initialize pose adapter.

        Args:
            model_path: Path to pose_landmarker_full.task. If None, searches the weights directory.
            max_poses: Maximum number of people to detect
        """
        super().__init__()
        self.model_path = model_path
        self.max_poses = max_poses
        self._landmarker = None
        self._last_timestamp_ms = -1

    def _load(self):
        import mediapipe as mp

        BaseOptions = mp.tasks.BaseOptions
        PoseLandmarker = mp.tasks.vision.PoseLandmarker
        PoseLandmarkerOptions = mp.tasks.vision.PoseLandmarkerOptions
        VisionRunningMode = mp.tasks.vision.RunningMode

        options = PoseLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=get_pose_model_path(self.model_path)),
            running_mode=VisionRunningMode.VIDEO,
            num_poses=self.max_poses
        )
        self._landmarker = PoseLandmarker.create_from_options(options)

    def _next_timestamp_ms(self, timestamp: float) -> int:
        timestamp_ms = int(timestamp * 1000)
        if timestamp_ms <= self._last_timestamp_ms:
            timestamp_ms = self._last_timestamp_ms + 1
        self._last_timestamp_ms = timestamp_ms
        return timestamp_ms

    def _detect(self, frame: Frame, timestamp: float) -> List[PoseObservation]:
        import mediapipe as mp

        rgb = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self._landmarker.detect_for_video(mp_image, self._next_timestamp_ms(timestamp))

        poses = []
        for landmarks in result.pose_landmarks or []:
            if not landmarks:
                continue
            poses.append(PoseObservation(landmarks=[Point(lm.x, lm.y) for lm in landmarks]))
        return poses

    def close(self):
        super().close()
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
