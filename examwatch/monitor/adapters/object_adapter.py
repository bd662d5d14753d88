"""
Object Adapter - Classified items from an ultralytics YOLO model

Reports every detection above the confidence threshold; deciding which
labels are forbidden is left to the frame evaluator.
"""

import logging
from typing import List, Optional

from ..models import get_yolo_model
from ..types import BoundingBox, Frame, ObjectDetection
from .base import SignalAdapter

logger = logging.getLogger(__name__)


class ObjectAdapter(SignalAdapter):

    name = "objects"

    def __init__(self, model_path: Optional[str] = None, confidence: float = 0.5):
        """
        Initialize object adapter.

        Args:
            model_path: Path to YOLO weights. If None, uses the default from model_loader.
            confidence: Minimum confidence threshold for detections.
        """
        super().__init__()
        self.model_path = model_path
        self.confidence = confidence
        self.model = None

    def _load(self):
        self.model = get_yolo_model(self.model_path)

    def _detect(self, frame: Frame, timestamp: float) -> List[ObjectDetection]:
        results = self.model.predict(frame.image, conf=self.confidence, verbose=False)

        detections = []
        for result in results:
            if result.boxes is None:
                continue

            for box in result.boxes:
                cls_id = int(box.cls[0])
                name = self.model.names.get(cls_id, f"class_{cls_id}")
                x1, y1, x2, y2 = box.xyxyn[0].tolist()
                detections.append(ObjectDetection(
                    label=name.lower(),
                    confidence=float(box.conf[0]),
                    box=BoundingBox(x=x1, y=y1, width=x2 - x1, height=y2 - y1)
                ))
        return detections
