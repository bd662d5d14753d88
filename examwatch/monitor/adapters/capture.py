"""
Capture Source - Live frames from a camera device or stream URL
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Union

import cv2

from ..errors import FrameNotReady
from ..types import Frame

logger = logging.getLogger(__name__)


class FrameSource(ABC):
    """Anything that can hand out the current decoded frame"""

    @property
    @abstractmethod
    def ready(self) -> bool:
        """True when a decodable frame is available"""

    @abstractmethod
    def read(self) -> Frame:
        """
        Return the current frame.

        Raises:
            FrameNotReady: no decodable frame yet
        """

    def release(self):
        """Release the underlying device"""


def parse_source(source: str) -> Union[int, str]:
    """Device indices arrive as strings from configuration"""
    return int(source) if source.isdigit() else source


class CaptureSource(FrameSource):
    """OpenCV VideoCapture over a device index or URL (opened lazily)"""

    def __init__(self, source: Union[int, str] = 0):
        self.source = parse_source(source) if isinstance(source, str) else source
        self._capture = None

    def _ensure_open(self) -> cv2.VideoCapture:
        if self._capture is None:
            self._capture = cv2.VideoCapture(self.source)
            if self._capture.isOpened():
                logger.info(f"Capture source opened: {self.source}")
        return self._capture

    @property
    def ready(self) -> bool:
        return self._ensure_open().isOpened()

    def read(self) -> Frame:
        capture = self._ensure_open()
        if not capture.isOpened():
            raise FrameNotReady(f"capture source {self.source} is not open")

        ok, image = capture.read()
        if not ok or image is None or image.size == 0:
            raise FrameNotReady("no decodable frame available")

        height, width = image.shape[:2]
        return Frame(image=image, width=width, height=height, timestamp=time.monotonic())

    def release(self):
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info(f"Capture source released: {self.source}")
