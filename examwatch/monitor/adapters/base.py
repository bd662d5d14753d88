"""
Signal Adapter Base - Common lifecycle for perception collaborators
"""

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from typing import List

from ..errors import PerceptionUnavailable
from ..types import Frame

logger = logging.getLogger(__name__)


class SignalAdapter(ABC):
    """
    Thin async wrapper around one perception model instance.

    - `initialize()` loads the model off the event loop
    - `detect()` raises PerceptionUnavailable until initialization finished
    - inference runs in a worker thread, one frame at a time per instance
    - zero detections is an empty list, never an error
    """

    name: str = "adapter"

    def __init__(self):
        self._ready = False
        self._model_lock = threading.Lock()

    @property
    def ready(self) -> bool:
        return self._ready

    async def initialize(self):
        """Load the underlying model (idempotent)"""
        if self._ready:
            return
        await asyncio.to_thread(self._load)
        self._ready = True
        logger.info(f"{self.name} adapter ready")

    async def detect(self, frame: Frame, timestamp: float) -> List:
        """
        Run the model on a frame.

        Args:
            frame: Decoded frame from the capture source
            timestamp: Monotonic timestamp in seconds

        Raises:
            PerceptionUnavailable: model not initialized yet
        """
        if not self._ready:
            raise PerceptionUnavailable(self.name)
        return await asyncio.to_thread(self._detect_serialized, frame, timestamp)

    def _detect_serialized(self, frame: Frame, timestamp: float) -> List:
        # Held in the worker thread so an abandoned call still blocks the next one
        with self._model_lock:
            return self._detect(frame, timestamp)

    @abstractmethod
    def _load(self):
        """Load model weights (runs in a worker thread)"""

    @abstractmethod
    def _detect(self, frame: Frame, timestamp: float) -> List:
        """Synchronous inference on one frame"""

    def close(self):
        """Release model resources"""
        self._ready = False
