"""
Signal Hub - Fans one frame out to the perception adapters

Pose, face and object adapters touch independent model instances, so they
run concurrently. The hub waits for all of them before returning; a stream
that is unavailable or fails this tick is reported as empty.
"""

import asyncio
import logging
from typing import Dict

from ..errors import PerceptionUnavailable
from ..types import Frame, Observation
from ..utils.frame_quality import measure_brightness
from .base import SignalAdapter

logger = logging.getLogger(__name__)


class SignalHub:

    def __init__(
        self,
        pose: SignalAdapter,
        face: SignalAdapter,
        objects: SignalAdapter
    ):
        self.pose = pose
        self.face = face
        self.objects = objects

    @property
    def adapters(self) -> Dict[str, SignalAdapter]:
        return {"pose": self.pose, "face": self.face, "objects": self.objects}

    async def initialize(self) -> Dict[str, bool]:
        """
        Initialize all adapters concurrently.

        Failures are logged and leave that adapter unavailable.

        Returns:
            Dict mapping stream name to readiness
        """
        names = list(self.adapters)
        results = await asyncio.gather(
            *(adapter.initialize() for adapter in self.adapters.values()),
            return_exceptions=True
        )
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(f"Failed to initialize {name} adapter: {result}")
        return self.status()

    def status(self) -> Dict[str, bool]:
        return {name: adapter.ready for name, adapter in self.adapters.items()}

    async def observe(
        self,
        frame: Frame,
        timestamp: float,
        include_faces: bool = True,
        include_objects: bool = True,
        measure_light: bool = False
    ) -> Observation:
        """
        Build an observation for one frame.

        Args:
            frame: Current frame
            timestamp: Monotonic timestamp in seconds
            include_faces: Run the face adapter
            include_objects: Run the object adapter
            measure_light: Also compute frame brightness

        Returns:
            Observation; streams that were skipped or failed are empty
        """
        pose_task = self._safe_detect("pose", self.pose, frame, timestamp)
        face_task = self._safe_detect("face", self.face, frame, timestamp) if include_faces else _empty()
        object_task = self._safe_detect("objects", self.objects, frame, timestamp) if include_objects else _empty()

        (poses, pose_ok), (faces, face_ok), (objects, object_ok) = await asyncio.gather(
            pose_task, face_task, object_task
        )

        missing = tuple(
            name for name, ok in (("pose", pose_ok), ("face", face_ok), ("objects", object_ok))
            if not ok
        )

        return Observation(
            poses=poses,
            faces=faces,
            objects=objects,
            timestamp=timestamp,
            frame_width=frame.width,
            frame_height=frame.height,
            brightness=measure_brightness(frame.image) if measure_light else None,
            missing=missing
        )

    async def _safe_detect(self, name: str, adapter: SignalAdapter, frame: Frame, timestamp: float):
        try:
            return await adapter.detect(frame, timestamp), True
        except PerceptionUnavailable:
            logger.debug(f"{name} stream unavailable this tick")
            return [], False
        except Exception as e:
            logger.warning(f"{name} detection error: {e}")
            return [], False

    def close(self):
        for adapter in self.adapters.values():
            try:
                adapter.close()
            except Exception as e:
                logger.warning(f"Error closing {adapter.name} adapter: {e}")


async def _empty():
    return [], True
