"""
Monitor Session - The single active monitoring context
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

import numpy as np

from .types import Point


def new_session_id() -> str:
    return f"MON_{uuid.uuid4().hex[:6].upper()}"


@dataclass
class MonitorSession:
    """
    Baseline anchors for one proctoring session.

    `baseline_identity` is written once by a successful capture and stays
    fixed until `reset()`. `baseline_head_position` follows the most recent
    centered head position.
    """

    id: str = field(default_factory=new_session_id)
    baseline_identity: Optional[np.ndarray] = None
    baseline_head_position: Optional[Point] = None
    started_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def captured(self) -> bool:
        return self.baseline_identity is not None

    def reset(self):
        """Clear both baseline anchors"""
        self.baseline_identity = None
        self.baseline_head_position = None
