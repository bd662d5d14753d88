"""Baseline anchors and their persistence"""

from .manager import BaselineManager, CaptureResult
from .store import (
    BaselineStore,
    InMemoryBaselineStore,
    JsonFileBaselineStore,
    RedisBaselineStore,
    create_store
)

__all__ = [
    "BaselineManager",
    "CaptureResult",
    "BaselineStore",
    "InMemoryBaselineStore",
    "JsonFileBaselineStore",
    "RedisBaselineStore",
    "create_store"
]
