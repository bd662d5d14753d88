"""Per-tick frame evaluation"""

from .evaluator import FrameEvaluator
from .signals import (
    descriptor_distance,
    find_centered_pose,
    forbidden_labels,
    is_centered,
    select_centered_face,
    usable_faces,
    validate_descriptor
)

__all__ = [
    "FrameEvaluator",
    "descriptor_distance",
    "find_centered_pose",
    "forbidden_labels",
    "is_centered",
    "select_centered_face",
    "usable_faces",
    "validate_descriptor"
]
