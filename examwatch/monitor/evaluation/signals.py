"""
Signal Functions - Pure per-frame predicates shared by capture and evaluation
"""

import logging
from typing import FrozenSet, Iterable, List, Optional

import numpy as np

from ..errors import InvalidDescriptor
from ..types import FRAME_CENTER, FaceObservation, ObjectDetection, Point, PoseObservation

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.08


def is_centered(point: Point, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """
    True if the point lies strictly within `tolerance` of the frame centre
    on both axes.
    """
    # Rounded so offsets like 0.58 - 0.5 compare equal to the tolerance
    return (
        round(abs(point.x - FRAME_CENTER[0]), 9) < tolerance
        and round(abs(point.y - FRAME_CENTER[1]), 9) < tolerance
    )


def find_centered_pose(
    poses: Iterable[PoseObservation],
    tolerance: float = DEFAULT_TOLERANCE
) -> Optional[PoseObservation]:
    """Return the first pose whose nose is centered, or None"""
    for pose in poses:
        if pose.landmarks and is_centered(pose.nose, tolerance):
            return pose
    return None


def validate_descriptor(descriptor, length: int) -> np.ndarray:
    """
    Coerce a descriptor to a 1-D float array of the expected length.

    Raises:
        InvalidDescriptor: wrong shape, wrong length or non-finite values
    """
    if descriptor is None:
        raise InvalidDescriptor("descriptor is missing")
    try:
        array = np.asarray(descriptor, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidDescriptor(f"descriptor is not numeric: {e}") from e
    if array.ndim != 1 or array.shape[0] != length:
        raise InvalidDescriptor(f"expected shape ({length},), got {array.shape}")
    if not np.all(np.isfinite(array)):
        raise InvalidDescriptor("descriptor contains non-finite values")
    return array


def usable_faces(faces: Iterable[FaceObservation], length: int) -> List[FaceObservation]:
    """
    Drop faces whose descriptor is missing or malformed.

    Returned faces carry their validated descriptor as a float array.
    """
    usable = []
    for face in faces:
        try:
            descriptor = validate_descriptor(face.descriptor, length)
        except InvalidDescriptor as e:
            if face.descriptor is not None:
                logger.debug(f"Dropping face with invalid descriptor: {e}")
            continue
        usable.append(FaceObservation(box=face.box, descriptor=descriptor, landmarks=face.landmarks))
    return usable


def select_centered_face(faces: List[FaceObservation]) -> Optional[FaceObservation]:
    """
    Pick the face whose box centre is closest (Manhattan) to the frame centre.

    Ties keep the earlier face.
    """
    best = None
    best_offset = float("inf")
    for face in faces:
        offset = face.box.center_offset()
        if offset < best_offset:
            best = face
            best_offset = offset
    return best


def descriptor_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two descriptors"""
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def forbidden_labels(
    objects: Iterable[ObjectDetection],
    forbidden: Iterable[str],
    confidence_threshold: float
) -> FrozenSet[str]:
    """Labels (lower-cased) of disallowed items above the confidence threshold"""
    disallowed = {name.lower() for name in forbidden}
    found = set()
    for obj in objects:
        label = obj.label.lower()
        if label in disallowed and obj.confidence > confidence_threshold:
            found.add(label)
    return frozenset(found)
