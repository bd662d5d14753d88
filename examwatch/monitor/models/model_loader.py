"""
Model Loader - Locates and caches perception model weights
"""

import os
import logging
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)

# Default model paths (relative to this file's directory)
MODELS_DIR = os.path.join(os.path.dirname(__file__), "weights")

POSE_MODEL_FILE = "pose_landmarker_full.task"
DLIB_PREDICTOR_FILE = "shape_predictor_68_face_landmarks.dat"
DLIB_FACE_MODEL_FILE = "dlib_face_recognition_resnet_model_v1.dat"
YOLO_MODEL_FILE = "yolov8n.pt"


def _find_weights(filename: str, override: Optional[str] = None) -> Optional[str]:
    """Return the first existing path for a weights file"""
    possible_paths = [
        override,
        os.path.join(MODELS_DIR, filename),
        filename  # Current directory
    ]
    for path in possible_paths:
        if path and os.path.exists(path):
            return path
    return None


def get_pose_model_path(override: Optional[str] = None) -> str:
    """
    Get path to the MediaPipe pose landmarker task file.

    Download from:
    https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_full/float16/latest/pose_landmarker_full.task
    """
    path = _find_weights(POSE_MODEL_FILE, override)
    if path is None:
        raise FileNotFoundError(
            f"{POSE_MODEL_FILE} not found. Download it from the MediaPipe model "
            f"catalogue and place it in {MODELS_DIR}"
        )
    return path


@lru_cache(maxsize=1)
def get_dlib_detector():
    """Get dlib's HOG frontal face detector"""
    import dlib

    return dlib.get_frontal_face_detector()


@lru_cache(maxsize=4)
def get_dlib_predictor(override: Optional[str] = None):
    """
    Get dlib shape predictor for 68-point facial landmarks.

    Model file: shape_predictor_68_face_landmarks.dat
    Download from: http://dlib.net/files/shape_predictor_68_face_landmarks.dat.bz2
    """
    import dlib

    path = _find_weights(DLIB_PREDICTOR_FILE, override)
    if path is None:
        raise FileNotFoundError(
            f"{DLIB_PREDICTOR_FILE} not found. "
            f"Download from http://dlib.net/files/{DLIB_PREDICTOR_FILE}.bz2 "
            f"and place in {MODELS_DIR}"
        )
    logger.info(f"Loading dlib predictor from: {path}")
    return dlib.shape_predictor(path)


@lru_cache(maxsize=4)
def get_dlib_face_encoder(override: Optional[str] = None):
    """
    Get dlib ResNet face recognition model (128-d descriptors).

    Model file: dlib_face_recognition_resnet_model_v1.dat
    Download from: http://dlib.net/files/dlib_face_recognition_resnet_model_v1.dat.bz2
    """
    import dlib

    path = _find_weights(DLIB_FACE_MODEL_FILE, override)
    if path is None:
        raise FileNotFoundError(
            f"{DLIB_FACE_MODEL_FILE} not found. "
            f"Download from http://dlib.net/files/{DLIB_FACE_MODEL_FILE}.bz2 "
            f"and place in {MODELS_DIR}"
        )
    logger.info(f"Loading dlib face encoder from: {path}")
    return dlib.face_recognition_model_v1(path)


@lru_cache(maxsize=4)
def get_yolo_model(override: Optional[str] = None):
    """
    Get YOLO model for forbidden object detection (COCO classes).

    Returns:
        YOLO model instance
    """
    from ultralytics import YOLO

    path = _find_weights(YOLO_MODEL_FILE, override)
    if path is not None:
        logger.info(f"Loading YOLO model from: {path}")
        return YOLO(path)

    # ultralytics downloads the stock weights on first use
    logger.warning(f"{YOLO_MODEL_FILE} not found locally, letting ultralytics fetch it")
    return YOLO(YOLO_MODEL_FILE)


def check_models() -> dict:
    """
    Check which models are available.

    Returns:
        Dict with model status
    """
    status = {
        "pose_landmarker": _find_weights(POSE_MODEL_FILE) is not None,
        "dlib_predictor": _find_weights(DLIB_PREDICTOR_FILE) is not None,
        "dlib_face_encoder": _find_weights(DLIB_FACE_MODEL_FILE) is not None,
        "yolo_model": _find_weights(YOLO_MODEL_FILE) is not None,
        "mediapipe": False
    }

    try:
        import mediapipe  # noqa: F401
        status["mediapipe"] = True
    except ImportError:
        pass

    return status
