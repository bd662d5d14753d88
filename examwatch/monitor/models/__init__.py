"""Model loading utilities"""

from .model_loader import (
    check_models,
    get_dlib_detector,
    get_dlib_face_encoder,
    get_dlib_predictor,
    get_pose_model_path,
    get_yolo_model
)

__all__ = [
    "check_models",
    "get_dlib_detector",
    "get_dlib_face_encoder",
    "get_dlib_predictor",
    "get_pose_model_path",
    "get_yolo_model"
]
