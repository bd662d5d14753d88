"""
examwatch Configuration Settings

All monitoring thresholds are calibrated empirically and can be overridden
through environment variables or a local .env file.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Configuration for the proctoring monitor service."""

    # API Settings
    APP_NAME: str = "examwatch Monitor Service"
    DEBUG: bool = True
    PORT: int = 8002

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False

    # Scheduler cadence
    TICK_INTERVAL_SECONDS: float = 0.3
    SETTLE_DELAY_SECONDS: float = 0.3  # Centering settle delay (capture only)

    # Frame evaluator thresholds
    CENTER_TOLERANCE: float = 0.08
    IDENTITY_THRESHOLD: float = 0.6  # Euclidean descriptor distance
    MOVEMENT_THRESHOLD: float = 0.02
    DESCRIPTOR_LENGTH: int = 128

    # Lighting band for capture (mean pixel brightness 0-255)
    MIN_BRIGHTNESS: float = 50.0
    MAX_BRIGHTNESS: float = 200.0
    LOW_LIGHT_HINT: float = 70.0

    # Object detection
    OBJECT_CONFIDENCE: float = 0.5
    FORBIDDEN_OBJECTS: List[str] = [
        "cell phone",
        "phone",
        "tablet",
        "book",
        "remote",
        "backpack",
        "mouse",
        "tv",
        "television",
        "keyboard",
        "laptop",
    ]

    # Pose detection
    MAX_POSES: int = 4

    # Capture source: device index ("0") or stream URL
    CAMERA_SOURCE: str = "0"

    # Baseline store: memory | file | redis
    BASELINE_STORE: str = "memory"
    BASELINE_STORE_PATH: str = "baseline_store.json"
    REDIS_URL: str = "redis://localhost:6379/0"
    BASELINE_TTL: int = 86400  # 24 hours

    # Model paths (None = search the default weights directory)
    POSE_MODEL_PATH: Optional[str] = None
    DLIB_PREDICTOR_PATH: Optional[str] = None
    DLIB_FACE_MODEL_PATH: Optional[str] = None
    YOLO_MODEL_PATH: Optional[str] = None

    class Config:
        env_file = ".env"
        env_prefix = "EXAMWATCH_"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
