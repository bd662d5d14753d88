"""
Frame Quality - Lighting measurement for baseline capture
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)

# Used when the frame cannot be measured
NEUTRAL_BRIGHTNESS = 100.0


def measure_brightness(frame: np.ndarray) -> float:
    """
    Average brightness of a frame.

    Each pixel contributes (R + G + B) / 3; the result is the mean over all
    pixels, in the 0-255 range.

    Args:
        frame: BGR (or grayscale) image from OpenCV

    Returns:
        Mean brightness, or NEUTRAL_BRIGHTNESS if the frame is unusable
    """
    if frame is None or frame.size == 0:
        logger.warning("Cannot measure brightness of an empty frame")
        return NEUTRAL_BRIGHTNESS

    try:
        pixels = np.asarray(frame, dtype=np.float64)
        if pixels.ndim == 3:
            pixels = pixels[..., :3].mean(axis=2)
        return float(pixels.mean())
    except (TypeError, ValueError) as e:
        logger.warning(f"Brightness measurement failed: {e}")
        return NEUTRAL_BRIGHTNESS


def classify_lighting(brightness: float, min_brightness: float = 50, max_brightness: float = 200) -> str:
    """
    Classify a brightness level against the acceptable band.

    Returns:
        'too_dark', 'too_bright' or 'ok'
    """
    if brightness < min_brightness:
        return "too_dark"
    if brightness > max_brightness:
        return "too_bright"
    return "ok"
