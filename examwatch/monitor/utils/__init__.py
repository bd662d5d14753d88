"""Utility modules"""

from .frame_quality import classify_lighting, measure_brightness
from .logging import log_monitor_event

__all__ = ["classify_lighting", "measure_brightness", "log_monitor_event"]
