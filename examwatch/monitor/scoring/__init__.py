"""Scoring modules"""

from .alert_prioritizer import AlertLevel, AlertPrioritizer, prioritize

__all__ = ["AlertLevel", "AlertPrioritizer", "prioritize"]
