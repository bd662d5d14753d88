"""
examwatch Monitoring Module

Watches a live video stream of a test-taker and raises a single
prioritized warning per tick for:
- More than one person in frame
- Identity mismatch against the captured baseline
- Face absence
- Forbidden objects (phones, books, laptops, ...)
- Excess head movement

The baseline (identity descriptor and reference head position) is captured
under centering and lighting constraints before monitoring begins.
"""

from .api import router

__all__ = ["router"]
