"""examwatch - real-time remote proctoring monitor"""

__version__ = "1.0.0"
