"""
Monitor Errors - Failure taxonomy for the monitoring pipeline

None of these halt a session. Perception and frame errors skip or degrade a
single tick; capture failures are reported back to the operator as guidance.
"""

from typing import Optional


class MonitorError(Exception):
    """Base class for all monitoring errors"""


class PerceptionUnavailable(MonitorError):
    """A perception model has not finished initializing"""

    def __init__(self, model: str):
        super().__init__(f"{model} model is not ready")
        self.model = model


class FrameNotReady(MonitorError):
    """The capture source has no decodable frame yet"""


class InvalidDescriptor(MonitorError):
    """A face descriptor from the perception layer is malformed"""


class CaptureFailure(MonitorError):
    """
    Base class for baseline capture precondition failures.

    `guidance` is the human-readable message shown to the test-taker.
    """

    guidance: str = "Face capture failed."

    def __init__(self, guidance: Optional[str] = None):
        if guidance is not None:
            self.guidance = guidance
        super().__init__(self.guidance)


class NoCenteredFace(CaptureFailure):
    guidance = "Align your face in the center before capturing!"


class PoorLighting(CaptureFailure):
    TOO_DARK = "Low lighting detected! Try increasing brightness."
    TOO_BRIGHT = "Too much brightness! Move to a less illuminated area."

    def __init__(self, brightness: float, too_dark: bool):
        self.brightness = brightness
        self.too_dark = too_dark
        super().__init__(self.TOO_DARK if too_dark else self.TOO_BRIGHT)


class NoFaceDetected(CaptureFailure):
    guidance = "Face not detected! Ensure your face is visible and clear."
    LOW_LIGHT = "Face not detected! Try improving lighting."


class AlreadyCaptured(CaptureFailure):
    guidance = "Face already captured."
