from .events import CAMERA_OFF_MARKER, CAMERA_ON_MARKER, CameraEvent, LightState, classify

__all__ = ["CAMERA_OFF_MARKER", "CAMERA_ON_MARKER", "CameraEvent", "LightState", "classify"]
