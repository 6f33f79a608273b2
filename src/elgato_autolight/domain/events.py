from __future__ import annotations

from enum import Enum

# UVCExtension reports "... PowerLog ... = On" / "= Off" when the camera powers up or down.
CAMERA_ON_MARKER = "= On"
CAMERA_OFF_MARKER = "= Off"


class LightState(str, Enum):
    ON = "on"
    OFF = "off"


class CameraEvent(str, Enum):
    ON = "on"
    OFF = "off"
    IGNORED = "ignored"

    @property
    def light_state(self) -> LightState | None:
        if self is CameraEvent.ON:
            return LightState.ON
        if self is CameraEvent.OFF:
            return LightState.OFF
        return None


def classify(line: str) -> CameraEvent:
    """Classify one raw log line by exact marker containment.

    The on marker is checked first, so a line carrying both markers is ``ON``.
    """

    if CAMERA_ON_MARKER in line:
        return CameraEvent.ON
    if CAMERA_OFF_MARKER in line:
        return CameraEvent.OFF
    return CameraEvent.IGNORED
