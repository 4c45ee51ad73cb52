from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ViolationKind(str, Enum):
    NO_FACE = "NoFace"
    MULTIPLE_FACES = "MultipleFaces"
    OFF_SCREEN = "OffScreen"
    LOOKING_DOWN = "LookingDown"
    CAMERA_BLOCKED = "CameraBlocked"
    TAB_SWITCH = "TabSwitch"
    WINDOW_BLUR = "WindowBlur"
    FULLSCREEN_EXIT = "FullscreenExit"
    DEVICE_CHANGE = "DeviceChange"
    PERMISSION_DENIED = "PermissionDenied"


MESSAGES: dict[ViolationKind, str] = {
    ViolationKind.NO_FACE: "⚠️ Face not detected! Stay in front of camera",
    ViolationKind.MULTIPLE_FACES: "⚠️ Multiple faces detected!",
    ViolationKind.OFF_SCREEN: "⚠️ Please look at the screen!",
    ViolationKind.LOOKING_DOWN: "⚠️ Don't look down! Possible phone usage",
    ViolationKind.CAMERA_BLOCKED: "⚠️ Camera turned off or blocked!",
    ViolationKind.TAB_SWITCH: "⚠️ Tab switch detected!",
    ViolationKind.WINDOW_BLUR: "⚠️ Window changed or minimized!",
    ViolationKind.FULLSCREEN_EXIT: "⚠️ Fullscreen exited!",
    ViolationKind.DEVICE_CHANGE: "⚠️ Camera/Microphone device changed!",
    ViolationKind.PERMISSION_DENIED: "⚠️ Camera permission denied!",
}


@dataclass(frozen=True)
class ViolationSignal:
    kind: ViolationKind
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @classmethod
    def of(cls, kind: ViolationKind) -> "ViolationSignal":
        return cls(kind=kind, message=MESSAGES[kind])
