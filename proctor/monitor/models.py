from __future__ import annotations

from pydantic import BaseModel

from proctor.monitor.events import LifecycleEventType


class MonitorStatus(BaseModel):
    state: str
    warning: str | None = None
    camera_backend: str
    detector_backend: str
    listeners: int


class WarningResponse(BaseModel):
    message: str | None = None
    kind: str | None = None
    last_emitted_at: float | None = None


class LifecycleEventRequest(BaseModel):
    type: LifecycleEventType
    hidden: bool = False
    fullscreen: bool = False
