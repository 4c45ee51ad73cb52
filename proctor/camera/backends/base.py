from __future__ import annotations

from dataclasses import dataclass
from typing import Any, AsyncIterator, Protocol

# HTMLMediaElement.readyState values
HAVE_NOTHING = 0
HAVE_METADATA = 1
HAVE_CURRENT_DATA = 2
HAVE_ENOUGH_DATA = 4


@dataclass(frozen=True)
class VideoFrame:
    """One frame as delivered by the capture device.

    ``image`` is an RGB array (or ``None`` when the device delivered nothing);
    ``ready_state`` and ``video_width`` describe the element the frame was
    read from, so a covered or unplugged camera still produces a frame.
    """

    image: Any
    ready_state: int
    video_width: int
    video_height: int

    @property
    def ready(self) -> bool:
        return self.ready_state >= HAVE_CURRENT_DATA and self.video_width > 0


class CameraStream(Protocol):
    @property
    def active(self) -> bool:
        ...

    def frames(self) -> AsyncIterator[VideoFrame]:
        ...

    async def stop(self) -> None:
        ...


class CameraSource(Protocol):
    name: str

    async def open(self, width: int, height: int) -> CameraStream:
        ...
