from __future__ import annotations

import asyncio
from typing import AsyncIterator, Sequence

import numpy as np

from proctor.camera.backends.base import HAVE_ENOUGH_DATA, CameraSource, CameraStream, VideoFrame
from proctor.camera.errors import CameraPermissionDeniedError
from proctor.config import CameraConfig


def placeholder_frame(width: int = 320, height: int = 240) -> VideoFrame:
    image = np.zeros((height, width, 3), dtype=np.uint8)
    return VideoFrame(image=image, ready_state=HAVE_ENOUGH_DATA, video_width=width, video_height=height)


class StubCameraStream(CameraStream):
    def __init__(self, source: "StubCameraSource", width: int, height: int):
        self._source = source
        self._width = width
        self._height = height
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def frames(self) -> AsyncIterator[VideoFrame]:
        if self._source.scripted_frames is not None:
            for frame in self._source.scripted_frames:
                if not self._active:
                    return
                yield frame
                await asyncio.sleep(0)
            return
        interval = 1.0 / self._source.fps if self._source.fps > 0 else 0.0
        frame = placeholder_frame(self._width, self._height)
        while self._active:
            yield frame
            await asyncio.sleep(interval)

    async def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._source.open_streams -= 1


class StubCameraSource(CameraSource):
    """Camera without hardware.

    With ``frames`` it plays that sequence once and ends the stream; without,
    it delivers placeholder frames forever at ``fps``. ``permission`` lets a
    test hold the grant open until it sets the event.
    """

    name = "stub"

    def __init__(
        self,
        config: CameraConfig | None = None,
        *,
        frames: Sequence[VideoFrame] | None = None,
        deny_permission: bool = False,
        permission: asyncio.Event | None = None,
    ):
        self.fps = config.stub_fps if config else 15.0
        self.scripted_frames = list(frames) if frames is not None else None
        self.deny_permission = deny_permission
        self.permission = permission
        self.open_calls = 0
        self.open_streams = 0

    async def open(self, width: int, height: int) -> StubCameraStream:
        self.open_calls += 1
        if self.permission is not None:
            await self.permission.wait()
        if self.deny_permission:
            raise CameraPermissionDeniedError()
        self.open_streams += 1
        return StubCameraStream(self, width, height)
