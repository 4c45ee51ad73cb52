from __future__ import annotations

import asyncio
import importlib
import importlib.util
import threading
from typing import Any, AsyncIterator

from proctor.camera.backends.base import (
    HAVE_ENOUGH_DATA,
    HAVE_NOTHING,
    CameraSource,
    CameraStream,
    VideoFrame,
)
from proctor.camera.errors import CameraPermissionDeniedError, CameraUnavailableError
from proctor.config import CameraConfig


def _cv2_available() -> bool:
    return importlib.util.find_spec("cv2") is not None


class OpenCVCameraStream(CameraStream):
    def __init__(self, capture: Any, cv2_module: Any, retry_ms: int):
        self._capture = capture
        self._cv2 = cv2_module
        self._retry = retry_ms / 1000.0
        # cap.read() runs on a worker thread; release must not overlap it.
        self._lock = threading.Lock()
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def _read(self) -> VideoFrame:
        with self._lock:
            if not self._active:
                return VideoFrame(image=None, ready_state=HAVE_NOTHING, video_width=0, video_height=0)
            success, frame = self._capture.read()
        if not success or frame is None:
            return VideoFrame(image=None, ready_state=HAVE_NOTHING, video_width=0, video_height=0)
        height, width = frame.shape[:2]
        rgb = self._cv2.cvtColor(frame, self._cv2.COLOR_BGR2RGB)
        return VideoFrame(image=rgb, ready_state=HAVE_ENOUGH_DATA, video_width=width, video_height=height)

    async def frames(self) -> AsyncIterator[VideoFrame]:
        # read() blocks until the device delivers, so the device sets the cadence.
        while self._active:
            frame = await asyncio.to_thread(self._read)
            if not self._active:
                return
            yield frame
            if not frame.ready:
                await asyncio.sleep(self._retry)

    def _release(self) -> None:
        with self._lock:
            self._capture.release()

    async def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        await asyncio.to_thread(self._release)


class OpenCVCameraSource(CameraSource):
    name = "opencv"

    def __init__(self, config: CameraConfig):
        self._config = config

    def _open_capture(self, width: int, height: int) -> OpenCVCameraStream:
        if not _cv2_available():
            raise CameraUnavailableError("OpenCV is not installed.")
        cv2 = importlib.import_module("cv2")
        capture = cv2.VideoCapture(self._config.device_index)
        if not capture or not capture.isOpened():
            # The OS refuses the device the same way whether it is missing or not permitted.
            raise CameraPermissionDeniedError("Camera device could not be opened.")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        capture.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        return OpenCVCameraStream(capture, cv2, self._config.retry_ms)

    async def open(self, width: int, height: int) -> OpenCVCameraStream:
        return await asyncio.to_thread(self._open_capture, width, height)
