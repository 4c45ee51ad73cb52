from __future__ import annotations

from collections import deque
from typing import Iterable, Union

from proctor.camera.backends.base import VideoFrame
from proctor.detection.backends.base import Detection, DetectionFrame, DetectionService

ScriptStep = Union[DetectionFrame, Exception]

_CENTERED = DetectionFrame(detections=(Detection.centered_at(0.5, 0.5),))


class ScriptedDetectionService(DetectionService):
    """Replays a fixed script of results; exceptions in the script are raised.

    Once the script runs out every frame reports one centered face.
    """

    name = "stub"

    def __init__(self, script: Iterable[ScriptStep] = ()):
        self._script: deque[ScriptStep] = deque(script)
        self.loaded = False
        self.closed = False
        self.calls = 0

    async def load(self) -> None:
        self.loaded = True

    async def detect(self, frame: VideoFrame) -> DetectionFrame:
        self.calls += 1
        if not self._script:
            return _CENTERED
        step = self._script.popleft()
        if isinstance(step, Exception):
            raise step
        return step

    async def close(self) -> None:
        self.closed = True
