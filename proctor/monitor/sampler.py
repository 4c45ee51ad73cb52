from __future__ import annotations

from typing import Callable

from proctor.camera.acquisition import CameraSession
from proctor.detection.backends.base import DetectionService
from proctor.logging.logger import get_logger
from proctor.monitor.classifier import classify
from proctor.monitor.signals import ViolationKind, ViolationSignal

logger = get_logger(__name__)


class FrameSampler:
    def __init__(
        self,
        detector: DetectionService,
        sink: Callable[[ViolationSignal], object],
        is_stopped: Callable[[], bool],
    ) -> None:
        self._detector = detector
        self._sink = sink
        self._is_stopped = is_stopped
        self.frames_seen = 0
        self.frames_skipped = 0

    async def run(self, session: CameraSession) -> None:
        async for frame in session.frames():
            if self._is_stopped():
                return
            self.frames_seen += 1
            if not frame.ready:
                self._sink(ViolationSignal.of(ViolationKind.CAMERA_BLOCKED))
                continue
            try:
                result = await self._detector.detect(frame)
            except Exception:
                # The next delivered frame is the retry.
                self.frames_skipped += 1
                logger.debug("Skipping frame after detection failure", exc_info=True)
                continue
            if self._is_stopped():
                return
            signal = classify(result.detections)
            if signal is not None:
                self._sink(signal)
