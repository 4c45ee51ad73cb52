from __future__ import annotations

import asyncio
import importlib
import importlib.util
from typing import Any

from proctor.camera.backends.base import VideoFrame
from proctor.config import DetectorConfig
from proctor.detection.backends.base import BoundingBox, Detection, DetectionFrame, DetectionService
from proctor.detection.errors import DetectionError, DetectionUnavailableError
from proctor.logging.logger import get_logger

logger = get_logger(__name__)

_MODEL_SELECTION = {"short": 0, "full": 1}


def _mediapipe_available() -> bool:
    return importlib.util.find_spec("mediapipe") is not None


class MediaPipeDetectionService(DetectionService):
    """Face detection backed by MediaPipe's BlazeFace models.

    The model is built on first use, off the event loop, and reused for every
    later frame. Bounding boxes come back in normalized image coordinates.
    """

    name = "mediapipe"

    def __init__(self, config: DetectorConfig):
        self._config = config
        self._detector: Any = None
        self._loading: asyncio.Task[Any] | None = None

    def _build(self) -> Any:
        if not _mediapipe_available():
            raise DetectionUnavailableError("mediapipe is not installed.")
        mp = importlib.import_module("mediapipe")
        detector = mp.solutions.face_detection.FaceDetection(
            model_selection=_MODEL_SELECTION.get(self._config.model, 0),
            min_detection_confidence=self._config.min_detection_confidence,
        )
        logger.info("MediaPipe face detection loaded (model=%s)", self._config.model)
        return detector

    async def load(self) -> None:
        if self._detector is not None:
            return
        if self._loading is None:
            self._loading = asyncio.ensure_future(asyncio.to_thread(self._build))
        try:
            self._detector = await asyncio.shield(self._loading)
        finally:
            if self._loading is not None and self._loading.done():
                self._loading = None

    def _process(self, image: Any) -> DetectionFrame:
        results = self._detector.process(image)
        detections = []
        for detection in results.detections or []:
            box = detection.location_data.relative_bounding_box
            detections.append(
                Detection(
                    bounding_box=BoundingBox(
                        x_center=box.xmin + box.width / 2,
                        y_center=box.ymin + box.height / 2,
                        width=box.width,
                        height=box.height,
                    ),
                    score=float(detection.score[0]) if detection.score else None,
                )
            )
        return DetectionFrame(detections=tuple(detections))

    async def detect(self, frame: VideoFrame) -> DetectionFrame:
        if frame.image is None:
            raise DetectionError("Frame carries no image data.")
        await self.load()
        try:
            return await asyncio.to_thread(self._process, frame.image)
        except Exception as exc:
            raise DetectionError(f"Face detection failed: {exc}") from exc

    async def close(self) -> None:
        detector, self._detector = self._detector, None
        if detector is not None:
            await asyncio.to_thread(detector.close)
