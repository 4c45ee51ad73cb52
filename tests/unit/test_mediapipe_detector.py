import asyncio
from types import SimpleNamespace

import pytest

from proctor.camera.backends.base import VideoFrame
from proctor.config import DetectorConfig
from proctor.detection.backends import mediapipe_face
from proctor.detection.backends.mediapipe_face import MediaPipeDetectionService
from proctor.detection.errors import DetectionError, DetectionUnavailableError

CONFIG = DetectorConfig(backend="mediapipe", model="short", min_detection_confidence=0.7)
FRAME = VideoFrame(image=object(), ready_state=4, video_width=320, video_height=240)
EMPTY = VideoFrame(image=None, ready_state=0, video_width=0, video_height=0)


def mp_detection(xmin, ymin, width, height, score=0.9):
    box = SimpleNamespace(xmin=xmin, ymin=ymin, width=width, height=height)
    return SimpleNamespace(location_data=SimpleNamespace(relative_bounding_box=box), score=[score])


class FakeFaceDetection:
    def __init__(self, detections=None, fail=False):
        self.detections = detections
        self.fail = fail
        self.closed = False

    def process(self, image):
        if self.fail:
            raise RuntimeError("graph error")
        return SimpleNamespace(detections=self.detections)

    def close(self):
        self.closed = True


def service_with(fake):
    service = MediaPipeDetectionService(CONFIG)
    service._detector = fake
    return service


def test_boxes_are_converted_to_centers():
    fake = FakeFaceDetection([mp_detection(0.4, 0.3, 0.2, 0.4)])
    result = asyncio.run(service_with(fake).detect(FRAME))
    assert len(result) == 1
    box = result.detections[0].bounding_box
    assert box.x_center == pytest.approx(0.5)
    assert box.y_center == pytest.approx(0.5)
    assert result.detections[0].score == pytest.approx(0.9)


def test_no_detections_is_empty_frame():
    result = asyncio.run(service_with(FakeFaceDetection(None)).detect(FRAME))
    assert len(result) == 0


def test_inference_errors_are_wrapped():
    with pytest.raises(DetectionError):
        asyncio.run(service_with(FakeFaceDetection(fail=True)).detect(FRAME))


def test_frame_without_image_is_rejected():
    with pytest.raises(DetectionError):
        asyncio.run(service_with(FakeFaceDetection([])).detect(EMPTY))


def test_missing_library_reports_unavailable(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(mediapipe_face, "_mediapipe_available", lambda: False)
    with pytest.raises(DetectionUnavailableError):
        asyncio.run(MediaPipeDetectionService(CONFIG).load())


def test_close_releases_model():
    fake = FakeFaceDetection([])
    service = service_with(fake)
    asyncio.run(service.close())
    asyncio.run(service.close())
    assert fake.closed is True
