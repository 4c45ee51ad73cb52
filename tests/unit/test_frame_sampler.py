import asyncio

from proctor.camera.acquisition import MediaAcquisition
from proctor.camera.backends.base import HAVE_METADATA, VideoFrame
from proctor.camera.backends.stub import StubCameraSource, placeholder_frame
from proctor.detection.backends.base import Detection, DetectionFrame
from proctor.detection.backends.stub import ScriptedDetectionService
from proctor.detection.errors import DetectionError
from proctor.monitor.sampler import FrameSampler
from proctor.monitor.signals import ViolationKind

NOT_READY = VideoFrame(image=None, ready_state=HAVE_METADATA, video_width=320, video_height=240)
NO_WIDTH = VideoFrame(image=None, ready_state=4, video_width=0, video_height=0)


def run_sampler(frames, script, is_stopped=lambda: False):
    received = []

    async def scenario():
        acquisition = MediaAcquisition(StubCameraSource(frames=frames))
        session = await acquisition.start()
        detector = ScriptedDetectionService(script)
        sampler = FrameSampler(detector, received.append, is_stopped)
        await sampler.run(session)
        await acquisition.stop(session)
        return sampler, detector

    sampler, detector = asyncio.run(scenario())
    return [signal.kind for signal in received], sampler, detector


def test_unready_frames_report_camera_blocked_without_inference():
    kinds, _, detector = run_sampler([NOT_READY, NO_WIDTH], [])
    assert kinds == [ViolationKind.CAMERA_BLOCKED, ViolationKind.CAMERA_BLOCKED]
    assert detector.calls == 0


def test_detections_are_classified_per_frame():
    script = [
        DetectionFrame(),
        DetectionFrame(detections=(Detection.centered_at(0.5, 0.5),)),
        DetectionFrame(detections=(Detection.centered_at(0.5, 0.9),)),
    ]
    kinds, sampler, _ = run_sampler([placeholder_frame()] * 3, script)
    assert kinds == [ViolationKind.NO_FACE, ViolationKind.LOOKING_DOWN]
    assert sampler.frames_seen == 3


def test_failed_inference_skips_only_that_frame():
    script = [DetectionError("model crashed"), DetectionFrame()]
    kinds, sampler, detector = run_sampler([placeholder_frame()] * 2, script)
    assert kinds == [ViolationKind.NO_FACE]
    assert sampler.frames_skipped == 1
    assert detector.calls == 2


def test_result_arriving_after_stop_is_dropped():
    stopped = {"value": False}

    class StoppingDetector(ScriptedDetectionService):
        async def detect(self, frame):
            result = await super().detect(frame)
            stopped["value"] = True
            return result

    received = []

    async def scenario():
        acquisition = MediaAcquisition(StubCameraSource(frames=[placeholder_frame()] * 3))
        session = await acquisition.start()
        sampler = FrameSampler(StoppingDetector([DetectionFrame()]), received.append, lambda: stopped["value"])
        await sampler.run(session)
        return sampler

    sampler = asyncio.run(scenario())
    assert received == []
    assert sampler.frames_seen == 1
