from __future__ import annotations

from proctor.camera.acquisition import MediaAcquisition
from proctor.camera.backends.base import CameraSource
from proctor.camera.backends.stub import StubCameraSource
from proctor.config import CameraConfig, DetectorConfig, MonitorConfig, get_monitor_config
from proctor.detection.backends.base import DetectionService
from proctor.detection.backends.stub import ScriptedDetectionService
from proctor.monitor.events import BridgeEventSource, LifecycleEventSource
from proctor.monitor.lifecycle import ProctorMonitor
from proctor.monitor.models import MonitorStatus, WarningResponse
from proctor.monitor.throttle import WarningThrottler


def _camera_source(config: CameraConfig) -> CameraSource:
    if config.backend == "opencv":
        from proctor.camera.backends.opencv import OpenCVCameraSource

        return OpenCVCameraSource(config)
    return StubCameraSource(config)


def _detection_service(config: DetectorConfig) -> DetectionService:
    if config.backend == "mediapipe":
        from proctor.detection.backends.mediapipe_face import MediaPipeDetectionService

        return MediaPipeDetectionService(config)
    return ScriptedDetectionService()


def build_monitor(
    config: MonitorConfig | None = None,
    events: LifecycleEventSource | None = None,
) -> ProctorMonitor:
    config = config or get_monitor_config()
    acquisition = MediaAcquisition(
        _camera_source(config.camera),
        width=config.camera.width,
        height=config.camera.height,
    )
    return ProctorMonitor(
        acquisition=acquisition,
        detector=_detection_service(config.detector),
        events=events or BridgeEventSource(),
        throttler=WarningThrottler(window_ms=config.warning_window_ms),
    )


def monitor_status(monitor: ProctorMonitor) -> MonitorStatus:
    return MonitorStatus(
        state=monitor.state.value,
        warning=monitor.warning,
        camera_backend=monitor.acquisition.backend,
        detector_backend=monitor.detector.name,
        listeners=monitor.events.listener_count(),
    )


def warning_response(monitor: ProctorMonitor) -> WarningResponse:
    state = monitor.warning_state
    return WarningResponse(
        message=state.message,
        kind=state.kind.value if state.kind else None,
        last_emitted_at=state.last_emitted_at,
    )
