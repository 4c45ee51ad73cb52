from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


# Load environment variables from a local .env file if present.
load_dotenv()


@dataclass(frozen=True)
class CameraConfig:
    backend: str
    device_index: int
    width: int
    height: int
    stub_fps: float
    retry_ms: int


@dataclass(frozen=True)
class DetectorConfig:
    backend: str
    model: str
    min_detection_confidence: float


@dataclass(frozen=True)
class MonitorConfig:
    camera: CameraConfig
    detector: DetectorConfig
    warning_window_ms: int


@dataclass(frozen=True)
class HostConfig:
    host: str
    port: int


def _parse_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_choice(value: str | None, choices: set[str], default: str) -> str:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized not in choices:
        return default
    return normalized


def get_camera_config() -> CameraConfig:
    return CameraConfig(
        backend=_parse_choice(os.getenv("PROCTOR_CAMERA_BACKEND"), {"stub", "opencv"}, "stub"),
        device_index=_parse_int(os.getenv("PROCTOR_CAMERA_DEVICE_INDEX"), 0),
        width=_parse_int(os.getenv("PROCTOR_CAMERA_WIDTH"), 320),
        height=_parse_int(os.getenv("PROCTOR_CAMERA_HEIGHT"), 240),
        stub_fps=_parse_float(os.getenv("PROCTOR_CAMERA_STUB_FPS"), 15.0),
        retry_ms=_parse_int(os.getenv("PROCTOR_CAMERA_RETRY_MS"), 100),
    )


def get_detector_config() -> DetectorConfig:
    confidence = _parse_float(os.getenv("PROCTOR_MIN_DETECTION_CONFIDENCE"), 0.7)
    if not 0.0 <= confidence <= 1.0:
        confidence = 0.7
    return DetectorConfig(
        backend=_parse_choice(os.getenv("PROCTOR_DETECTOR_BACKEND"), {"stub", "mediapipe"}, "stub"),
        model=_parse_choice(os.getenv("PROCTOR_DETECTOR_MODEL"), {"short", "full"}, "short"),
        min_detection_confidence=confidence,
    )


def get_monitor_config() -> MonitorConfig:
    window_ms = _parse_int(os.getenv("PROCTOR_WARNING_WINDOW_MS"), 3000)
    if window_ms < 0:
        window_ms = 3000
    return MonitorConfig(
        camera=get_camera_config(),
        detector=get_detector_config(),
        warning_window_ms=window_ms,
    )


def get_host_config() -> HostConfig:
    host = os.getenv("PROCTOR_LOCAL_HOST", "127.0.0.1").strip() or "127.0.0.1"
    port = _parse_int(os.getenv("PROCTOR_LOCAL_PORT"), 8000)
    return HostConfig(host=host, port=port)
