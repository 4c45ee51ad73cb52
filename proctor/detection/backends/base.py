from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from proctor.camera.backends.base import VideoFrame


@dataclass(frozen=True)
class BoundingBox:
    x_center: float
    y_center: float
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Detection:
    bounding_box: BoundingBox
    score: float | None = None

    @classmethod
    def centered_at(cls, x: float, y: float) -> "Detection":
        return cls(bounding_box=BoundingBox(x_center=x, y_center=y))


@dataclass(frozen=True)
class DetectionFrame:
    detections: Sequence[Detection] = ()

    def __len__(self) -> int:
        return len(self.detections)


class DetectionService(Protocol):
    name: str

    async def load(self) -> None:
        ...

    async def detect(self, frame: VideoFrame) -> DetectionFrame:
        ...

    async def close(self) -> None:
        ...
