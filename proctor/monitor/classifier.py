from __future__ import annotations

from typing import Optional, Sequence

from proctor.detection.backends.base import Detection
from proctor.monitor.signals import ViolationKind, ViolationSignal

# Normalized frame coordinates, origin top-left.
MIN_X = 0.3
MAX_X = 0.7
MIN_Y = 0.3
LOOKING_DOWN_Y = 0.75


def classify(detections: Sequence[Detection]) -> Optional[ViolationSignal]:
    """Map one frame's detections to at most one violation.

    A face outside the centre band is reported as ``OffScreen`` even when it
    is also low enough to count as ``LookingDown``; the off-screen check runs
    first and wins.
    """

    if len(detections) == 0:
        return ViolationSignal.of(ViolationKind.NO_FACE)
    if len(detections) > 1:
        return ViolationSignal.of(ViolationKind.MULTIPLE_FACES)

    box = detections[0].bounding_box
    x, y = box.x_center, box.y_center
    if x < MIN_X or x > MAX_X or y < MIN_Y:
        return ViolationSignal.of(ViolationKind.OFF_SCREEN)
    if y > LOOKING_DOWN_Y:
        return ViolationSignal.of(ViolationKind.LOOKING_DOWN)
    return None
