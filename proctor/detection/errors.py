from __future__ import annotations


class DetectionError(Exception):
    """Raised when a single inference call fails."""


class DetectionUnavailableError(DetectionError):
    def __init__(self, message: str = "Face detection backend unavailable."):
        super().__init__(message)
