from __future__ import annotations

import asyncio
import itertools
from typing import AsyncIterator

from proctor.camera.backends.base import CameraSource, CameraStream, VideoFrame
from proctor.camera.errors import CameraAcquisitionAbortedError
from proctor.logging.audit import audit_event

_session_ids = itertools.count(1)


class CameraSession:
    """Handle to the live stream. Only ``MediaAcquisition`` opens or stops it."""

    def __init__(self, stream: CameraStream, backend: str):
        self.id = next(_session_ids)
        self.backend = backend
        self._stream = stream

    @property
    def active(self) -> bool:
        return self._stream.active

    def frames(self) -> AsyncIterator[VideoFrame]:
        return self._stream.frames()

    async def _release(self) -> None:
        await self._stream.stop()


class MediaAcquisition:
    def __init__(self, source: CameraSource, *, width: int = 320, height: int = 240):
        self._source = source
        self._width = width
        self._height = height
        self._session: CameraSession | None = None
        self._pending: asyncio.Task[CameraSession] | None = None
        self._abandoned = False

    @property
    def backend(self) -> str:
        return self._source.name

    @property
    def session(self) -> CameraSession | None:
        if self._session is not None and self._session.active:
            return self._session
        return None

    async def start(self) -> CameraSession:
        current = self.session
        if current is not None:
            return current
        if self._pending is None:
            self._abandoned = False
            self._pending = asyncio.ensure_future(self._open())
        # Concurrent callers share one permission request.
        return await asyncio.shield(self._pending)

    async def _open(self) -> CameraSession:
        try:
            stream = await self._source.open(self._width, self._height)
        finally:
            self._pending = None
        if self._abandoned:
            await stream.stop()
            audit_event("camera.release", backend=self.backend, reason="abandoned")
            raise CameraAcquisitionAbortedError()
        self._session = CameraSession(stream, self.backend)
        audit_event(
            "camera.acquire",
            backend=self.backend,
            session=self._session.id,
            width=self._width,
            height=self._height,
        )
        return self._session

    async def stop(self, session: CameraSession | None = None) -> None:
        if self._pending is not None:
            # Whatever the platform grants later is released on arrival.
            self._abandoned = True
        target = session or self._session
        if target is self._session:
            self._session = None
        if target is None or not target.active:
            return
        await target._release()
        audit_event("camera.release", backend=self.backend, session=target.id)
