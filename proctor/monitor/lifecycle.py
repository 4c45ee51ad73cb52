"""Start/stop orchestration for the integrity monitor.

The monitor owns the camera session, the frame sampler task and the four
lifecycle listeners. Everything it produces goes through one
``WarningThrottler``; frame results and page events both run on the same
event loop, so whichever reaches ``accept`` first inside a window is the one
that is shown.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Callable, Optional

from proctor.camera.acquisition import MediaAcquisition
from proctor.camera.errors import CameraAcquisitionAbortedError, CameraError
from proctor.detection.backends.base import DetectionService
from proctor.logging.audit import audit_event
from proctor.logging.logger import get_logger
from proctor.monitor.events import EventFanIn, LifecycleEventSource
from proctor.monitor.sampler import FrameSampler
from proctor.monitor.signals import ViolationKind, ViolationSignal
from proctor.monitor.throttle import Subscriber, WarningState, WarningThrottler

logger = get_logger(__name__)


class MonitorState(str, Enum):
    IDLE = "Idle"
    STARTING = "Starting"
    ACTIVE = "Active"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    FAILED = "Failed"


class ProctorMonitor:
    def __init__(
        self,
        acquisition: MediaAcquisition,
        detector: DetectionService,
        events: LifecycleEventSource,
        throttler: WarningThrottler | None = None,
    ) -> None:
        self.acquisition = acquisition
        self.detector = detector
        self.events = events
        self.throttler = throttler or WarningThrottler()
        self._fan_in = EventFanIn(events, self._accept)
        self._sampler = FrameSampler(detector, self._accept, lambda: self._stopped)
        self._sampler_task: Optional[asyncio.Task[None]] = None
        self._stopped = False
        self._state = MonitorState.IDLE

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def warning(self) -> Optional[str]:
        return self.throttler.message

    @property
    def warning_state(self) -> WarningState:
        return self.throttler.state

    @property
    def stopped(self) -> bool:
        return self._stopped

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        return self.throttler.subscribe(callback)

    def _set_state(self, state: MonitorState) -> None:
        self._state = state
        audit_event("monitor.state", state=state.value)

    def _accept(self, signal: ViolationSignal) -> bool:
        if self._stopped:
            return False
        return self.throttler.accept(signal)

    async def start(self) -> MonitorState:
        if self._state in (MonitorState.STARTING, MonitorState.ACTIVE):
            # A second start shares the camera session that is already open or pending.
            if self._state is MonitorState.STARTING:
                await self._acquire_quietly()
            return self._state
        if self._state is not MonitorState.IDLE:
            logger.info("Monitor cannot be restarted from %s", self._state.value)
            return self._state

        self._set_state(MonitorState.STARTING)
        audit_event(
            "monitor.start",
            camera=self.acquisition.backend,
            detector=self.detector.name,
            events=self.events.name,
        )
        try:
            self._fan_in.register()
        except Exception:
            logger.exception("Failed to register lifecycle listeners")

        try:
            session = await self.acquisition.start()
        except CameraAcquisitionAbortedError:
            return self._state
        except CameraError as exc:
            logger.warning("Camera unavailable: %s", exc)
            return self._fail_without_camera()
        except Exception:
            logger.warning("Camera could not be opened", exc_info=True)
            return self._fail_without_camera()

        try:
            await self.detector.load()
        except Exception:
            # Frames that fail inference are skipped, so the monitor can still run.
            logger.warning("Face detector failed to load", exc_info=True)

        if self._stopped:
            # stop() ran while the camera or model was still loading.
            try:
                await self.acquisition.stop(session)
            except Exception:
                logger.warning("Failed to stop camera tracks", exc_info=True)
            try:
                await self.detector.close()
            except Exception:
                logger.warning("Failed to close face detector", exc_info=True)
            return self._state

        self._sampler_task = asyncio.ensure_future(self._sampler.run(session))
        self._set_state(MonitorState.ACTIVE)
        return self._state

    def _fail_without_camera(self) -> MonitorState:
        if self._stopped:
            return self._state
        self.throttler.accept(ViolationSignal.of(ViolationKind.PERMISSION_DENIED), force=True)
        self._set_state(MonitorState.FAILED)
        return self._state

    async def _acquire_quietly(self) -> None:
        try:
            await self.acquisition.start()
        except Exception:
            logger.debug("Shared camera request failed", exc_info=True)

    async def stop(self) -> MonitorState:
        if self._state in (MonitorState.STOPPING, MonitorState.STOPPED):
            return self._state
        if self._state is MonitorState.IDLE:
            self._stopped = True
            self._set_state(MonitorState.STOPPED)
            return self._state

        self._set_state(MonitorState.STOPPING)
        # Set first so nothing accepted after this point can change the warning.
        self._stopped = True
        self.throttler.close()

        task, self._sampler_task = self._sampler_task, None
        if task is not None and not task.done():
            task.cancel()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception:
                logger.warning("Frame sampler ended with an error", exc_info=True)

        try:
            await self.acquisition.stop()
        except Exception:
            logger.warning("Failed to stop camera tracks", exc_info=True)

        self._fan_in.unregister()

        try:
            await self.detector.close()
        except Exception:
            logger.warning("Failed to close face detector", exc_info=True)

        self._set_state(MonitorState.STOPPED)
        audit_event("monitor.stop", listeners=self.events.listener_count())
        return self._state
