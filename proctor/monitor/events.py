from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from proctor.logging.logger import get_logger
from proctor.monitor.signals import ViolationKind, ViolationSignal

logger = get_logger(__name__)


class LifecycleEventType(str, Enum):
    VISIBILITY_CHANGE = "visibilitychange"
    BLUR = "blur"
    FULLSCREEN_CHANGE = "fullscreenchange"
    DEVICE_CHANGE = "devicechange"


@dataclass(frozen=True)
class LifecycleEvent:
    """A page lifecycle event plus the document state read when it fired."""

    type: LifecycleEventType
    hidden: bool = False
    fullscreen: bool = False


Handler = Callable[[LifecycleEvent], None]


class LifecycleEventSource(Protocol):
    name: str

    def add_listener(self, event_type: LifecycleEventType, handler: Handler) -> None:
        ...

    def remove_listener(self, event_type: LifecycleEventType, handler: Handler) -> None:
        ...

    def listener_count(self) -> int:
        ...


class _ListenerRegistry:
    name = "registry"

    def __init__(self) -> None:
        self._listeners: Dict[LifecycleEventType, List[Handler]] = {t: [] for t in LifecycleEventType}

    def add_listener(self, event_type: LifecycleEventType, handler: Handler) -> None:
        self._listeners[event_type].append(handler)

    def remove_listener(self, event_type: LifecycleEventType, handler: Handler) -> None:
        handlers = self._listeners[event_type]
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self) -> int:
        return sum(len(handlers) for handlers in self._listeners.values())

    def dispatch(self, event: LifecycleEvent) -> None:
        for handler in list(self._listeners[event.type]):
            handler(event)


class ScriptedEventSource(_ListenerRegistry):
    """In-process event source for tests; ``fire`` dispatches synchronously."""

    name = "scripted"

    def fire(self, event_type: LifecycleEventType, *, hidden: bool = False, fullscreen: bool = False) -> None:
        self.dispatch(LifecycleEvent(type=event_type, hidden=hidden, fullscreen=fullscreen))


class BridgeEventSource(_ListenerRegistry):
    """Events forwarded by the candidate's browser page to the host surface.

    ``dispatch`` must be called from the event loop the monitor runs on.
    """

    name = "bridge"


def _on_visibility(event: LifecycleEvent) -> Optional[ViolationKind]:
    return ViolationKind.TAB_SWITCH if event.hidden else None


def _on_blur(event: LifecycleEvent) -> Optional[ViolationKind]:
    return ViolationKind.WINDOW_BLUR


def _on_fullscreen(event: LifecycleEvent) -> Optional[ViolationKind]:
    return None if event.fullscreen else ViolationKind.FULLSCREEN_EXIT


def _on_device_change(event: LifecycleEvent) -> Optional[ViolationKind]:
    return ViolationKind.DEVICE_CHANGE


MAPPINGS: Dict[LifecycleEventType, Callable[[LifecycleEvent], Optional[ViolationKind]]] = {
    LifecycleEventType.VISIBILITY_CHANGE: _on_visibility,
    LifecycleEventType.BLUR: _on_blur,
    LifecycleEventType.FULLSCREEN_CHANGE: _on_fullscreen,
    LifecycleEventType.DEVICE_CHANGE: _on_device_change,
}


class EventFanIn:
    """Registers one listener per lifecycle event and forwards mapped signals."""

    def __init__(self, source: LifecycleEventSource, sink: Callable[[ViolationSignal], object]) -> None:
        self._source = source
        self._sink = sink
        self._registered: List[Tuple[LifecycleEventType, Handler]] = []

    @property
    def registered(self) -> int:
        return len(self._registered)

    def _handler_for(self, event_type: LifecycleEventType) -> Handler:
        mapping = MAPPINGS[event_type]

        def handle(event: LifecycleEvent) -> None:
            kind = mapping(event)
            if kind is not None:
                self._sink(ViolationSignal.of(kind))

        return handle

    def register(self) -> None:
        if self._registered:
            return
        for event_type in LifecycleEventType:
            handler = self._handler_for(event_type)
            self._source.add_listener(event_type, handler)
            self._registered.append((event_type, handler))

    def unregister(self) -> List[Exception]:
        """Remove every listener, continuing past failures; returns the failures."""

        errors: List[Exception] = []
        registered, self._registered = self._registered, []
        for event_type, handler in registered:
            try:
                self._source.remove_listener(event_type, handler)
            except Exception as exc:
                logger.warning("Failed to remove %s listener", event_type.value, exc_info=True)
                errors.append(exc)
        return errors
