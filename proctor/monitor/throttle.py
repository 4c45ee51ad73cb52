from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from proctor.logging.audit import audit_event
from proctor.logging.logger import get_logger
from proctor.monitor.signals import ViolationKind, ViolationSignal

logger = get_logger(__name__)


@dataclass(frozen=True)
class WarningState:
    message: Optional[str] = None
    kind: Optional[ViolationKind] = None
    last_emitted_at: Optional[float] = None


Subscriber = Callable[[WarningState], None]


class WarningThrottler:
    """Single sink for violation signals.

    A signal is shown only if more than ``window_ms`` has passed since the
    last one that was shown; anything inside the window is dropped. After
    ``close()`` every signal is dropped.
    """

    def __init__(self, window_ms: int = 3000, clock: Callable[[], float] = time.monotonic) -> None:
        self.window_ms = window_ms
        self._clock = clock
        self._state = WarningState()
        self._subscribers: List[Subscriber] = []
        self._closed = False

    @property
    def state(self) -> WarningState:
        return self._state

    @property
    def message(self) -> Optional[str]:
        return self._state.message

    @property
    def closed(self) -> bool:
        return self._closed

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def accept(self, signal: ViolationSignal, *, force: bool = False) -> bool:
        if self._closed:
            return False
        now = self._now_ms()
        last = self._state.last_emitted_at
        if not force and last is not None and now - last <= self.window_ms:
            return False
        self._state = WarningState(message=signal.message, kind=signal.kind, last_emitted_at=now)
        audit_event("warning.accepted", kind=signal.kind.value, forced=force)
        self._notify()
        return True

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            try:
                callback(self._state)
            except Exception:
                logger.exception("Warning subscriber failed")

    def close(self) -> None:
        self._closed = True
