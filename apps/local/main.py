from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable

from fastapi import FastAPI
from fastapi.responses import FileResponse

from proctor.logging.logger import get_logger
from proctor.monitor.events import BridgeEventSource, LifecycleEvent
from proctor.monitor.lifecycle import MonitorState, ProctorMonitor
from proctor.monitor.models import LifecycleEventRequest, MonitorStatus, WarningResponse
from proctor.monitor.service import build_monitor, monitor_status, warning_response

MonitorFactory = Callable[[BridgeEventSource], ProctorMonitor]

BRIDGE_SCRIPT = Path(__file__).resolve().parent / "static" / "monitor_bridge.js"


def _default_factory(events: BridgeEventSource) -> ProctorMonitor:
    return build_monitor(events=events)


def create_app(monitor_factory: MonitorFactory | None = None) -> FastAPI:
    logger = get_logger()
    factory = monitor_factory or _default_factory
    bridge = BridgeEventSource()
    holder = {"monitor": factory(bridge)}

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        await holder["monitor"].stop()

    app = FastAPI(title="Proctor Local", lifespan=lifespan)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/monitor/status", response_model=MonitorStatus)
    async def status() -> MonitorStatus:
        return monitor_status(holder["monitor"])

    @app.post("/monitor/start", response_model=MonitorStatus)
    async def start() -> MonitorStatus:
        if holder["monitor"].state is MonitorState.STOPPED:
            # A stopped monitor is finished; the next session gets a fresh one.
            holder["monitor"] = factory(bridge)
        state = await holder["monitor"].start()
        logger.info("Monitor start requested, state=%s", state.value)
        return monitor_status(holder["monitor"])

    @app.post("/monitor/stop", response_model=MonitorStatus)
    async def stop() -> MonitorStatus:
        await holder["monitor"].stop()
        return monitor_status(holder["monitor"])

    @app.get("/monitor/warning", response_model=WarningResponse)
    async def warning() -> WarningResponse:
        return warning_response(holder["monitor"])

    @app.get("/monitor/bridge.js")
    def bridge_script() -> FileResponse:
        return FileResponse(BRIDGE_SCRIPT, media_type="application/javascript")

    # async so dispatch runs on the loop that owns the monitor.
    @app.post("/monitor/events")
    async def lifecycle_event(payload: LifecycleEventRequest) -> dict[str, bool]:
        bridge.dispatch(
            LifecycleEvent(type=payload.type, hidden=payload.hidden, fullscreen=payload.fullscreen)
        )
        return {"ok": True}

    return app


app = create_app()
