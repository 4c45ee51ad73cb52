import asyncio

import pytest

from proctor.camera.acquisition import MediaAcquisition
from proctor.camera.backends.stub import StubCameraSource, placeholder_frame
from proctor.camera.errors import CameraAcquisitionAbortedError, CameraPermissionDeniedError


def test_start_is_idempotent():
    async def scenario():
        source = StubCameraSource(frames=[placeholder_frame()])
        acquisition = MediaAcquisition(source)
        first = await acquisition.start()
        second = await acquisition.start()
        return source, first, second

    source, first, second = asyncio.run(scenario())
    assert first is second
    assert source.open_calls == 1


def test_concurrent_starts_share_one_request():
    async def scenario():
        gate = asyncio.Event()
        source = StubCameraSource(permission=gate)
        acquisition = MediaAcquisition(source)
        pending = asyncio.gather(acquisition.start(), acquisition.start())
        await asyncio.sleep(0)
        gate.set()
        first, second = await pending
        await acquisition.stop(first)
        return source, first, second

    source, first, second = asyncio.run(scenario())
    assert first is second
    assert source.open_calls == 1
    assert source.open_streams == 0


def test_denied_permission_raises():
    async def scenario():
        acquisition = MediaAcquisition(StubCameraSource(deny_permission=True))
        await acquisition.start()

    with pytest.raises(CameraPermissionDeniedError):
        asyncio.run(scenario())


def test_stop_twice_is_a_no_op():
    async def scenario():
        source = StubCameraSource()
        acquisition = MediaAcquisition(source)
        session = await acquisition.start()
        await acquisition.stop(session)
        await acquisition.stop(session)
        await acquisition.stop()
        return source, session, acquisition

    source, session, acquisition = asyncio.run(scenario())
    assert session.active is False
    assert acquisition.session is None
    assert source.open_streams == 0


def test_stop_while_pending_releases_late_grant():
    async def scenario():
        gate = asyncio.Event()
        source = StubCameraSource(permission=gate)
        acquisition = MediaAcquisition(source)
        request = asyncio.ensure_future(acquisition.start())
        await asyncio.sleep(0)
        await acquisition.stop()
        gate.set()
        with pytest.raises(CameraAcquisitionAbortedError):
            await request
        return source, acquisition

    source, acquisition = asyncio.run(scenario())
    assert source.open_calls == 1
    assert source.open_streams == 0
    assert acquisition.session is None


def test_new_session_after_stop():
    async def scenario():
        source = StubCameraSource()
        acquisition = MediaAcquisition(source)
        first = await acquisition.start()
        await acquisition.stop(first)
        second = await acquisition.start()
        await acquisition.stop(second)
        return first, second

    first, second = asyncio.run(scenario())
    assert first is not second
    assert first.id != second.id
