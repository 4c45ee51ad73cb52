from proctor.monitor.events import EventFanIn, LifecycleEventType, ScriptedEventSource
from proctor.monitor.signals import ViolationKind


def build():
    source = ScriptedEventSource()
    received = []
    fan_in = EventFanIn(source, received.append)
    fan_in.register()
    return source, fan_in, received


def kinds(received):
    return [signal.kind for signal in received]


def test_registers_one_listener_per_event():
    source, fan_in, _ = build()
    assert source.listener_count() == 4
    fan_in.register()
    assert source.listener_count() == 4


def test_tab_switch_only_when_hidden():
    source, _, received = build()
    source.fire(LifecycleEventType.VISIBILITY_CHANGE, hidden=False)
    assert received == []
    source.fire(LifecycleEventType.VISIBILITY_CHANGE, hidden=True)
    assert kinds(received) == [ViolationKind.TAB_SWITCH]


def test_fullscreen_exit_only_when_element_absent():
    source, _, received = build()
    source.fire(LifecycleEventType.FULLSCREEN_CHANGE, fullscreen=True)
    assert received == []
    source.fire(LifecycleEventType.FULLSCREEN_CHANGE, fullscreen=False)
    assert kinds(received) == [ViolationKind.FULLSCREEN_EXIT]


def test_blur_and_device_change_always_signal():
    source, _, received = build()
    source.fire(LifecycleEventType.BLUR)
    source.fire(LifecycleEventType.DEVICE_CHANGE)
    assert kinds(received) == [ViolationKind.WINDOW_BLUR, ViolationKind.DEVICE_CHANGE]


def test_unregister_removes_everything():
    source, fan_in, received = build()
    assert fan_in.unregister() == []
    assert source.listener_count() == 0
    source.fire(LifecycleEventType.BLUR)
    assert received == []


class FlakySource(ScriptedEventSource):
    def remove_listener(self, event_type, handler):
        if event_type is LifecycleEventType.BLUR:
            raise RuntimeError("window already gone")
        super().remove_listener(event_type, handler)


def test_unregister_continues_past_failures():
    source = FlakySource()
    fan_in = EventFanIn(source, lambda signal: None)
    fan_in.register()
    errors = fan_in.unregister()
    assert len(errors) == 1
    assert source.listener_count() == 1
    assert fan_in.registered == 0
