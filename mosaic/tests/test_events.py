"""Tests for the engine event bus."""

from mosaic.events import EngineEvent, EventBus, EventPayload, get_event_bus


class TestEventBus:
    """Tests for publish/subscribe."""

    def test_handlers_run_in_order(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EngineEvent.SNAP_APPLIED, lambda p: calls.append("first"))
        bus.subscribe(EngineEvent.SNAP_APPLIED, lambda p: calls.append("second"))

        bus.emit(EngineEvent.SNAP_APPLIED, {"kind": "position"})

        assert calls == ["first", "second"]

    def test_only_matching_event(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EngineEvent.PLACEMENT_CREATED, calls.append)

        bus.emit(EngineEvent.SNAP_APPLIED)

        assert calls == []

    def test_decorator_registration(self):
        bus = EventBus()
        calls = []

        @bus.on_event(EngineEvent.SNAP_APPLIED)
        def play_click(payload):
            calls.append(payload.data)

        bus.emit(EngineEvent.SNAP_APPLIED, {"kind": "size"})

        assert calls == [{"kind": "size"}]
        assert callable(play_click)

    def test_unsubscribe(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EngineEvent.SNAP_APPLIED, calls.append)

        assert bus.unsubscribe(EngineEvent.SNAP_APPLIED, calls.append) is True
        assert bus.unsubscribe(EngineEvent.SNAP_APPLIED, calls.append) is False
        bus.emit(EngineEvent.SNAP_APPLIED)

        assert calls == []

    def test_failing_handler_is_isolated(self, caplog):
        """One broken subscriber does not stop the others or the emitter."""
        bus = EventBus()
        calls = []

        def broken(payload):
            raise RuntimeError("speaker unplugged")

        bus.subscribe(EngineEvent.SNAP_APPLIED, broken)
        bus.subscribe(EngineEvent.SNAP_APPLIED, calls.append)

        payload = bus.emit(EngineEvent.SNAP_APPLIED)

        assert calls == [payload]
        assert "speaker unplugged" in caplog.text

    def test_clear(self):
        bus = EventBus()
        calls = []
        bus.subscribe(EngineEvent.SNAP_APPLIED, calls.append)
        bus.clear()
        bus.emit(EngineEvent.SNAP_APPLIED)
        assert calls == []

    def test_global_bus_is_shared(self):
        assert get_event_bus() is get_event_bus()


class TestEventPayload:
    """Tests for payload serialization."""

    def test_to_dict(self):
        payload = EventPayload(event=EngineEvent.SNAP_APPLIED, data={"kind": "position"})
        data = payload.to_dict()

        assert data["event"] == "snap-applied"
        assert data["data"] == {"kind": "position"}
        assert data["id"]
        assert "T" in data["timestamp"]

    def test_ids_are_unique(self):
        a = EventPayload(event=EngineEvent.SNAP_APPLIED, data={})
        b = EventPayload(event=EngineEvent.SNAP_APPLIED, data={})
        assert a.event_id != b.event_id
