"""Tests for the static event map."""

from __future__ import annotations

import pytest

from horizon.errors import DuplicateEventDeclarationError
from horizon.events import HORIZON_EVENTS, JOB_DELETED, JOB_RESERVED, EventBinding, EventMap
from horizon.host.events import Dispatcher


class TestEventMap:
    def test_from_pairs_preserves_order(self) -> None:
        event_map = EventMap.from_pairs([("b", ["x", "y"]), ("a", ["z"])])
        assert event_map.events() == ["b", "a"]
        assert event_map.listeners_for("b") == ("x", "y")

    def test_duplicate_event_rejected(self) -> None:
        with pytest.raises(DuplicateEventDeclarationError) as exc_info:
            EventMap([EventBinding("a", ("x",)), EventBinding("a", ("y",))])
        assert exc_info.value.event == "a"

    def test_unknown_event_has_no_listeners(self) -> None:
        assert EventMap([]).listeners_for("missing") == ()

    def test_register_events_attaches_in_declared_order(self) -> None:
        event_map = EventMap.from_pairs([("a", ["l1", "l2", "l3"]), ("b", ["l4"])])
        dispatcher = Dispatcher()
        assert event_map.register_events(dispatcher) == 4
        assert dispatcher.get_listeners("a") == ["l1", "l2", "l3"]
        assert dispatcher.get_listeners("b") == ["l4"]

    def test_register_events_twice_double_attaches(self) -> None:
        event_map = EventMap.from_pairs([("a", ["l1"])])
        dispatcher = Dispatcher()
        event_map.register_events(dispatcher)
        event_map.register_events(dispatcher)
        assert dispatcher.get_listeners("a") == ["l1", "l1"]


class TestHorizonEvents:
    def test_loads_without_duplicates(self) -> None:
        event_map = EventMap.from_pairs(HORIZON_EVENTS)
        assert len(event_map) == len(HORIZON_EVENTS)

    def test_reserved_marks_before_timing(self) -> None:
        listeners = EventMap.from_pairs(HORIZON_EVENTS).listeners_for(JOB_RESERVED)
        assert listeners == (
            "horizon.listeners.MarkJobAsReserved",
            "horizon.listeners.StartTimingJob",
        )

    def test_completion_recorded_before_metrics(self) -> None:
        listeners = EventMap.from_pairs(HORIZON_EVENTS).listeners_for(JOB_DELETED)
        assert listeners.index("horizon.listeners.MarkJobAsComplete") < listeners.index(
            "horizon.listeners.UpdateJobMetrics"
        )

    def test_listener_ids_are_importable(self) -> None:
        import importlib

        for binding in EventMap.from_pairs(HORIZON_EVENTS):
            for listener in binding.listeners:
                module, _, name = listener.rpartition(".")
                assert hasattr(importlib.import_module(module), name)
