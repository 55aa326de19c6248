"""Tests for the host event dispatcher."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from horizon.host.container import Container
from horizon.host.events import Dispatcher


class _Recorder:
    calls: list[dict[str, Any]] = []

    def handle(self, payload: Mapping[str, Any]) -> str:
        _Recorder.calls.append(dict(payload))
        return "handled"


class TestDispatcher:
    def test_callables_called_in_order(self) -> None:
        order: list[str] = []
        events = Dispatcher()
        events.listen("e", lambda p: order.append("first"))
        events.listen("e", lambda p: order.append("second"))
        events.dispatch("e")
        assert order == ["first", "second"]

    def test_payload_passed(self) -> None:
        seen: list[dict[str, Any]] = []
        events = Dispatcher()
        events.listen("e", seen.append)
        events.dispatch("e", {"id": "1"})
        assert seen == [{"id": "1"}]

    def test_duplicate_listen_attaches_twice(self) -> None:
        events = Dispatcher()
        listener = lambda p: None  # noqa: E731
        events.listen("e", listener)
        events.listen("e", listener)
        assert events.get_listeners("e") == [listener, listener]

    def test_string_listener_resolved_through_container(self) -> None:
        _Recorder.calls.clear()
        container = Container()
        container.instance("recorder", _Recorder())
        events = Dispatcher(container)
        events.listen("e", "recorder")
        assert events.dispatch("e", {"id": "1"}) == ["handled"]
        assert _Recorder.calls == [{"id": "1"}]

    def test_string_listener_without_container(self) -> None:
        events = Dispatcher()
        events.listen("e", "recorder")
        with pytest.raises(LookupError):
            events.dispatch("e")

    def test_events_and_has_listeners(self) -> None:
        events = Dispatcher()
        assert not events.has_listeners("e")
        events.listen("e", lambda p: None)
        assert events.has_listeners("e")
        assert events.events() == ["e"]

    def test_dispatch_without_listeners(self) -> None:
        assert Dispatcher().dispatch("nothing") == []
