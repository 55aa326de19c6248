"""Event dispatcher — named events with ordered listener lists.

Listeners are callables or container keys (typically dotted class paths).
Keys are resolved through the container at dispatch time and their
``handle(payload)`` method is called.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from horizon.host.container import Container

logger = logging.getLogger(__name__)

Listener = str | Callable[[Mapping[str, Any]], Any]


class Dispatcher:
    def __init__(self, container: Container | None = None) -> None:
        self._container = container
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)

    def listen(self, event: str, listener: Listener) -> None:
        """Append *listener* for *event*. Duplicates are attached again."""
        self._listeners[event].append(listener)

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def get_listeners(self, event: str) -> list[Listener]:
        return list(self._listeners.get(event, ()))

    def events(self) -> list[str]:
        return [name for name, listeners in self._listeners.items() if listeners]

    def dispatch(self, event: str, payload: Mapping[str, Any] | None = None) -> list[Any]:
        """Call every listener for *event* in attachment order."""
        data = dict(payload or {})
        results = []
        for listener in self.get_listeners(event):
            results.append(self._call(listener, data))
        logger.debug("Dispatched %s to %d listeners", event, len(results))
        return results

    def _call(self, listener: Listener, payload: dict[str, Any]) -> Any:
        if callable(listener):
            return listener(payload)
        if self._container is None:
            raise LookupError(f"Cannot resolve listener {listener!r} without a container")
        return self._container.make(listener).handle(payload)
