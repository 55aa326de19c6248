"""Static event map — event names to ordered listener identifiers.

INVARIANT: Declaration order is dispatch order, and an event name appears
at most once. The map is declared as a sequence of pairs (not a dict
literal) so a repeated name is detectable and rejected at load time.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from horizon.contracts import EventDispatcher
from horizon.errors import DuplicateEventDeclarationError

logger = logging.getLogger(__name__)

JOB_PUSHED = "horizon.job.pushed"
JOB_RESERVED = "horizon.job.reserved"
JOB_RELEASED = "horizon.job.released"
JOB_DELETED = "horizon.job.deleted"
JOB_FAILED = "horizon.job.failed"
MASTER_SUPERVISOR_LOOPED = "horizon.master_supervisor.looped"
LONG_WAIT_DETECTED = "horizon.long_wait.detected"

_L = "horizon.listeners."

HORIZON_EVENTS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (JOB_PUSHED, (_L + "StoreJob",)),
    (JOB_RESERVED, (_L + "MarkJobAsReserved", _L + "StartTimingJob")),
    (JOB_RELEASED, (_L + "MarkJobAsReleased",)),
    (JOB_DELETED, (_L + "MarkJobAsComplete", _L + "UpdateJobMetrics")),
    (JOB_FAILED, (_L + "MarkJobAsFailed",)),
    (
        MASTER_SUPERVISOR_LOOPED,
        (_L + "TrimRecentJobs", _L + "TrimFailedJobs", _L + "ExpireSupervisors"),
    ),
    (LONG_WAIT_DETECTED, (_L + "LogLongWaitDetected",)),
)


@dataclass(frozen=True)
class EventBinding:
    event: str
    listeners: tuple[str, ...]


class EventMap:
    """Ordered, duplicate-free event -> listeners table."""

    def __init__(self, bindings: Iterable[EventBinding]) -> None:
        self._bindings: dict[str, EventBinding] = {}
        for binding in bindings:
            if binding.event in self._bindings:
                raise DuplicateEventDeclarationError(binding.event)
            self._bindings[binding.event] = binding

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, Iterable[str]]]) -> EventMap:
        return cls(EventBinding(event, tuple(listeners)) for event, listeners in pairs)

    def __iter__(self) -> Iterator[EventBinding]:
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)

    def events(self) -> list[str]:
        return list(self._bindings)

    def listeners_for(self, event: str) -> tuple[str, ...]:
        binding = self._bindings.get(event)
        return binding.listeners if binding else ()

    def register_events(self, dispatcher: EventDispatcher) -> int:
        """Attach every listener to *dispatcher*. Not idempotent.

        Returns the number of listeners attached.
        """
        attached = 0
        for binding in self:
            for listener in binding.listeners:
                dispatcher.listen(binding.event, listener)
                attached += 1
        logger.debug("Attached %d listeners for %d events", attached, len(self))
        return attached
