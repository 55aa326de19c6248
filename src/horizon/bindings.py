"""Services the module provides to the host container.

Each entry becomes a lazy singleton: nothing is constructed during
registration, and the container owns the instance once it is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

from horizon.contracts import (
    CommandQueue,
    Container,
    JobRepository,
    MasterSupervisorRepository,
    MetricsRepository,
    SupervisorRepository,
)
from horizon.errors import BindingConflictError
from horizon.stopwatch import Stopwatch
from horizon.storage.repositories import (
    DatabaseCommandQueue,
    DatabaseJobRepository,
    DatabaseMasterSupervisorRepository,
    DatabaseMetricsRepository,
    DatabaseSupervisorRepository,
    Lock,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceBindingEntry:
    """A self-binding (``concrete is None``) or a key -> implementation binding."""

    key: Any
    concrete: type | None = None

    @property
    def is_self_binding(self) -> bool:
        return self.concrete is None

    @property
    def implementation(self) -> Any:
        return self.key if self.concrete is None else self.concrete


class ServiceBindingTable:
    def __init__(self, entries: Iterable[ServiceBindingEntry]) -> None:
        self._entries: list[ServiceBindingEntry] = []
        seen: set[Any] = set()
        for entry in entries:
            if entry.key in seen:
                raise BindingConflictError(entry.key)
            seen.add(entry.key)
            self._entries.append(entry)

    def __iter__(self) -> Iterator[ServiceBindingEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[Any]:
        return [entry.key for entry in self._entries]

    def register_services(self, container: Container) -> None:
        """Register every entry as a lazy singleton.

        Raises:
            BindingConflictError: A key is already bound in *container*.
                Checked for all entries before any is registered.
        """
        for entry in self._entries:
            if container.bound(entry.key):
                raise BindingConflictError(entry.key)

        for entry in self._entries:
            if entry.is_self_binding:
                container.singleton(entry.key)
            else:
                container.singleton(entry.key, _builder(entry.implementation))
        logger.debug("Registered %d service bindings", len(self._entries))


def _builder(concrete: type) -> Any:
    return lambda container: container.build(concrete)


SERVICE_BINDINGS: tuple[ServiceBindingEntry, ...] = (
    ServiceBindingEntry(Lock),
    ServiceBindingEntry(Stopwatch),
    ServiceBindingEntry(JobRepository, DatabaseJobRepository),
    ServiceBindingEntry(MasterSupervisorRepository, DatabaseMasterSupervisorRepository),
    ServiceBindingEntry(SupervisorRepository, DatabaseSupervisorRepository),
    ServiceBindingEntry(MetricsRepository, DatabaseMetricsRepository),
    ServiceBindingEntry(CommandQueue, DatabaseCommandQueue),
)
