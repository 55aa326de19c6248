"""Contracts at the module boundary.

Host contracts describe what the module consumes from the host
application. The module never implements these; :mod:`horizon.host`
provides an in-process implementation used by the CLI and tests.

Repository contracts are the container keys the module binds to its own
storage implementations (see :mod:`horizon.bindings`).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    import click
    from sqlalchemy.engine import Engine

    from horizon.result import ServiceResult

# --- Host contracts ---


class Container(Protocol):
    def bind(self, key: Any, factory: Callable[..., Any] | None = None) -> None: ...

    def singleton(self, key: Any, factory: Callable[..., Any] | None = None) -> None: ...

    def alias(self, abstract: Any, name: Any) -> None: ...

    def make(self, key: Any) -> Any: ...

    def resolving(self, key: Any, hook: Callable[[Any, Any], None]) -> None: ...

    def bound(self, key: Any) -> bool: ...

    def resolved(self, key: Any) -> bool: ...

    def build(self, cls: type) -> Any: ...


class ConfigStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def has(self, key: str) -> bool: ...


class EventDispatcher(Protocol):
    def listen(self, event: str, listener: str | Callable[..., Any]) -> None: ...

    def dispatch(self, event: str, payload: Mapping[str, Any] | None = None) -> Any: ...


class Router(Protocol):
    def group(self, options: Mapping[str, Any], callback: Callable[[Router], None]) -> None: ...

    def get(self, uri: str, action: str, *, name: str | None = None) -> Any: ...

    def post(self, uri: str, action: str, *, name: str | None = None) -> Any: ...

    def delete(self, uri: str, action: str, *, name: str | None = None) -> Any: ...


class CommandBus(Protocol):
    def register_many(self, commands: Iterable[click.Command]) -> None: ...


class AssetPublisher(Protocol):
    def declare(self, tag: str, paths: Mapping[str, str]) -> None: ...

    def publish(self, tag: str, *, force: bool = False) -> ServiceResult: ...


class ViewFinder(Protocol):
    def add_namespace(self, namespace: str, path: str) -> None: ...


@runtime_checkable
class ConnectionFactory(Protocol):
    """The broker client: named database connections."""

    def engine(self, name: str | None = None) -> Engine: ...


# --- Repository contracts ---


class JobRepository(ABC):
    """Dashboard record of every job the queue has seen."""

    @abstractmethod
    def store(
        self,
        job_id: str,
        *,
        connection: str,
        queue: str,
        name: str,
        payload: Mapping[str, Any],
    ) -> None: ...

    @abstractmethod
    def reserved(self, job_id: str) -> None: ...

    @abstractmethod
    def released(self, job_id: str) -> None: ...

    @abstractmethod
    def completed(self, job_id: str, runtime_ms: float | None = None) -> None: ...

    @abstractmethod
    def failed(self, job_id: str, exception: str) -> None: ...

    @abstractmethod
    def find(self, job_id: str) -> dict[str, Any] | None: ...

    @abstractmethod
    def recent(self, limit: int = 50) -> list[dict[str, Any]]: ...

    @abstractmethod
    def failed_jobs(self, limit: int = 50) -> list[dict[str, Any]]: ...

    @abstractmethod
    def count(self, status: str | None = None, queue: str | None = None) -> int: ...

    @abstractmethod
    def trim_recent(self, older_than_seconds: int) -> int:
        """Delete finished non-failed records older than the cutoff."""

    @abstractmethod
    def trim_failed(self, older_than_seconds: int) -> int: ...


class MasterSupervisorRepository(ABC):
    @abstractmethod
    def names(self) -> list[str]: ...

    @abstractmethod
    def all(self) -> list[dict[str, Any]]: ...

    @abstractmethod
    def find(self, name: str) -> dict[str, Any] | None: ...

    @abstractmethod
    def update(self, name: str, *, status: str, pid: int | None = None) -> None: ...

    @abstractmethod
    def forget(self, name: str) -> None: ...

    @abstractmethod
    def stale(self, seconds: int) -> list[str]:
        """Names of masters not updated within *seconds*."""


class SupervisorRepository(ABC):
    @abstractmethod
    def names(self) -> list[str]: ...

    @abstractmethod
    def all(self) -> list[dict[str, Any]]: ...

    @abstractmethod
    def find(self, name: str) -> dict[str, Any] | None: ...

    @abstractmethod
    def update(
        self,
        name: str,
        *,
        master: str,
        status: str,
        options: Mapping[str, Any] | None = None,
    ) -> None: ...

    @abstractmethod
    def forget(self, name: str) -> None: ...

    @abstractmethod
    def stale(self, seconds: int) -> list[str]: ...


class MetricsRepository(ABC):
    @abstractmethod
    def increment(self, queue: str, runtime_ms: float | None = None) -> None:
        """Count one processed job for *queue*."""

    @abstractmethod
    def measured_queues(self) -> list[str]: ...

    @abstractmethod
    def snapshot(self) -> list[dict[str, Any]]:
        """Record one snapshot row per measured queue and reset the counters."""

    @abstractmethod
    def snapshots_for_queue(self, queue: str) -> list[dict[str, Any]]: ...


class CommandQueue(ABC):
    @abstractmethod
    def push(self, target: str, command: str, options: Mapping[str, Any] | None = None) -> None:
        ...

    @abstractmethod
    def pending(self, target: str) -> list[dict[str, Any]]:
        """Pop and return every command queued for *target*, oldest first."""
