"""Queue manager and worker.

The host ships no queue drivers of its own: providers add connectors with
``add_connector(driver, resolver)``, typically from a container resolving
hook so the connector is in place before the first connection is opened.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

from horizon.errors import ResolutionError

if TYPE_CHECKING:
    from horizon.host.config import Repository
    from horizon.host.container import Container

logger = logging.getLogger(__name__)


class Connector(Protocol):
    def connect(self, config: dict[str, Any]) -> Any: ...


class QueueManager:
    def __init__(self, config: Repository) -> None:
        self._config = config
        self._connectors: dict[str, Callable[[], Connector]] = {}
        self._connections: dict[str, Any] = {}

    def add_connector(self, driver: str, resolver: Callable[[], Connector]) -> None:
        self._connectors[driver] = resolver

    def has_connector(self, driver: str) -> bool:
        return driver in self._connectors

    def connection(self, name: str | None = None) -> Any:
        """Open (once) and return the queue for connection *name*."""
        name = name or self._config.get("queue.default", "default")
        if name not in self._connections:
            options = self._config.get(f"queue.connections.{name}")
            if not isinstance(options, dict):
                raise ResolutionError(f"queue.{name}", "queue connection is not configured")
            driver = options.get("driver")
            resolver = self._connectors.get(driver)
            if resolver is None:
                raise ResolutionError(f"queue.{name}", f"no connector for driver {driver!r}")
            self._connections[name] = resolver().connect({**options, "name": name})
        return self._connections[name]


class Worker:
    """Processes jobs from a queue connection.

    Job names are container keys; the resolved handler's ``handle`` is called
    with the job data as keyword arguments. A job that raises is released for
    another attempt until *tries* is reached, then marked failed.
    """

    def __init__(self, container: Container, manager: QueueManager) -> None:
        self._container = container
        self._manager = manager

    def run_next_job(
        self, connection: str | None = None, queue: str | None = None, *, tries: int = 1
    ) -> bool:
        """Process one job. Returns False when the queue is empty."""
        q = self._manager.connection(connection)
        job = q.pop(queue)
        if job is None:
            return False
        try:
            handler = self._container.make(job.name)
            handler.handle(**job.data)
        except Exception as exc:
            logger.warning("Job %s (%s) failed: %s", job.id, job.name, exc)
            if job.attempts < tries:
                q.release(job)
            else:
                q.fail(job, exc)
        else:
            q.delete(job)
        return True

    def run(
        self,
        connection: str | None = None,
        queue: str | None = None,
        *,
        max_jobs: int | None = None,
        tries: int = 1,
    ) -> int:
        """Process jobs until the queue is empty or *max_jobs* is reached."""
        processed = 0
        while max_jobs is None or processed < max_jobs:
            if not self.run_next_job(connection, queue, tries=tries):
                break
            processed += 1
        return processed
