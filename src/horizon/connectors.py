"""Queue connector that fires horizon job events.

Added to the host queue manager (driver ``"database"``) when the manager is
first resolved. Queues it builds store pending jobs on a named database
connection and announce every state change through the host dispatcher,
which is how the dashboard records and metrics stay current.

INVARIANT: Listener failures are warnings, never errors. The job row is
already committed when its event fires, so a failing listener must not
strand or lose the job.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Engine

from horizon import runtime
from horizon.contracts import ConnectionFactory, EventDispatcher
from horizon.events import JOB_DELETED, JOB_FAILED, JOB_PUSHED, JOB_RELEASED, JOB_RESERVED
from horizon.storage.schema import tables_for

logger = logging.getLogger(__name__)

DRIVER = "database"


@dataclass(frozen=True)
class QueuedJob:
    id: str
    queue: str
    name: str
    data: dict[str, Any] = field(default_factory=dict)
    attempts: int = 0


class HorizonQueue:
    def __init__(
        self,
        engine: Engine,
        events: EventDispatcher,
        *,
        connection_name: str,
        default_queue: str = "default",
        prefix: str = runtime.DEFAULT_PREFIX,
    ) -> None:
        self.engine = engine
        self.connection_name = connection_name
        self.default_queue = default_queue
        self._events = events
        self._table = tables_for(prefix).queue_jobs
        self._table.create(engine, checkfirst=True)

    def push(
        self, name: str, data: Mapping[str, Any] | None = None, queue: str | None = None
    ) -> str:
        """Queue job *name* (a container key) with keyword *data*. Returns the job id."""
        queue = queue or self.default_queue
        job_id = uuid.uuid4().hex
        payload = dict(data or {})
        with self.engine.begin() as conn:
            conn.execute(
                self._table.insert().values(
                    id=job_id,
                    queue=queue,
                    name=name,
                    payload=json.dumps(payload),
                    created_at=time.time(),
                )
            )
        self._fire(JOB_PUSHED, job_id, queue, name, payload=payload)
        return job_id

    def pop(self, queue: str | None = None) -> QueuedJob | None:
        """Reserve the oldest unreserved job on *queue*."""
        queue = queue or self.default_queue
        t = self._table
        with self.engine.begin() as conn:
            row = conn.execute(
                select(t)
                .where(t.c.queue == queue, t.c.reserved_at.is_(None))
                .order_by(t.c.created_at, t.c.id)
                .limit(1)
            ).first()
            if row is None:
                return None
            conn.execute(
                update(t)
                .where(t.c.id == row.id)
                .values(reserved_at=time.time(), attempts=row.attempts + 1)
            )
        job = QueuedJob(row.id, row.queue, row.name, json.loads(row.payload), row.attempts + 1)
        self._fire(JOB_RESERVED, job.id, job.queue, job.name)
        return job

    def delete(self, job: QueuedJob) -> None:
        self._remove(job.id)
        self._fire(JOB_DELETED, job.id, job.queue, job.name)

    def release(self, job: QueuedJob) -> None:
        t = self._table
        with self.engine.begin() as conn:
            conn.execute(update(t).where(t.c.id == job.id).values(reserved_at=None))
        self._fire(JOB_RELEASED, job.id, job.queue, job.name)

    def fail(self, job: QueuedJob, exception: BaseException | str) -> None:
        self._remove(job.id)
        self._fire(JOB_FAILED, job.id, job.queue, job.name, exception=str(exception))

    def size(self, queue: str | None = None) -> int:
        t = self._table
        stmt = select(func.count()).select_from(t).where(t.c.queue == (queue or self.default_queue))
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one()

    def _remove(self, job_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(self._table).where(self._table.c.id == job_id))

    def _fire(self, event: str, job_id: str, queue: str, name: str, **extra: Any) -> None:
        payload = {
            "id": job_id,
            "connection": self.connection_name,
            "queue": queue,
            "name": name,
            **extra,
        }
        try:
            self._events.dispatch(event, payload)
        except Exception as exc:
            logger.warning("Listener for %s failed on job %s: %s", event, job_id, exc)


class HorizonConnector:
    def __init__(self, connections: ConnectionFactory, events: EventDispatcher) -> None:
        self._connections = connections
        self._events = events

    def connect(self, config: Mapping[str, Any]) -> HorizonQueue:
        """Build a queue from a host queue-connection config.

        ``config["connection"]`` names the database connection; without it
        the connection selected by the storage mode switch is used.
        """
        mode = runtime.current()
        database = config.get("connection") or mode.source
        return HorizonQueue(
            self._connections.engine(database),
            self._events,
            connection_name=config.get("name", database),
            default_queue=config.get("queue", "default"),
            prefix=mode.prefix,
        )
