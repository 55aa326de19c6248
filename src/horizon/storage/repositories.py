"""Database-backed implementations of the repository contracts.

Every repository talks to the connection chosen by the storage mode switch
(:func:`horizon.runtime.use`) and creates its tables on first construction.
SQLAlchemy Core (not ORM): each call is a short transaction.
"""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, Row
from sqlalchemy.exc import IntegrityError

from horizon import runtime
from horizon.contracts import (
    CommandQueue,
    ConnectionFactory,
    JobRepository,
    MasterSupervisorRepository,
    MetricsRepository,
    SupervisorRepository,
)
from horizon.storage.schema import tables_for


class DatabaseRepository:
    """Shared engine and table lookup for the concrete repositories."""

    def __init__(self, connections: ConnectionFactory) -> None:
        mode = runtime.current()
        self._engine = connections.engine(mode.connection)
        self._tables = tables_for(mode.prefix)
        self._tables.metadata.create_all(self._engine)


def _decode(row: Row[Any], *json_columns: str) -> dict[str, Any]:
    data = dict(row._mapping)
    for column in json_columns:
        if data.get(column) is not None:
            data[column] = json.loads(data[column])
    return data


class DatabaseJobRepository(DatabaseRepository, JobRepository):
    def store(
        self,
        job_id: str,
        *,
        connection: str,
        queue: str,
        name: str,
        payload: Mapping[str, Any],
    ) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                insert(self._tables.jobs).values(
                    id=job_id,
                    connection=connection,
                    queue=queue,
                    name=name,
                    status="pending",
                    payload=json.dumps(dict(payload)),
                    pushed_at=time.time(),
                )
            )

    def reserved(self, job_id: str) -> None:
        self._set(job_id, status="reserved", reserved_at=time.time())

    def released(self, job_id: str) -> None:
        self._set(job_id, status="pending", reserved_at=None)

    def completed(self, job_id: str, runtime_ms: float | None = None) -> None:
        self._set(job_id, status="completed", completed_at=time.time(), runtime_ms=runtime_ms)

    def failed(self, job_id: str, exception: str) -> None:
        self._set(job_id, status="failed", failed_at=time.time(), exception=exception)

    def find(self, job_id: str) -> dict[str, Any] | None:
        jobs = self._tables.jobs
        with self._engine.connect() as conn:
            row = conn.execute(select(jobs).where(jobs.c.id == job_id)).first()
        return _decode(row, "payload") if row else None

    def recent(self, limit: int = 50) -> list[dict[str, Any]]:
        jobs = self._tables.jobs
        stmt = select(jobs).order_by(jobs.c.pushed_at.desc()).limit(limit)
        with self._engine.connect() as conn:
            return [_decode(row, "payload") for row in conn.execute(stmt)]

    def failed_jobs(self, limit: int = 50) -> list[dict[str, Any]]:
        jobs = self._tables.jobs
        stmt = (
            select(jobs)
            .where(jobs.c.status == "failed")
            .order_by(jobs.c.failed_at.desc())
            .limit(limit)
        )
        with self._engine.connect() as conn:
            return [_decode(row, "payload") for row in conn.execute(stmt)]

    def count(self, status: str | None = None, queue: str | None = None) -> int:
        jobs = self._tables.jobs
        stmt = select(func.count()).select_from(jobs)
        if status is not None:
            stmt = stmt.where(jobs.c.status == status)
        if queue is not None:
            stmt = stmt.where(jobs.c.queue == queue)
        with self._engine.connect() as conn:
            return conn.execute(stmt).scalar_one()

    def trim_recent(self, older_than_seconds: int) -> int:
        jobs = self._tables.jobs
        cutoff = time.time() - older_than_seconds
        stmt = delete(jobs).where(jobs.c.status == "completed", jobs.c.completed_at < cutoff)
        with self._engine.begin() as conn:
            return conn.execute(stmt).rowcount

    def trim_failed(self, older_than_seconds: int) -> int:
        jobs = self._tables.jobs
        cutoff = time.time() - older_than_seconds
        stmt = delete(jobs).where(jobs.c.status == "failed", jobs.c.failed_at < cutoff)
        with self._engine.begin() as conn:
            return conn.execute(stmt).rowcount

    def _set(self, job_id: str, **values: Any) -> None:
        jobs = self._tables.jobs
        with self._engine.begin() as conn:
            conn.execute(update(jobs).where(jobs.c.id == job_id).values(**values))


class DatabaseMasterSupervisorRepository(DatabaseRepository, MasterSupervisorRepository):
    def names(self) -> list[str]:
        masters = self._tables.masters
        with self._engine.connect() as conn:
            return list(conn.execute(select(masters.c.name).order_by(masters.c.name)).scalars())

    def all(self) -> list[dict[str, Any]]:
        masters = self._tables.masters
        with self._engine.connect() as conn:
            rows = conn.execute(select(masters).order_by(masters.c.name))
            return [dict(row._mapping) for row in rows]

    def find(self, name: str) -> dict[str, Any] | None:
        masters = self._tables.masters
        with self._engine.connect() as conn:
            row = conn.execute(select(masters).where(masters.c.name == name)).first()
        return dict(row._mapping) if row else None

    def update(self, name: str, *, status: str, pid: int | None = None) -> None:
        values = {"status": status, "pid": pid, "updated_at": time.time()}
        with self._engine.begin() as conn:
            _upsert(conn, self._tables.masters, "name", name, values)

    def forget(self, name: str) -> None:
        masters = self._tables.masters
        with self._engine.begin() as conn:
            conn.execute(delete(masters).where(masters.c.name == name))

    def stale(self, seconds: int) -> list[str]:
        masters = self._tables.masters
        cutoff = time.time() - seconds
        stmt = select(masters.c.name).where(masters.c.updated_at < cutoff)
        with self._engine.connect() as conn:
            return list(conn.execute(stmt).scalars())


class DatabaseSupervisorRepository(DatabaseRepository, SupervisorRepository):
    def names(self) -> list[str]:
        supervisors = self._tables.supervisors
        stmt = select(supervisors.c.name).order_by(supervisors.c.name)
        with self._engine.connect() as conn:
            return list(conn.execute(stmt).scalars())

    def all(self) -> list[dict[str, Any]]:
        supervisors = self._tables.supervisors
        with self._engine.connect() as conn:
            rows = conn.execute(select(supervisors).order_by(supervisors.c.name))
            return [_decode(row, "options") for row in rows]

    def find(self, name: str) -> dict[str, Any] | None:
        supervisors = self._tables.supervisors
        with self._engine.connect() as conn:
            row = conn.execute(select(supervisors).where(supervisors.c.name == name)).first()
        return _decode(row, "options") if row else None

    def update(
        self,
        name: str,
        *,
        master: str,
        status: str,
        options: Mapping[str, Any] | None = None,
    ) -> None:
        values = {
            "master": master,
            "status": status,
            "options": json.dumps(dict(options or {})),
            "updated_at": time.time(),
        }
        with self._engine.begin() as conn:
            _upsert(conn, self._tables.supervisors, "name", name, values)

    def forget(self, name: str) -> None:
        supervisors = self._tables.supervisors
        with self._engine.begin() as conn:
            conn.execute(delete(supervisors).where(supervisors.c.name == name))

    def stale(self, seconds: int) -> list[str]:
        supervisors = self._tables.supervisors
        cutoff = time.time() - seconds
        stmt = select(supervisors.c.name).where(supervisors.c.updated_at < cutoff)
        with self._engine.connect() as conn:
            return list(conn.execute(stmt).scalars())


class DatabaseMetricsRepository(DatabaseRepository, MetricsRepository):
    def increment(self, queue: str, runtime_ms: float | None = None) -> None:
        metrics = self._tables.metrics
        with self._engine.begin() as conn:
            result = conn.execute(
                update(metrics)
                .where(metrics.c.queue == queue)
                .values(
                    throughput=metrics.c.throughput + 1,
                    runtime_total=metrics.c.runtime_total + (runtime_ms or 0.0),
                )
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(metrics).values(
                        queue=queue, throughput=1, runtime_total=runtime_ms or 0.0
                    )
                )

    def measured_queues(self) -> list[str]:
        metrics = self._tables.metrics
        with self._engine.connect() as conn:
            return list(conn.execute(select(metrics.c.queue).order_by(metrics.c.queue)).scalars())

    def snapshot(self) -> list[dict[str, Any]]:
        metrics = self._tables.metrics
        snapshots = self._tables.snapshots
        taken_at = time.time()
        rows: list[dict[str, Any]] = []
        with self._engine.begin() as conn:
            for row in conn.execute(select(metrics).order_by(metrics.c.queue)).fetchall():
                average = row.runtime_total / row.throughput if row.throughput else 0.0
                entry = {
                    "queue": row.queue,
                    "throughput": row.throughput,
                    "runtime": round(average, 2),
                    "taken_at": taken_at,
                }
                conn.execute(insert(snapshots).values(**entry))
                rows.append(entry)
            conn.execute(delete(metrics))
        return rows

    def snapshots_for_queue(self, queue: str) -> list[dict[str, Any]]:
        snapshots = self._tables.snapshots
        stmt = (
            select(
                snapshots.c.queue, snapshots.c.throughput, snapshots.c.runtime, snapshots.c.taken_at
            )
            .where(snapshots.c.queue == queue)
            .order_by(snapshots.c.id)
        )
        with self._engine.connect() as conn:
            return [dict(row._mapping) for row in conn.execute(stmt)]


class DatabaseCommandQueue(DatabaseRepository, CommandQueue):
    def push(self, target: str, command: str, options: Mapping[str, Any] | None = None) -> None:
        with self._engine.begin() as conn:
            conn.execute(
                insert(self._tables.commands).values(
                    target=target,
                    command=command,
                    options=json.dumps(dict(options or {})),
                    created_at=time.time(),
                )
            )

    def pending(self, target: str) -> list[dict[str, Any]]:
        commands = self._tables.commands
        with self._engine.begin() as conn:
            rows = conn.execute(
                select(commands).where(commands.c.target == target).order_by(commands.c.id)
            ).fetchall()
            if rows:
                conn.execute(delete(commands).where(commands.c.id.in_([r.id for r in rows])))
        return [_decode(row, "options") for row in rows]


class Lock(DatabaseRepository):
    """Expiring named locks shared by every process on the connection."""

    def get(self, name: str, seconds: int) -> bool:
        """Acquire *name* for *seconds*. Returns False if another holder has it."""
        locks = self._tables.locks
        now = time.time()
        try:
            with self._engine.begin() as conn:
                row = conn.execute(select(locks.c.expires_at).where(locks.c.name == name)).first()
                if row is None:
                    conn.execute(insert(locks).values(name=name, expires_at=now + seconds))
                    return True
                if row.expires_at > now:
                    return False
                result = conn.execute(
                    update(locks)
                    .where(locks.c.name == name, locks.c.expires_at == row.expires_at)
                    .values(expires_at=now + seconds)
                )
                return result.rowcount == 1
        except IntegrityError:
            return False

    def release(self, name: str) -> None:
        locks = self._tables.locks
        with self._engine.begin() as conn:
            conn.execute(delete(locks).where(locks.c.name == name))


def _upsert(
    conn: Connection, table: Any, key_column: str, key: str, values: dict[str, Any]
) -> None:
    result = conn.execute(update(table).where(table.c[key_column] == key).values(**values))
    if result.rowcount == 0:
        conn.execute(insert(table).values(**{key_column: key}, **values))
