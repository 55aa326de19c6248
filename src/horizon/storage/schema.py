"""SQLAlchemy Core table definitions.

Every table name carries the configured prefix (``horizon_`` by default) so
the module can share a database with the host without name clashes.
Timestamps are Unix epoch seconds.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from sqlalchemy import REAL, Column, Index, Integer, MetaData, Table, Text


@dataclass(frozen=True)
class Tables:
    metadata: MetaData
    queue_jobs: Table
    jobs: Table
    masters: Table
    supervisors: Table
    commands: Table
    metrics: Table
    snapshots: Table
    locks: Table


@functools.cache
def tables_for(prefix: str) -> Tables:
    """Build (once per prefix) the full table set."""
    metadata = MetaData()

    queue_jobs = Table(
        f"{prefix}queue_jobs",
        metadata,
        Column("id", Text, primary_key=True),
        Column("queue", Text, nullable=False),
        Column("name", Text, nullable=False),
        Column("payload", Text, nullable=False),  # JSON object
        Column("attempts", Integer, nullable=False, default=0, server_default="0"),
        Column("reserved_at", REAL),
        Column("created_at", REAL, nullable=False),
        Index(f"{prefix}queue_jobs_queue_idx", "queue", "reserved_at"),
    )

    jobs = Table(
        f"{prefix}jobs",
        metadata,
        Column("id", Text, primary_key=True),
        Column("connection", Text, nullable=False),
        Column("queue", Text, nullable=False),
        Column("name", Text, nullable=False),
        Column("status", Text, nullable=False),  # pending | reserved | completed | failed
        Column("payload", Text, nullable=False),  # JSON object
        Column("exception", Text),
        Column("runtime_ms", REAL),
        Column("pushed_at", REAL, nullable=False),
        Column("reserved_at", REAL),
        Column("completed_at", REAL),
        Column("failed_at", REAL),
        Index(f"{prefix}jobs_status_idx", "status"),
    )

    masters = Table(
        f"{prefix}masters",
        metadata,
        Column("name", Text, primary_key=True),
        Column("pid", Integer),
        Column("status", Text, nullable=False),
        Column("updated_at", REAL, nullable=False),
    )

    supervisors = Table(
        f"{prefix}supervisors",
        metadata,
        Column("name", Text, primary_key=True),
        Column("master", Text, nullable=False),
        Column("status", Text, nullable=False),
        Column("options", Text, nullable=False),  # JSON object
        Column("updated_at", REAL, nullable=False),
    )

    commands = Table(
        f"{prefix}commands",
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("target", Text, nullable=False),
        Column("command", Text, nullable=False),
        Column("options", Text, nullable=False),  # JSON object
        Column("created_at", REAL, nullable=False),
    )

    metrics = Table(
        f"{prefix}metrics",
        metadata,
        Column("queue", Text, primary_key=True),
        Column("throughput", Integer, nullable=False, default=0, server_default="0"),
        Column("runtime_total", REAL, nullable=False, default=0.0, server_default="0.0"),
    )

    snapshots = Table(
        f"{prefix}snapshots",
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("queue", Text, nullable=False),
        Column("throughput", Integer, nullable=False),
        Column("runtime", REAL, nullable=False),  # average ms per job
        Column("taken_at", REAL, nullable=False),
    )

    locks = Table(
        f"{prefix}locks",
        metadata,
        Column("name", Text, primary_key=True),
        Column("expires_at", REAL, nullable=False),
    )

    return Tables(
        metadata=metadata,
        queue_jobs=queue_jobs,
        jobs=jobs,
        masters=masters,
        supervisors=supervisors,
        commands=commands,
        metrics=metrics,
        snapshots=snapshots,
        locks=locks,
    )
