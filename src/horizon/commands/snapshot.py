"""Command: store a snapshot of the queue metrics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from horizon.commands._base import HorizonCommand, emit
from horizon.contracts import MetricsRepository
from horizon.result import ServiceResult
from horizon.storage.repositories import Lock

if TYPE_CHECKING:
    from horizon.host.application import Application

LOCK_NAME = "metrics:snapshot"
LOCK_SECONDS = 300 - 30


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon snapshot
  horizon --json snapshot""",
)
@click.pass_obj
def snapshot(app: Application) -> None:
    """Store a snapshot of the queue metrics."""
    if not app.make(Lock).get(LOCK_NAME, LOCK_SECONDS):
        emit(
            app,
            ServiceResult(
                ok=True,
                op="snapshot",
                data={"queues": []},
                warnings=["A snapshot was taken recently; skipped."],
            ),
        )
        return
    rows = app.make(MetricsRepository).snapshot()
    emit(app, ServiceResult(ok=True, op="snapshot", data={"queues": rows}))
