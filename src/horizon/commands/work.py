"""Command: process jobs from a queue connection.

``WorkCommand`` is bound as a container singleton wrapping the host's
queue worker; the click command resolves it per invocation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from horizon.commands._base import HorizonCommand, emit
from horizon.result import ServiceResult

if TYPE_CHECKING:
    from horizon.host.application import Application
    from horizon.host.queue import Worker

WORK_COMMAND = "horizon.command.work"


class WorkCommand:
    def __init__(self, worker: Worker) -> None:
        self.worker = worker

    def handle(
        self,
        connection: str | None = None,
        queue: str | None = None,
        *,
        once: bool = False,
        max_jobs: int | None = None,
        tries: int = 1,
    ) -> ServiceResult:
        if once:
            max_jobs = 1
        processed = self.worker.run(connection, queue, max_jobs=max_jobs, tries=tries)
        return ServiceResult(
            ok=True,
            op="work",
            data={"connection": connection, "queue": queue, "processed": processed},
        )


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon work
  horizon work database --queue high --tries 3
  horizon work --once""",
)
@click.argument("connection", required=False)
@click.option("--queue", default=None, help="Queue to work (default: the connection's queue).")
@click.option("--once", is_flag=True, help="Process a single job.")
@click.option("--max-jobs", type=int, default=None, help="Stop after this many jobs.")
@click.option("--tries", type=int, default=1, show_default=True, help="Attempts per job.")
@click.pass_obj
def work(
    app: Application,
    connection: str | None,
    queue: str | None,
    once: bool,
    max_jobs: int | None,
    tries: int,
) -> None:
    """Process queued jobs until the queue is empty."""
    command: WorkCommand = app.make(WORK_COMMAND)
    emit(app, command.handle(connection, queue, once=once, max_jobs=max_jobs, tries=tries))
