"""Commands: inspect, record and purge supervisors."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import click

from horizon.commands._base import HorizonCommand, emit
from horizon.contracts import MasterSupervisorRepository, SupervisorRepository
from horizon.result import ServiceResult

if TYPE_CHECKING:
    from horizon.host.application import Application


@click.command(
    "list",
    cls=HorizonCommand,
    examples="""\
  horizon list
  horizon --json list""",
)
@click.pass_obj
def list_cmd(app: Application) -> None:
    """List all of the deployed master supervisors."""
    masters = app.make(MasterSupervisorRepository).all()
    emit(
        app,
        ServiceResult(
            ok=True,
            op="list",
            data={"count": len(masters), "masters": masters},
            warnings=[] if masters else ["No masters are running."],
        ),
    )


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon supervisors
  horizon --json supervisors""",
)
@click.pass_obj
def supervisors(app: Application) -> None:
    """List all of the supervisors."""
    rows = app.make(SupervisorRepository).all()
    emit(
        app,
        ServiceResult(
            ok=True,
            op="supervisors",
            data={"count": len(rows), "supervisors": rows},
            warnings=[] if rows else ["No supervisors are running."],
        ),
    )


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon supervisor host-abc:supervisor-1 database
  horizon supervisor host-abc:supervisor-1 database --queue high --queue default --processes 4""",
)
@click.argument("name")
@click.argument("connection")
@click.option("--master", default=None, help="Owning master supervisor (default: NAME prefix).")
@click.option("--queue", "queues", multiple=True, help="Queue to work (repeatable).")
@click.option("--balance", default="simple", show_default=True, help="Balancing strategy.")
@click.option("--processes", type=int, default=1, show_default=True, help="Worker processes.")
@click.option("--tries", type=int, default=1, show_default=True, help="Attempts per job.")
@click.option("--timeout", type=int, default=60, show_default=True, help="Seconds per job.")
@click.pass_obj
def supervisor(
    app: Application,
    name: str,
    connection: str,
    master: str | None,
    queues: tuple[str, ...],
    balance: str,
    processes: int,
    tries: int,
    timeout: int,
) -> None:
    """Start a new supervisor record with the given options."""
    master_name = master or name.partition(":")[0]
    options = {
        "connection": connection,
        "queue": list(queues) or ["default"],
        "balance": balance,
        "processes": processes,
        "tries": tries,
        "timeout": timeout,
    }
    app.make(MasterSupervisorRepository).update(master_name, status="running", pid=os.getpid())
    app.make(SupervisorRepository).update(
        name, master=master_name, status="running", options=options
    )
    emit(
        app,
        ServiceResult(
            ok=True,
            op="supervisor",
            data={"name": name, "master": master_name, "options": options},
        ),
    )


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon purge
  horizon purge --stale 300""",
)
@click.option(
    "--stale",
    type=int,
    default=60,
    show_default=True,
    help="Forget entries not updated within this many seconds.",
)
@click.pass_obj
def purge(app: Application, stale: int) -> None:
    """Forget master supervisors and supervisors that stopped reporting."""
    masters = app.make(MasterSupervisorRepository)
    repo = app.make(SupervisorRepository)
    purged_masters = masters.stale(stale)
    purged_supervisors = repo.stale(stale)
    for name in purged_masters:
        masters.forget(name)
    for name in purged_supervisors:
        repo.forget(name)
    emit(
        app,
        ServiceResult(
            ok=True,
            op="purge",
            data={"masters": purged_masters, "supervisors": purged_supervisors},
        ),
    )
