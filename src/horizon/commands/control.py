"""Commands: pause, continue and terminate the running master supervisors.

Each pushes a control command for every known master onto the command
queue; the masters pick them up on their next loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from horizon.commands._base import HorizonCommand, emit
from horizon.contracts import CommandQueue, MasterSupervisorRepository
from horizon.result import ServiceResult

if TYPE_CHECKING:
    from horizon.host.application import Application

PAUSE = "pause"
CONTINUE = "continue"
TERMINATE = "terminate"


def send_to_masters(app: Application, op: str, command: str, **options: object) -> ServiceResult:
    """Queue *command* for every master supervisor."""
    masters = app.make(MasterSupervisorRepository).names()
    queue = app.make(CommandQueue)
    for name in masters:
        queue.push(name, command, options)
    return ServiceResult(
        ok=True,
        op=op,
        data={"command": command, "masters": masters},
        warnings=[] if masters else ["No masters are running."],
    )


@click.command(cls=HorizonCommand, examples="  horizon pause")
@click.pass_obj
def pause(app: Application) -> None:
    """Pause the master supervisors."""
    emit(app, send_to_masters(app, "pause", PAUSE))


@click.command("continue", cls=HorizonCommand, examples="  horizon continue")
@click.pass_obj
def continue_cmd(app: Application) -> None:
    """Instruct the master supervisors to continue processing jobs."""
    emit(app, send_to_masters(app, "continue", CONTINUE))


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon terminate
  horizon terminate --wait""",
)
@click.option("--wait", is_flag=True, help="Let running jobs finish before exiting.")
@click.pass_obj
def terminate(app: Application, wait: bool) -> None:
    """Terminate the master supervisors so they can be restarted."""
    emit(app, send_to_masters(app, "terminate", TERMINATE, wait=wait))
