"""Command: report the largest supervisor timeout for an environment."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from horizon.commands._base import HorizonCommand, emit
from horizon.config.models import HorizonConfig
from horizon.result import ServiceResult

if TYPE_CHECKING:
    from horizon.host.application import Application


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon timeout
  horizon timeout local""",
)
@click.argument("environment", required=False)
@click.pass_obj
def timeout(app: Application, environment: str | None) -> None:
    """Get the maximum timeout for the given environment."""
    env = environment or app.settings.environment
    seconds = HorizonConfig.from_store(app.config).max_timeout(env)
    emit(app, ServiceResult(ok=True, op="timeout", data={"environment": env, "timeout": seconds}))
