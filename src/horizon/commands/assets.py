"""Command: re-publish the dashboard's static assets."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from horizon.commands._base import HorizonCommand, emit
from horizon.publishing import ASSETS_TAG

if TYPE_CHECKING:
    from horizon.host.application import Application


@click.command(
    cls=HorizonCommand,
    examples="""\
  horizon assets
  horizon --json assets""",
)
@click.pass_obj
def assets(app: Application) -> None:
    """Re-publish the dashboard assets, overwriting existing files."""
    emit(app, app.publisher.publish(ASSETS_TAG, force=True))
