"""Root CLI group for horizon with global flags and provider-registered commands.

Commands other than ``publish`` are not imported here: they are declared by
the providers the host application boots. The application is built lazily
on first command lookup, so ``--version`` never touches configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from horizon import __version__
from horizon.commands._base import HorizonCommand, emit
from horizon.host.application import Application, AppSettings, RuntimeContext
from horizon.provider import HorizonServiceProvider

_APP_KEY = "horizon.app"


def build_application(ctx: click.Context) -> Application:
    """Create, configure and boot the host application once per invocation."""
    root = ctx.find_root()
    app: Application | None = root.meta.get(_APP_KEY)
    if app is not None:
        return app

    params = root.params
    overrides: dict[str, Any] = {
        "json_output": params.get("json_output") or False,
        "verbose": params.get("verbose") or False,
        "log_json": params.get("log_json") or False,
    }
    if params.get("base_path"):
        overrides["base_path"] = Path(params["base_path"])
    app = Application(AppSettings(**overrides), context=RuntimeContext.CONSOLE)
    app.configure_logging()
    app.load_configuration()
    app.discover_providers()
    if not app.providers.has_provider("horizon"):
        app.register_provider(HorizonServiceProvider(), name="horizon")
    app.boot()
    root.meta[_APP_KEY] = app
    return app


class HorizonGroup(click.Group):
    """Root group that resolves subcommands from the booted application."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        app = build_application(ctx)
        return sorted({*super().list_commands(ctx), *app.commands.names()})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        command = super().get_command(ctx, cmd_name)
        if command is not None:
            return command
        return build_application(ctx).commands.get(cmd_name)


@click.group(cls=HorizonGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="horizon")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "--base-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Host application root (default: current directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    base_path: Path | None,
) -> None:
    """horizon — job-monitoring dashboard console."""
    ctx.obj = build_application(ctx)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(
    cls=HorizonCommand,
    examples="""\
  horizon publish --tag horizon-config
  horizon publish --tag horizon-assets --force""",
)
@click.option("--tag", required=True, help="Publish group to copy.")
@click.option("--force", is_flag=True, help="Overwrite existing files.")
@click.pass_obj
def publish(app: Application, tag: str, force: bool) -> None:
    """Copy a provider's publishable resources into the application."""
    emit(app, app.publisher.publish(tag, force=force))
