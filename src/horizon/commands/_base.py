"""Click base class with --examples support, and result emission.

``HorizonCommand`` accepts an ``examples`` parameter. When ``--examples``
is passed, the command prints usage examples and exits, which keeps
``--help`` concise.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from horizon.result import format_result

if TYPE_CHECKING:
    from horizon.host.application import Application
    from horizon.result import ServiceResult


def _add_examples_option(cmd: click.Command, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class HorizonCommand(click.Command):
    """Click Command subclass that supports an ``--examples`` flag."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)


def emit(app: Application, result: ServiceResult) -> None:
    """Format and output a ServiceResult with correct exit semantics.

    * Success: stdout, warnings to stderr (unless JSON, where they are
      already part of the payload).
    * Failure: stderr, exit code 1.
    """
    json_output = app.settings.json_output
    output = format_result(result, json_output=json_output, verbose=app.settings.verbose)
    if result.ok:
        click.echo(output)
        if not json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
    else:
        click.echo(output, err=True)
        raise SystemExit(1)
