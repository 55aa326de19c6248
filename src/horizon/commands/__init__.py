"""Console commands and their context-gated registration.

Most commands only make sense in an interactive console. ``snapshot`` is
registered in every context so an in-process scheduler can run it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click

    from horizon.contracts import CommandBus

logger = logging.getLogger(__name__)


class CommandContext(StrEnum):
    CONSOLE_ONLY = "console-only"
    ALWAYS = "always"


@dataclass(frozen=True)
class CommandDeclaration:
    command: click.Command
    requires: CommandContext = CommandContext.CONSOLE_ONLY

    @property
    def name(self) -> str:
        return self.command.name or ""


class CommandRegistrar:
    def __init__(self, declarations: Iterable[CommandDeclaration]) -> None:
        self._declarations = tuple(declarations)

    @property
    def declarations(self) -> tuple[CommandDeclaration, ...]:
        return self._declarations

    def commands_for(self, is_console_context: bool) -> list[click.Command]:
        return [
            d.command
            for d in self._declarations
            if is_console_context or d.requires is CommandContext.ALWAYS
        ]

    def register_commands(self, command_bus: CommandBus, is_console_context: bool) -> list[str]:
        """Attach the commands allowed in this context. Returns their names."""
        commands = self.commands_for(is_console_context)
        command_bus.register_many(commands)
        names = [c.name or "" for c in commands]
        logger.debug("Registered commands %s (console=%s)", names, is_console_context)
        return names


def horizon_commands() -> tuple[CommandDeclaration, ...]:
    """The module's command declarations.

    Uses deferred imports so command modules load only when declared.
    """
    from horizon.commands.assets import assets
    from horizon.commands.control import continue_cmd, pause, terminate
    from horizon.commands.snapshot import snapshot
    from horizon.commands.supervisors import list_cmd, purge, supervisor, supervisors
    from horizon.commands.timeout import timeout
    from horizon.commands.work import work

    console = CommandContext.CONSOLE_ONLY
    return (
        CommandDeclaration(assets, console),
        CommandDeclaration(list_cmd, console),
        CommandDeclaration(purge, console),
        CommandDeclaration(pause, console),
        CommandDeclaration(continue_cmd, console),
        CommandDeclaration(supervisor, console),
        CommandDeclaration(supervisors, console),
        CommandDeclaration(terminate, console),
        CommandDeclaration(timeout, console),
        CommandDeclaration(work, console),
        CommandDeclaration(snapshot, CommandContext.ALWAYS),
    )
