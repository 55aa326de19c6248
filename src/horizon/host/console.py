"""Command bus — the host's click group that providers attach commands to."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import click

logger = logging.getLogger(__name__)


class CommandBus:
    def __init__(self, group: click.Group | None = None) -> None:
        self.group = group or click.Group("horizon")

    def register(self, command: click.Command) -> None:
        if command.name in self.group.commands:
            logger.debug("Replacing command %s", command.name)
        self.group.add_command(command)

    def register_many(self, commands: Iterable[click.Command]) -> None:
        for command in commands:
            self.register(command)

    def names(self) -> list[str]:
        return sorted(self.group.commands)

    def get(self, name: str) -> click.Command | None:
        return self.group.commands.get(name)
