"""Subcommands of the ``scout-elastic`` group.

Each public module defines its command as a module-level ``cli``
object; modules starting with an underscore hold shared helpers.
"""

from __future__ import annotations

import importlib
import pkgutil

import click


def discover_commands() -> dict[str, click.Command]:
    """Import the command modules and map command name to command."""
    commands: dict[str, click.Command] = {}
    for module_info in pkgutil.iter_modules(__path__):
        if module_info.name.startswith("_"):
            continue
        module = importlib.import_module(f"{__name__}.{module_info.name}")
        command = getattr(module, "cli", None)
        if isinstance(command, click.Command) and command.name:
            commands[command.name] = command
    return dict(sorted(commands.items()))
