"""Terminal output for the commands.

Commands talk to the user through the helpers here. Library modules
only log; ``set_verbosity`` decides whether those records are shown.
"""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.theme import Theme

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "hit.id": "bold",
        "hit.score": "dim",
        "progress.description": "bold blue",
    }
)

console = Console(theme=THEME)
error_console = Console(theme=THEME, stderr=True)

_verbose = False


def set_verbosity(*, verbose: bool = False, debug: bool = False) -> None:
    """Show library log records on stderr: INFO with *verbose*, DEBUG with *debug*."""
    global _verbose
    _verbose = verbose or debug
    if _verbose:
        logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT)


def set_color(enabled: bool) -> None:
    for target in (console, error_console):
        target.no_color = not enabled


def info(message: str) -> None:
    console.print(message, style="info")


def success(message: str) -> None:
    console.print(message, style="success")


def verbose(message: str) -> None:
    """Print *message* only with --verbose or --debug."""
    if _verbose:
        console.print(message, style="info")


def warning(message: str) -> None:
    error_console.print(f"[warning]Warning:[/warning] {message}")


def error(message: str, hint: str | None = None) -> None:
    """Print an error, plus an optional hint on how to fix it, to stderr."""
    error_console.print(f"[error]Error:[/error] {message}")
    if hint:
        error_console.print(f"  [info]Hint:[/info] {hint}")


def create_progress() -> Progress:
    """Progress bar showing ``done/total`` records."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def create_table(title: str | None = None, **kwargs: Any) -> Table:
    return Table(title=title, header_style="bold", **kwargs)
