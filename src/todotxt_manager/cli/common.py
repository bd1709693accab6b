"""Helpers shared by the command modules."""

import logging
import sys
from datetime import date
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from ..task import Task
from ..utils.datetime import DUE_SHORTCUTS, calculate_due_date, parse_iso_date
from ..workspace import TodoWorkspace


def get_console() -> Console:
    return Console()


def configure_logging(verbose: bool):
    """Send log records through rich; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def fail(message: str):
    get_console().print(f"[red]Error: {message}[/red]")
    sys.exit(1)


def get_workspace(ctx) -> TodoWorkspace:
    return ctx.obj["workspace"]


def get_today(ctx) -> Optional[date]:
    return ctx.obj.get("today")


def pick_task(ctx, position: int) -> Task:
    """Task at a position of the current listing, or exit with an error."""
    task = get_workspace(ctx).task_at(position, get_today(ctx))
    if task is None:
        fail(f"No task at position {position} in the current view")
    return task


def resolve_due(value: Optional[str], today: Optional[date]) -> Optional[str]:
    """Accept an ISO date or a shortcut such as "tomorrow" / "next week"."""
    if not value:
        return None
    for shortcut in DUE_SHORTCUTS:
        if value.lower() == shortcut.lower():
            return calculate_due_date(shortcut, today)
    if parse_iso_date(value) is None:
        fail(f"Invalid due date {value!r}; use YYYY-MM-DD or one of: {', '.join(DUE_SHORTCUTS)}")
    return value
