"""Command-line interface for todo.txt task lists."""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import click
from rich.table import Table

from ..config import load_config
from ..exceptions import TodoTxtError
from ..filters import TaskCounter
from ..parser import TaskLineBuilder
from ..recurring import calculate_next_due_date, repeat_syntax, REPEAT_OPTIONS
from ..task import SortOption, Task
from ..utils.datetime import due_date_status, format_date, parse_iso_date, to_iso
from ..workspace import TodoWorkspace
from .common import (
    configure_logging,
    fail,
    get_console,
    get_today,
    get_workspace,
    pick_task,
    resolve_due,
)
from .projects import delete_project, new_project, pin, projects, rename_project, unpin

logger = logging.getLogger(__name__)

PRIORITY_STYLES = {"A": "bold red", "B": "yellow", "C": "cyan"}
DUE_STYLES = {"overdue": "bold red", "today": "yellow", "upcoming": "green"}
PRIORITY_CHOICE = click.Choice([chr(c) for c in range(ord("A"), ord("Z") + 1)], case_sensitive=False)


def format_task_row(position: int, task: Task, today: Optional[date]):
    """Cells for one row of the task table."""
    status = "[green]✓[/green]" if task.completed else "[dim]○[/dim]"
    priority = task.effective_priority or ""
    if priority:
        priority = f"[{PRIORITY_STYLES.get(priority, 'white')}]{priority}[/]"

    description = task.description
    if task.description_notes:
        description += " [dim]📝[/dim]"

    due = ""
    if task.due_date:
        style = DUE_STYLES.get(due_date_status(task.due_date, today) or "", "white")
        due = f"[{style}]{format_date(task.due_date, today)}[/]"
        if task.recurrence:
            due += " [dim]↻[/dim]"

    return str(position), status, priority, description, due


@click.group()
@click.option("--config", type=click.Path(), help="Path to config file")
@click.option("--file", "-f", "todo_path", type=click.Path(), help="todo.txt file to use")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--today", hidden=True, help="Override today's date (YYYY-MM-DD)")
@click.pass_context
def cli(ctx, config, todo_path, verbose, today):
    """Manage todo.txt task lists."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["today"] = parse_iso_date(today) if today else None

    try:
        settings = load_config(Path(config) if config else None)
        workspace = TodoWorkspace(settings, Path(todo_path) if todo_path else None)
    except TodoTxtError as e:
        get_console().print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)

    logger.debug(f"Using todo file {workspace.todo_file.path}")
    ctx.obj["workspace"] = workspace
    ctx.call_on_close(workspace.save_state)


@cli.command("list")
@click.option("--view", help="all, inbox, today, upcoming, archived, completed or a project name")
@click.option("--search", "-s", help="Case-insensitive text search")
@click.option("--context", "-c", help="Only tasks with this @context (NONE for tasks without one)")
@click.option("--sort", "sort_option", type=click.Choice([option.value for option in SortOption]),
              help="Sort order")
@click.pass_context
def list_tasks(ctx, view, search, context, sort_option):
    """List tasks in the current view.

    View, search, context and sort choices are remembered between runs.
    """
    workspace = get_workspace(ctx)
    today = get_today(ctx)
    filters = workspace.filters

    if view is not None:
        filters.set_quick_filter(view)
    if search is not None:
        filters.set_search_query(search)
    if context is not None:
        filters.set_context_filter(context)
    if sort_option is not None:
        filters.set_sort_option(SortOption(sort_option))

    try:
        all_tasks = workspace.load_tasks()
    except TodoTxtError as e:
        fail(str(e))
    visible = filters.apply_filters(all_tasks, today)

    table = Table(title=f"{filters.header_text()} ({len(visible)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("")
    table.add_column("Pri")
    table.add_column("Task")
    table.add_column("Due")
    for position, task in enumerate(visible, start=1):
        table.add_row(*format_task_row(position, task, today))

    console = get_console()
    console.print(table)

    counts = TaskCounter.summary(all_tasks, today)
    console.print(" · ".join(f"[dim]{name}[/dim] {count}" for name, count in counts.items()))


@cli.command()
@click.argument("text")
@click.option("--priority", "-p", type=PRIORITY_CHOICE, help="Priority letter")
@click.option("--project", "-P", help="Project when the text has no +project")
@click.option("--due", "-d", help="Due date: YYYY-MM-DD, today, tomorrow, next week, next month")
@click.option("--repeat", "-r", type=click.Choice(list(REPEAT_OPTIONS), case_sensitive=False),
              help="Repeat daily, weekly, monthly or yearly")
@click.option("--notes", "-n", help="Notes stored after ||")
@click.pass_context
def add(ctx, text, priority, project, due, repeat, notes):
    """Add a task.

    Examples:
      todotxt add "Call plumber @phone +Home" --due tomorrow
      todotxt add "Pay rent" --repeat monthly --priority B
    """
    workspace = get_workspace(ctx)
    today = get_today(ctx)

    if repeat:
        text = f"{text} {repeat_syntax(repeat.capitalize())}"

    line = workspace.new_task_line(
        text,
        priority=priority,
        project=project,
        due_date=resolve_due(due, today),
        notes=notes,
        today=today,
    )
    if line is None:
        fail("Task needs a description besides projects, contexts and tags")

    try:
        workspace.tasks.add_task(line)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Added:[/green] {line}")


@cli.command()
@click.argument("position", type=int)
@click.pass_context
def done(ctx, position):
    """Complete the task at POSITION; recurring tasks get their next occurrence."""
    task = pick_task(ctx, position)
    try:
        lines = get_workspace(ctx).tasks.complete_task(task, get_today(ctx))
    except TodoTxtError as e:
        fail(str(e))
    console = get_console()
    console.print(f"[green]Completed:[/green] {lines[0]}")
    if len(lines) > 1:
        console.print(f"[blue]Next occurrence:[/blue] {lines[1]}")


@cli.command()
@click.argument("position", type=int)
@click.pass_context
def undo(ctx, position):
    """Reopen the completed task at POSITION."""
    task = pick_task(ctx, position)
    try:
        line = get_workspace(ctx).tasks.uncomplete_task(task)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Reopened:[/green] {line}")


@cli.command()
@click.argument("position", type=int)
@click.argument("text")
@click.option("--priority", "-p", type=PRIORITY_CHOICE, help="Priority letter")
@click.option("--clear-priority", is_flag=True, help="Remove the priority")
@click.option("--due", "-d", help="Due date")
@click.option("--notes", "-n", help="Notes stored after ||")
@click.pass_context
def edit(ctx, position, text, priority, clear_priority, due, notes):
    """Replace the description of the task at POSITION."""
    today = get_today(ctx)
    task = pick_task(ctx, position)

    builder = TaskLineBuilder.from_task(task)
    builder.description = text
    if clear_priority:
        builder.priority = None
    elif priority is not None:
        builder.priority = priority
    if due is not None:
        builder.due_date = resolve_due(due, today)
    if notes is not None:
        builder.notes = notes or None

    line = builder.build(today)
    if line is None:
        fail("Task needs a description besides projects, contexts and tags")
    try:
        line = get_workspace(ctx).tasks.update_task(task, line)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Updated:[/green] {line}")


@cli.command()
@click.argument("position", type=int)
@click.pass_context
def archive(ctx, position):
    """Move the task at POSITION to the Archived project."""
    task = pick_task(ctx, position)
    try:
        line = get_workspace(ctx).tasks.archive_task(task)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Archived:[/green] {line}")


@cli.command()
@click.argument("position", type=int)
@click.pass_context
def unarchive(ctx, position):
    """Return the archived task at POSITION to its original projects."""
    task = pick_task(ctx, position)
    if not task.is_archived:
        fail("Task is not archived")
    try:
        line = get_workspace(ctx).tasks.unarchive_task(task)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Restored:[/green] {line}")


@cli.command()
@click.argument("position", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete(ctx, position, yes):
    """Delete the task at POSITION."""
    task = pick_task(ctx, position)
    if not yes and not click.confirm(f"Delete '{task.raw}'?"):
        return
    try:
        get_workspace(ctx).tasks.delete_task(task)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Deleted:[/green] {task.raw}")


@cli.command("next-due")
@click.argument("current")
@click.argument("pattern")
def next_due(current, pattern):
    """Show the due date following CURRENT for recurrence PATTERN."""
    current_date = parse_iso_date(current)
    if current_date is None:
        fail(f"Invalid date {current!r}")
    try:
        result = calculate_next_due_date(current_date, pattern, strict=True)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(to_iso(result))


cli.add_command(projects)
cli.add_command(new_project)
cli.add_command(rename_project)
cli.add_command(delete_project)
cli.add_command(pin)
cli.add_command(unpin)
