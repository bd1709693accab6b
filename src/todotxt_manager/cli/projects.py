"""Project commands: listing, renaming, deleting and pinning projects."""

import click
from rich.table import Table

from ..exceptions import TodoTxtError
from ..filters import TaskCounter
from ..task import ARCHIVED, INBOX
from .common import fail, get_console, get_workspace


@click.command()
@click.option("--move", nargs=2, type=(str, int), metavar="NAME POSITION",
              help="Move a project to a 1-based position in the list")
@click.pass_context
def projects(ctx, move):
    """List projects with their active task counts."""
    workspace = get_workspace(ctx)
    try:
        tasks = workspace.load_tasks()
    except TodoTxtError as e:
        fail(str(e))
    registry = workspace.registry

    if move:
        name, position = move
        pinned = registry.is_pinned(name)
        items = registry.pinned if pinned else registry.known
        if name not in items:
            fail(f"Unknown project {name!r}")
        # reorder() takes the drop slot, which sits after the moved item
        target = position - 1
        if items.index(name) < target:
            target += 1
        registry.reorder(name, target, pinned=pinned)

    counts = registry.project_counts(tasks)
    pinned_counts = registry.ordered_pinned(counts)

    table = Table(title="Projects")
    table.add_column("Project", style="cyan")
    table.add_column("Active", justify="right")
    table.add_column("")

    table.add_row(INBOX, str(TaskCounter.inbox_count(tasks)), "")
    for name, count in pinned_counts:
        table.add_row(f"{registry.icons.get(name, '')} {name}".strip(), str(count), "📌")
    for name, count in counts:
        if registry.is_pinned(name):
            continue
        table.add_row(f"{registry.icons.get(name, '')} {name}".strip(), str(count), "")
    table.add_row(ARCHIVED, str(TaskCounter.archived_count(tasks)), "", style="dim")

    get_console().print(table)


@click.command("new-project")
@click.argument("name")
@click.option("--icon", help="Icon shown next to the project")
@click.pass_context
def new_project(ctx, name, icon):
    """Register a project that has no tasks yet."""
    if " " in name or name in (INBOX, ARCHIVED):
        fail(f"Invalid project name {name!r}")
    created = get_workspace(ctx).projects.create_empty_project(name, icon)
    if created:
        get_console().print(f"[green]Created project:[/green] {name}")
    else:
        get_console().print(f"[yellow]Project {name} already exists[/yellow]")


@click.command("rename-project")
@click.argument("old_name")
@click.argument("new_name")
@click.pass_context
def rename_project(ctx, old_name, new_name):
    """Rename a project on every task line."""
    if " " in new_name or new_name in (INBOX, ARCHIVED):
        fail(f"Invalid project name {new_name!r}")
    try:
        changed = get_workspace(ctx).projects.update_project_name(old_name, new_name)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Renamed {old_name} to {new_name}[/green] ({changed} tasks)")


@click.command("delete-project")
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_project(ctx, name, yes):
    """Delete a project together with all of its tasks."""
    if not yes and not click.confirm(f"Delete project '{name}' and all of its tasks?"):
        return
    try:
        removed = get_workspace(ctx).projects.delete_project(name)
    except TodoTxtError as e:
        fail(str(e))
    get_console().print(f"[green]Deleted project {name}[/green] ({removed} tasks removed)")


@click.command()
@click.argument("name")
@click.pass_context
def pin(ctx, name):
    """Pin a project to the top of the project list."""
    get_workspace(ctx).projects.toggle_project_pin(name, True)
    get_console().print(f"[green]Pinned:[/green] {name}")


@click.command()
@click.argument("name")
@click.pass_context
def unpin(ctx, name):
    """Unpin a project."""
    get_workspace(ctx).projects.toggle_project_pin(name, False)
    get_console().print(f"[green]Unpinned:[/green] {name}")
