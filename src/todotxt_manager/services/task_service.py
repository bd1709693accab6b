"""Task mutations: complete, uncomplete, archive, unarchive, edit, add, delete."""

import logging
import re
from datetime import date
from typing import List, Optional

from ..parser import (
    TOKEN_PAIR,
    TOKEN_PROJECT,
    classify_token,
    copy_task,
    parse_line,
    serialize,
    with_due_date,
)
from ..recurring import next_due_date_iso
from ..storage import TodoFile
from ..task import ARCHIVED, INBOX, ORIGINAL_PROJECTS_KEY, PRIORITY_KEY, Task
from ..utils.datetime import today_iso

logger = logging.getLogger(__name__)

PRIORITY_VALUE_RE = re.compile(r"^[A-Z]$")


def completed_line(task: Task, today: Optional[date] = None) -> str:
    """Line for ``task`` marked done today.

    The ``(X)`` priority moves into a ``pri:X`` pair since completed lines do
    not carry the priority marker.
    """
    pairs = dict(task.key_value_pairs)
    if task.priority:
        pairs[PRIORITY_KEY] = task.priority
    done = copy_task(
        task,
        completed=True,
        completion_date=today_iso(today),
        priority=None,
        key_value_pairs=pairs,
    )
    return serialize(done)


def next_recurrence_line(task: Task) -> Optional[str]:
    """Sibling line for the next occurrence of a recurring task.

    Returns None when the task does not recur, has no valid due date, or its
    pattern is not understood.
    """
    pattern = task.recurrence
    if not pattern:
        return None
    due = task.due_date
    next_due = next_due_date_iso(due, pattern) if due else None
    if next_due is None:
        logger.warning(f"Not scheduling next occurrence (due={due!r}, rec={pattern!r}): {task.raw!r}")
        return None
    sibling = copy_task(with_due_date(task, next_due), completed=False, completion_date=None)
    return serialize(sibling)


def uncompleted_line(task: Task) -> str:
    """Line for ``task`` reopened; a ``pri:X`` pair becomes the ``(X)`` marker again."""
    pairs = dict(task.key_value_pairs)
    priority = task.priority
    stored = pairs.get(PRIORITY_KEY)
    if stored and PRIORITY_VALUE_RE.match(stored):
        del pairs[PRIORITY_KEY]
        priority = priority or stored
    reopened = copy_task(
        task,
        completed=False,
        completion_date=None,
        priority=priority,
        key_value_pairs=pairs,
    )
    return serialize(reopened)


def prepare_update(original: Task, new_line: str) -> str:
    """Carry ``origProj`` across an edit.

    A task gaining ``+Archived`` records its other projects in
    ``origProj``; a task that was already archived keeps its existing value.
    """
    updated = parse_line(new_line)
    if not updated.is_archived or ORIGINAL_PROJECTS_KEY in updated.key_value_pairs:
        return new_line

    if original.is_archived:
        existing = original.key_value_pairs.get(ORIGINAL_PROJECTS_KEY)
        if not existing:
            return new_line
        value = existing
    else:
        previous = [project for project in original.projects if project != ARCHIVED]
        if not previous:
            return new_line
        value = ",".join(previous)

    updated.key_value_pairs[ORIGINAL_PROJECTS_KEY] = value
    return serialize(updated)


def archived_line(task: Task) -> str:
    """Line for ``task`` moved to the Archived project."""
    line = serialize(copy_task(task, projects=[ARCHIVED]))
    return prepare_update(task, line)


def unarchived_line(task: Task) -> str:
    """Line for an archived task returned to its original projects.

    Projects come from ``origProj`` (``Inbox`` when missing). Project and
    key-value tokens are lifted out of the description and re-appended after
    it; ``origProj`` itself is dropped and a stored ``pri:X`` becomes the
    ``(X)`` marker.
    """
    targets = task.original_projects or [INBOX]

    words = []
    for token in task.description.split():
        kind, _, _ = classify_token(token)
        if kind in (TOKEN_PROJECT, TOKEN_PAIR):
            continue
        words.append(token)

    pairs = {
        key: value for key, value in task.key_value_pairs.items()
        if key not in (ORIGINAL_PROJECTS_KEY, PRIORITY_KEY)
    }
    priority = task.priority
    stored = task.key_value_pairs.get(PRIORITY_KEY)
    if not priority and stored and PRIORITY_VALUE_RE.match(stored):
        priority = stored

    restored = Task(
        description=" ".join(words),
        priority=priority,
        creation_date=task.creation_date,
        description_notes=task.description_notes,
        projects=list(targets),
        contexts=list(task.contexts),
        key_value_pairs=pairs,
    )
    return serialize(restored)


class TaskService:
    """Applies task mutations to a todo file."""

    def __init__(self, todo_file: TodoFile):
        self.todo_file = todo_file

    def complete_task(self, task: Task, today: Optional[date] = None) -> List[str]:
        """Mark a task done; a recurring task also gets its next occurrence appended.

        Both changes land in one write. Returns the written lines, completed
        line first.
        """
        if task.completed:
            logger.info(f"Task already completed: {task.raw!r}")
            return [task.raw]

        done = completed_line(task, today)
        sibling = next_recurrence_line(task)
        self.todo_file.replace_task(task, done, append=[sibling] if sibling else None)
        logger.info(f"Completed task: {done!r}")
        return [done, sibling] if sibling else [done]

    def uncomplete_task(self, task: Task) -> str:
        if not task.completed:
            logger.info(f"Task is not completed: {task.raw!r}")
            return task.raw
        line = uncompleted_line(task)
        self.todo_file.replace_task(task, line)
        logger.info(f"Reopened task: {line!r}")
        return line

    def update_task(self, original: Task, new_line: str) -> str:
        """Replace a task with an edited line, recording ``origProj`` when archiving."""
        line = prepare_update(original, new_line)
        self.todo_file.replace_task(original, line)
        logger.info(f"Updated task: {line!r}")
        return line

    def archive_task(self, task: Task) -> str:
        if task.is_archived:
            return task.raw
        line = archived_line(task)
        self.todo_file.replace_task(task, line)
        logger.info(f"Archived task: {line!r}")
        return line

    def unarchive_task(self, task: Task) -> str:
        """Move a task out of Archived back to its original projects."""
        line = unarchived_line(task)
        self.todo_file.replace_task(task, line)
        logger.info(f"Unarchived task: {line!r}")
        return line

    def delete_task(self, task: Task):
        self.todo_file.delete_task(task)
        logger.info(f"Deleted task: {task.raw!r}")

    def add_task(self, line: str) -> str:
        self.todo_file.append_lines([line])
        logger.info(f"Added task: {line!r}")
        return line
