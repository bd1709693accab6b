"""todo.txt line grammar: parsing, serialization and line building."""

import logging
import re
from dataclasses import dataclass, replace
from datetime import date
from typing import List, Optional, Tuple

from .exceptions import AmbiguousLineError
from .task import (
    DATE_RE,
    DUE_KEY,
    INBOX,
    Task,
)
from .utils.datetime import today_iso

logger = logging.getLogger(__name__)

PRIORITY_RE = re.compile(r"^\(([A-Z])\)$")
NOTES_DELIMITER = "||"
NOTES_ESCAPE_RE = re.compile(r"\\([\\n])")

TOKEN_TEXT = "text"
TOKEN_PROJECT = "project"
TOKEN_CONTEXT = "context"
TOKEN_PAIR = "pair"


def classify_token(token: str) -> Tuple[str, str, str]:
    """Classify one whitespace-free token by its sigil or shape.

    Returns:
        Tuple of (kind, name, value). ``name`` is the project/context name
        without its sigil or the key of a key-value pair; ``value`` is only
        set for pairs.
    """
    if token.startswith("+") and len(token) > 1:
        return TOKEN_PROJECT, token[1:], ""
    if token.startswith("@") and len(token) > 1:
        return TOKEN_CONTEXT, token[1:], ""
    if ":" in token and not token.startswith("http"):
        key, _, value = token.partition(":")
        if key and value:
            return TOKEN_PAIR, key, value
    return TOKEN_TEXT, token, ""


def unescape_notes(notes: str) -> str:
    """Turn stored ``\\n`` and ``\\\\`` sequences back into a newline and a backslash."""
    return NOTES_ESCAPE_RE.sub(lambda m: "\n" if m.group(1) == "n" else "\\", notes)


def escape_notes(notes: str) -> str:
    return notes.replace("\\", "\\\\").replace("\n", "\\n")


def parse_line(line: str, line_number: Optional[int] = None) -> Task:
    """Parse a single todo.txt line into a Task.

    The leading markers are positional and recognised only in this order:
    ``x``, completion date (completed tasks only), ``(A)`` priority,
    creation date. Everything else becomes the description. Any string
    parses; malformed input just ends up in the description.
    """
    task = Task(raw=line, line_number=line_number)
    parts = line.split()
    index = 0

    if index < len(parts) and parts[index] == "x":
        task.completed = True
        index += 1

    if task.completed and index < len(parts) and DATE_RE.match(parts[index]):
        task.completion_date = parts[index]
        index += 1

    if index < len(parts):
        match = PRIORITY_RE.match(parts[index])
        if match:
            task.priority = match.group(1)
            index += 1

    if index < len(parts) and DATE_RE.match(parts[index]):
        task.creation_date = parts[index]
        index += 1

    remaining = " ".join(parts[index:])

    if NOTES_DELIMITER in remaining:
        remaining, _, notes = remaining.partition(NOTES_DELIMITER)
        notes = notes.strip()
        if notes:
            task.description_notes = unescape_notes(notes)
        remaining = remaining.strip()

    task.description = remaining

    for token in remaining.split():
        kind, name, value = classify_token(token)
        if kind == TOKEN_PROJECT:
            task.projects.append(name)
        elif kind == TOKEN_CONTEXT:
            task.contexts.append(name)
        elif kind == TOKEN_PAIR:
            task.key_value_pairs[name] = value

    return task


def parse_text(content: str) -> List[Task]:
    """Parse a whole file, skipping blank lines.

    Each task remembers the 0-based index of the line it came from so
    mutations can find it again.
    """
    tasks = []
    for line_number, line in enumerate(content.split("\n")):
        if not line.strip():
            continue
        tasks.append(parse_line(line, line_number))
    logger.debug(f"Parsed {len(tasks)} tasks")
    return tasks


def _rebuild_description(task: Task) -> List[str]:
    """Description tokens reconciled with the task's structured fields.

    Tokens keep their original order. Pair tokens take the current value from
    ``key_value_pairs``; project, context and pair tokens no longer present in
    the structured fields are dropped; new ones are appended.
    """
    tokens = []
    seen_projects = set()
    seen_contexts = set()
    seen_keys = set()

    for token in task.description.split():
        kind, name, value = classify_token(token)
        if kind == TOKEN_PROJECT:
            if name not in task.projects:
                continue
            seen_projects.add(name)
        elif kind == TOKEN_CONTEXT:
            if name not in task.contexts:
                continue
            seen_contexts.add(name)
        elif kind == TOKEN_PAIR:
            current = task.key_value_pairs.get(name)
            if not current:
                continue
            if current != value:
                token = f"{name}:{current}"
            seen_keys.add(name)
        tokens.append(token)

    for project in task.projects:
        if project not in seen_projects:
            tokens.append(f"+{project}")
            seen_projects.add(project)

    for context in task.contexts:
        if context not in seen_contexts:
            tokens.append(f"@{context}")
            seen_contexts.add(context)

    for key, value in task.key_value_pairs.items():
        if key not in seen_keys and key and value:
            tokens.append(f"{key}:{value}")

    return tokens


def _leading_fields(task: Task) -> Tuple[bool, Optional[str], Optional[str], Optional[str]]:
    completion_date = task.completion_date if task.completed else None
    return task.completed, completion_date or None, task.priority or None, task.creation_date or None


def serialize(task: Task) -> str:
    """Render a Task as a todo.txt line.

    This is the only place lines are assembled from structured fields. A task
    parsed from a line and left untouched serializes back to that line with
    whitespace normalised.

    Raises:
        AmbiguousLineError: If the line would parse back with different
            leading fields, e.g. a description starting with ``x`` on a task
            with no markers in front of it
    """
    parts = []
    if task.completed:
        parts.append("x")
        if task.completion_date:
            parts.append(task.completion_date)
    if task.priority:
        parts.append(f"({task.priority})")
    if task.creation_date:
        parts.append(task.creation_date)

    parts.extend(_rebuild_description(task))
    line = " ".join(parts)

    if task.description_notes:
        line += f" {NOTES_DELIMITER}{escape_notes(task.description_notes)}"

    if _leading_fields(parse_line(line)) != _leading_fields(task):
        raise AmbiguousLineError(line)
    return line


def with_due_date(task: Task, due: str) -> Task:
    """Copy of ``task`` whose due date is ``due``."""
    pairs = dict(task.key_value_pairs)
    pairs[DUE_KEY] = due
    return copy_task(task, key_value_pairs=pairs)


def copy_task(task: Task, **changes) -> Task:
    """Copy of a task with its lists and mapping duplicated."""
    values = {
        "projects": list(task.projects),
        "contexts": list(task.contexts),
        "key_value_pairs": dict(task.key_value_pairs),
    }
    values.update(changes)
    return replace(task, **values)


METADATA_PATTERNS = [
    re.compile(r"\s*\+\w+"),
    re.compile(r"\s*@\w+"),
    re.compile(r"\s*due:\d{4}-\d{2}-\d{2}"),
    re.compile(r"\s*rec:\S+"),
    re.compile(r"\s*\w+:\S+"),
    re.compile(r"^\s*\([A-Z]\)\s*"),
    re.compile(r"\s*[+@!/*]"),
    re.compile(r"\s*\w+:\s*"),
]
LEADING_PRIORITY_RE = re.compile(r"^\(([A-Z])\)\s*(.*)$")
HAS_PROJECT_RE = re.compile(r"\+\w+")
HAS_RECURRENCE_RE = re.compile(r"\brec:\S+")
HAS_DUE_RE = re.compile(r"(?<!\S)due:\d{4}-\d{2}-\d{2}")


@dataclass
class TaskLineBuilder:
    """Builds a todo.txt line from add/edit form fields.

    ``editing`` is the task being edited, or None when adding a new one.
    """

    description: str
    priority: Optional[str] = None
    project: Optional[str] = None
    due_date: Optional[str] = None
    notes: Optional[str] = None
    editing: Optional[Task] = None
    add_creation_date: bool = True

    @classmethod
    def from_task(cls, task: Task) -> "TaskLineBuilder":
        """Prefill the form from an existing task."""
        description = re.sub(r"\s*\+\w+", "", task.description)
        description = re.sub(r"\s*(?<!\S)due:\d{4}-\d{2}-\d{2}", "", description).strip()
        return cls(
            description=description,
            priority=task.priority,
            project=task.projects[0] if task.projects else INBOX,
            due_date=task.due_date,
            notes=task.description_notes,
            editing=task,
        )

    def _has_content(self, text: str) -> bool:
        for pattern in METADATA_PATTERNS:
            text = pattern.sub("", text)
        return bool(text.strip())

    @staticmethod
    def _marker_in_text(prefix: List[str], text: str) -> bool:
        """Whether the first word of ``text`` would parse as x, a priority or a date."""
        reparsed = parse_line(" ".join(prefix + [text]))
        return reparsed.description.split()[:1] != text.split()[:1]

    def build(self, today: Optional[date] = None) -> Optional[str]:
        """Assemble the line, or return None when there is no real description."""
        text = self.description.strip()
        priority = self.priority
        match = LEADING_PRIORITY_RE.match(text)
        if match:
            priority = priority or match.group(1)
            text = match.group(2).strip()

        if not text or not self._has_content(text):
            logger.debug(f"Ignoring metadata-only task text: {self.description!r}")
            return None

        today_str = today_iso(today)
        editing = self.editing
        parts = []

        if editing is not None and editing.completed:
            parts.append(f"x {editing.completion_date or today_str}")
        if priority:
            parts.append(f"({priority})")
        creation_date = None
        if editing is None:
            if self.add_creation_date:
                creation_date = today_str
        elif not editing.completed and editing.creation_date:
            creation_date = editing.creation_date

        if creation_date is None and self._marker_in_text(parts, text):
            # A creation date stops the parser from reading the text as a marker
            creation_date = (editing.creation_date if editing is not None else None) or today_str
        if creation_date:
            parts.append(creation_date)

        parts.append(text)

        if self.project and not HAS_PROJECT_RE.search(text):
            parts.append(f"+{self.project}")

        if self.due_date and f"due:{self.due_date}" not in text.split():
            parts.append(f"due:{self.due_date}")
        elif HAS_RECURRENCE_RE.search(text) and not self.due_date and not HAS_DUE_RE.search(text):
            parts.append(f"due:{today_str}")

        line = " ".join(parts)
        if self.notes:
            line += f" {NOTES_DELIMITER}{escape_notes(self.notes)}"
        return line
