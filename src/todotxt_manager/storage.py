"""Storage layer for todo.txt files.

Every mutation reads the whole file, transforms the lines in memory and writes
the whole file back in one call.
"""

import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Union

from .exceptions import StaleReferenceError, StorageError
from .parser import parse_text
from .task import Task

logger = logging.getLogger(__name__)

CREATION_DATE_RE = re.compile(r"^(?:\([A-Z]\)\s+)?(\d{4}-\d{2}-\d{2})")


def extract_creation_date(line: str) -> Optional[str]:
    """Creation date at the start of an active task line, if any."""
    match = CREATION_DATE_RE.match(line.strip())
    return match.group(1) if match else None


def locate_task(lines: List[str], task: Task) -> int:
    """Index of the line holding ``task``.

    The line number captured at parse time is trusted when that line still
    holds the task's raw text. Otherwise the raw text is searched for and must
    occur exactly once.

    Raises:
        StaleReferenceError: If the task cannot be matched unambiguously
    """
    raw = task.raw.strip()
    number = task.line_number
    if number is not None and 0 <= number < len(lines) and lines[number].strip() == raw:
        return number

    matches = [index for index, line in enumerate(lines) if line.strip() == raw]
    if len(matches) == 1:
        logger.debug(f"Task moved from line {number} to {matches[0]}: {raw!r}")
        return matches[0]

    logger.warning(f"Stale task reference ({len(matches)} matches): {raw!r}")
    raise StaleReferenceError(task.raw, number)


def append_to_content(content: str, new_lines: List[str], group_by_date: bool = True) -> str:
    """Append task lines, leaving a blank line where the creation date changes."""
    content = content.rstrip("\n")
    for new_line in new_lines:
        if not content.strip():
            content = new_line
            continue
        separator = "\n"
        if group_by_date:
            last_date = extract_creation_date(content.split("\n")[-1])
            new_date = extract_creation_date(new_line)
            if last_date and new_date and last_date != new_date:
                separator = "\n\n"
        content = f"{content}{separator}{new_line}"
    return content


def replace_project_in_line(line: str, old_name: str, new_name: str) -> str:
    return re.sub(rf"\+{re.escape(old_name)}\b", f"+{new_name}", line)


class TodoFile:
    """A todo.txt file on disk."""

    def __init__(self, path: Union[str, Path], group_by_date: bool = True):
        self.path = Path(path).expanduser()
        self.group_by_date = group_by_date

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> str:
        """Return the file content; a missing file reads as empty."""
        if not self.path.exists():
            return ""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read todo file ({e})", self.path) from e

    def write(self, content: str):
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"Failed to write todo file ({e})", self.path) from e
        logger.info(f"Wrote {self.path}")

    def load_tasks(self) -> List[Task]:
        return parse_text(self.read())

    def _transform(self, transform: Callable[[str], str]):
        """Read, transform and write back the whole file."""
        self.write(transform(self.read()))

    def replace_task(self, task: Task, new_line: str, append: Optional[List[str]] = None):
        """Replace the task's line and optionally append lines, in a single write."""
        def transform(content: str) -> str:
            lines = content.split("\n")
            lines[locate_task(lines, task)] = new_line
            updated = "\n".join(lines)
            if append:
                updated = append_to_content(updated, append, self.group_by_date)
            return updated

        self._transform(transform)

    def delete_task(self, task: Task):
        def transform(content: str) -> str:
            lines = content.split("\n")
            del lines[locate_task(lines, task)]
            return "\n".join(lines)

        self._transform(transform)

    def append_lines(self, new_lines: List[str]):
        self._transform(lambda content: append_to_content(content, new_lines, self.group_by_date))

    def replace_project_name(self, old_name: str, new_name: str) -> int:
        """Rename ``+old_name`` to ``+new_name`` on every line; returns lines changed."""
        changed = 0

        def transform(content: str) -> str:
            nonlocal changed
            lines = []
            for line in content.split("\n"):
                updated = replace_project_in_line(line, old_name, new_name)
                if updated != line:
                    changed += 1
                lines.append(updated)
            return "\n".join(lines)

        self._transform(transform)
        logger.info(f"Renamed +{old_name} to +{new_name} on {changed} lines")
        return changed

    def remove_project_from_tasks(self, project_name: str) -> int:
        """Drop every line tagged with the project; returns lines removed."""
        removed = 0
        pattern = re.compile(rf"\+{re.escape(project_name)}\b")

        def transform(content: str) -> str:
            nonlocal removed
            kept = []
            for line in content.split("\n"):
                if pattern.search(line):
                    removed += 1
                else:
                    kept.append(line)
            return "\n".join(kept)

        self._transform(transform)
        logger.info(f"Removed {removed} lines tagged +{project_name}")
        return removed
