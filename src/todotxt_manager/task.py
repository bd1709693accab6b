"""Task data model for todo.txt lines."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


INBOX = "Inbox"
ARCHIVED = "Archived"

DUE_KEY = "due"
RECURRENCE_KEY = "rec"
PRIORITY_KEY = "pri"
ORIGINAL_PROJECTS_KEY = "origProj"

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DUE_TOKEN_RE = re.compile(r"(?<!\S)due:(\d{4}-\d{2}-\d{2})")


class SortOption(Enum):
    """Orderings available for a task list."""
    PRIORITY = "priority"
    DUE_DATE = "duedate"
    CREATION = "creation"
    COMPLETION = "completion"
    ALPHABETICAL = "alphabetical"
    PROJECTS = "projects"
    CONTEXTS = "contexts"


class TimeFilter(Enum):
    """Due-date windows used by the time views."""
    TODAY = "today"
    UPCOMING = "upcoming"


@dataclass
class Task:
    """One parsed line of a todo.txt file.
    
    ``description`` keeps projects, contexts and key-value tokens verbatim so
    the line can be rebuilt without reordering them. ``raw`` is the source
    line and ``line_number`` its 0-based position in the file it came from.
    """
    
    description: str = ""
    completed: bool = False
    priority: Optional[str] = None
    creation_date: Optional[str] = None
    completion_date: Optional[str] = None
    description_notes: Optional[str] = None
    projects: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    key_value_pairs: Dict[str, str] = field(default_factory=dict)
    raw: str = ""
    line_number: Optional[int] = None
    
    @property
    def due_date(self) -> Optional[str]:
        """First ``due:YYYY-MM-DD`` token in the description."""
        match = DUE_TOKEN_RE.search(self.description)
        return match.group(1) if match else None
    
    @property
    def recurrence(self) -> Optional[str]:
        return self.key_value_pairs.get(RECURRENCE_KEY)
    
    @property
    def is_archived(self) -> bool:
        return ARCHIVED in self.projects
    
    @property
    def is_active(self) -> bool:
        """Neither completed nor archived."""
        return not self.completed and not self.is_archived
    
    @property
    def belongs_to_inbox(self) -> bool:
        # Tasks without any project default to the Inbox
        return not self.projects or INBOX in self.projects
    
    @property
    def original_projects(self) -> List[str]:
        value = self.key_value_pairs.get(ORIGINAL_PROJECTS_KEY, "")
        return [name for name in value.split(",") if name]
    
    @property
    def effective_priority(self) -> Optional[str]:
        """Priority whether shown as ``(X)`` or stored as ``pri:X``."""
        return self.priority or self.key_value_pairs.get(PRIORITY_KEY)
    
    def structured_fields(self) -> Dict[str, object]:
        """Fields that must survive a parse/serialize round trip."""
        return {
            "completed": self.completed,
            "priority": self.priority,
            "creation_date": self.creation_date,
            "completion_date": self.completion_date,
            "description_notes": self.description_notes,
            "projects": list(self.projects),
            "contexts": list(self.contexts),
            "key_value_pairs": dict(self.key_value_pairs),
        }
