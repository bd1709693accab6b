"""todotxt_manager - read, filter and edit todo.txt task lists."""

__version__ = "0.1.0"

from .exceptions import AmbiguousLineError, StaleReferenceError, TodoTxtError, UnrecognizedPatternError
from .filters import FilterManager, FilterState, TaskCounter, apply_filters
from .parser import TaskLineBuilder, parse_line, parse_text, serialize
from .recurring import calculate_next_due_date
from .task import SortOption, Task, TimeFilter
from .workspace import TodoWorkspace

__all__ = [
    "Task",
    "SortOption",
    "TimeFilter",
    "parse_line",
    "parse_text",
    "serialize",
    "TaskLineBuilder",
    "calculate_next_due_date",
    "apply_filters",
    "FilterState",
    "FilterManager",
    "TaskCounter",
    "TodoWorkspace",
    "TodoTxtError",
    "StaleReferenceError",
    "AmbiguousLineError",
    "UnrecognizedPatternError",
    "__version__",
]
