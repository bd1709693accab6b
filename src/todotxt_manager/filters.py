"""Filtering and sorting of task lists.

The selected view is a single variant (all, project, time window, archived or
completed), so combinations such as "archived view filtered to a project"
cannot be expressed. Search text, context filter and sort order are
independent facets on top of the view.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .task import ARCHIVED, INBOX, SortOption, Task, TimeFilter
from .utils.datetime import today_iso

logger = logging.getLogger(__name__)

NO_CONTEXT = "NONE"

MISSING_PRIORITY = "Z"
MISSING_DUE_DATE = "9999-99-99"
MISSING_DATE = "0000-00-00"
MISSING_TAG = "zzz"


@dataclass(frozen=True)
class AllView:
    """Every active task."""


@dataclass(frozen=True)
class ProjectView:
    """Active tasks of one project; ``Inbox`` also holds tasks without a project."""
    name: str


@dataclass(frozen=True)
class TimeView:
    """Active tasks due today or earlier, or due later."""
    kind: TimeFilter


@dataclass(frozen=True)
class ArchivedView:
    """Tasks tagged ``+Archived``."""


@dataclass(frozen=True)
class CompletedView:
    """Completed tasks."""


ViewFilter = Union[AllView, ProjectView, TimeView, ArchivedView, CompletedView]


@dataclass(frozen=True)
class FilterState:
    """Query state applied to a task list."""

    view: ViewFilter = AllView()
    search_query: str = ""
    context_filter: str = ""
    sort_option: SortOption = SortOption.PRIORITY

    @property
    def selected_project(self) -> str:
        return self.view.name if isinstance(self.view, ProjectView) else ""

    @property
    def selected_time_filter(self) -> Optional[TimeFilter]:
        return self.view.kind if isinstance(self.view, TimeView) else None

    @property
    def archived_filter(self) -> bool:
        return isinstance(self.view, ArchivedView)

    @property
    def completed_filter(self) -> bool:
        return isinstance(self.view, CompletedView)

    def to_dict(self) -> Dict[str, Any]:
        """Flat form used in the persisted view state."""
        time_filter = self.selected_time_filter
        return {
            "sortOption": self.sort_option.value,
            "searchQuery": self.search_query,
            "contextFilter": self.context_filter,
            "selectedProject": self.selected_project,
            "selectedTimeFilter": time_filter.value if time_filter else "",
            "archivedFilter": self.archived_filter,
            "completedFilter": self.completed_filter,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FilterState":
        """Rebuild from the flat form; the most specific view flag wins."""
        data = data or {}

        view: ViewFilter = AllView()
        time_filter = data.get("selectedTimeFilter") or ""
        if data.get("completedFilter"):
            view = CompletedView()
        elif data.get("archivedFilter"):
            view = ArchivedView()
        elif time_filter in {kind.value for kind in TimeFilter}:
            view = TimeView(TimeFilter(time_filter))
        elif data.get("selectedProject"):
            view = ProjectView(str(data["selectedProject"]))

        sort_value = data.get("sortOption") or SortOption.PRIORITY.value
        try:
            sort_option = SortOption(sort_value)
        except ValueError:
            logger.warning(f"Unknown sort option {sort_value!r}, using priority")
            sort_option = SortOption.PRIORITY

        return cls(
            view=view,
            search_query=str(data.get("searchQuery") or ""),
            context_filter=str(data.get("contextFilter") or ""),
            sort_option=sort_option,
        )


def in_time_window(task: Task, kind: TimeFilter, today: str) -> bool:
    """Whether the task's due date falls in the window; tasks without one never do."""
    due = task.due_date
    if due is None:
        return False
    if kind == TimeFilter.TODAY:
        return due <= today
    return due > today


def matches_search(task: Task, query: str) -> bool:
    query = query.lower()
    return (
        query in task.description.lower()
        or any(query in project.lower() for project in task.projects)
        or any(query in context.lower() for context in task.contexts)
    )


def matches_context(task: Task, context: str) -> bool:
    if context == NO_CONTEXT:
        return not task.contexts
    return context in task.contexts


def matches_project(task: Task, project: str) -> bool:
    if project == INBOX:
        return task.belongs_to_inbox
    return project in task.projects


def _sort_key(sort_option: SortOption) -> Callable[[Task], str]:
    if sort_option == SortOption.PRIORITY:
        return lambda task: task.priority or MISSING_PRIORITY
    if sort_option == SortOption.DUE_DATE:
        return lambda task: task.due_date or MISSING_DUE_DATE
    if sort_option == SortOption.CREATION:
        return lambda task: task.creation_date or MISSING_DATE
    if sort_option == SortOption.COMPLETION:
        return lambda task: task.completion_date or MISSING_DATE
    if sort_option == SortOption.ALPHABETICAL:
        return lambda task: task.description
    if sort_option == SortOption.PROJECTS:
        return lambda task: task.projects[0] if task.projects else MISSING_TAG
    return lambda task: task.contexts[0] if task.contexts else MISSING_TAG


DESCENDING_SORTS = {SortOption.CREATION, SortOption.COMPLETION}


def sort_tasks(tasks: Iterable[Task], sort_option: SortOption) -> List[Task]:
    """Stable sort: incomplete before completed, then by ``sort_option``.

    Creation and completion dates sort newest first. Ties keep input order.
    """
    ordered = sorted(tasks, key=_sort_key(sort_option), reverse=sort_option in DESCENDING_SORTS)
    ordered.sort(key=lambda task: task.completed)
    return ordered


def _categorical_split(tasks: Iterable[Task], view: ViewFilter) -> List[Task]:
    if isinstance(view, CompletedView):
        return [task for task in tasks if task.completed]
    if isinstance(view, ArchivedView):
        return [task for task in tasks if task.is_archived]
    return [task for task in tasks if task.is_active]


def _narrow(tasks: Iterable[Task], state: FilterState, today: str,
            use_context: bool = True) -> List[Task]:
    """Every filter stage, in order, without sorting."""
    view = state.view
    filtered = _categorical_split(tasks, view)

    if isinstance(view, TimeView):
        filtered = [task for task in filtered if in_time_window(task, view.kind, today)]

    if state.search_query.strip():
        filtered = [task for task in filtered if matches_search(task, state.search_query)]

    if use_context and state.context_filter.strip():
        filtered = [task for task in filtered if matches_context(task, state.context_filter)]

    if isinstance(view, ProjectView) and view.name.strip():
        filtered = [task for task in filtered if matches_project(task, view.name)]

    return filtered


def apply_filters(tasks: Iterable[Task], state: FilterState,
                  today: Optional[date] = None) -> List[Task]:
    """Filter ``tasks`` through ``state`` and return them sorted."""
    filtered = _narrow(tasks, state, today_iso(today))
    return sort_tasks(filtered, state.sort_option)


class FilterManager:
    """Owns the current FilterState and its transitions.

    Selecting a view resets the facets that do not apply to it, the same way
    picking an entry in the sidebar does.
    """

    def __init__(self, state: Optional[FilterState] = None,
                 on_change: Optional[Callable[[FilterState], None]] = None):
        self.state = state or FilterState()
        self.on_change = on_change

    def set_state(self, state: FilterState):
        self.state = state
        self._changed()

    def _update(self, **changes):
        self.state = replace(self.state, **changes)
        self._changed()

    def _changed(self):
        logger.debug(f"Filter state changed: {self.state}")
        if self.on_change:
            self.on_change(self.state)

    def set_sort_option(self, sort_option: SortOption):
        self._update(sort_option=sort_option)

    def set_search_query(self, query: str):
        self._update(search_query=query)

    def set_context_filter(self, context: str):
        self._update(context_filter=context)

    def set_project_filter(self, project: str):
        """Show one project and reset the context filter and sort order."""
        view = ProjectView(project) if project else AllView()
        self._update(view=view, context_filter="", sort_option=SortOption.PRIORITY)

    def set_time_filter(self, kind: Optional[TimeFilter]):
        view = TimeView(kind) if kind else AllView()
        self._update(view=view, context_filter="", sort_option=SortOption.PRIORITY)

    def set_special_filter(self, name: str):
        """Switch to the archived or completed view; any other name means all."""
        if name == "archived":
            view, sort_option = ArchivedView(), SortOption.PRIORITY
        elif name == "completed":
            view, sort_option = CompletedView(), SortOption.COMPLETION
        else:
            view, sort_option = AllView(), SortOption.PRIORITY
        self._update(view=view, context_filter="", sort_option=sort_option)

    def set_quick_filter(self, name: str):
        """Select a view by name; unknown names are treated as project names."""
        key = name.lower()
        if key == "all":
            self._update(view=AllView())
        elif key == "inbox":
            self.set_project_filter(INBOX)
        elif key == TimeFilter.TODAY.value:
            self.set_time_filter(TimeFilter.TODAY)
        elif key == TimeFilter.UPCOMING.value:
            self.set_time_filter(TimeFilter.UPCOMING)
        elif key in ("archived", "completed"):
            self.set_special_filter(key)
        else:
            self.set_project_filter(name)

    def apply_filters(self, tasks: Iterable[Task], today: Optional[date] = None) -> List[Task]:
        return apply_filters(tasks, self.state, today)

    def contexts_for_current_filters(self, tasks: Iterable[Task],
                                     today: Optional[date] = None) -> List[str]:
        """Contexts offered by the context picker for the current view."""
        filtered = _narrow(tasks, self.state, today_iso(today), use_context=False)
        return sorted({context for task in filtered for context in task.contexts})

    def default_project(self) -> Optional[str]:
        """Project given to tasks added from the current view."""
        if self.state.archived_filter:
            return ARCHIVED
        return self.state.selected_project or None

    def default_due_date(self, today: Optional[date] = None) -> Optional[str]:
        if self.state.selected_time_filter == TimeFilter.TODAY:
            return today_iso(today)
        return None

    def header_text(self) -> str:
        state = self.state
        if state.completed_filter:
            return "Completed"
        if state.archived_filter:
            return "Archived"
        if state.selected_time_filter == TimeFilter.TODAY:
            return "Today"
        if state.selected_time_filter == TimeFilter.UPCOMING:
            return "Upcoming"
        if state.selected_project:
            return state.selected_project.replace("_", " ")
        return "Tasks"


class TaskCounter:
    """Badge counts shown next to each view."""

    @staticmethod
    def all_count(tasks: Iterable[Task]) -> int:
        return sum(1 for task in tasks if task.is_active)

    @staticmethod
    def today_count(tasks: Iterable[Task], today: Optional[date] = None) -> int:
        today_str = today_iso(today)
        return sum(1 for task in tasks
                   if not task.completed and in_time_window(task, TimeFilter.TODAY, today_str))

    @staticmethod
    def upcoming_count(tasks: Iterable[Task], today: Optional[date] = None) -> int:
        today_str = today_iso(today)
        return sum(1 for task in tasks
                   if not task.completed and in_time_window(task, TimeFilter.UPCOMING, today_str))

    @staticmethod
    def inbox_count(tasks: Iterable[Task]) -> int:
        return sum(1 for task in tasks if not task.completed and task.belongs_to_inbox)

    @staticmethod
    def archived_count(tasks: Iterable[Task]) -> int:
        return sum(1 for task in tasks if task.is_archived)

    @staticmethod
    def completed_count(tasks: Iterable[Task]) -> int:
        return sum(1 for task in tasks if task.completed)

    @classmethod
    def summary(cls, tasks: List[Task], today: Optional[date] = None) -> Dict[str, int]:
        return {
            "all": cls.all_count(tasks),
            "today": cls.today_count(tasks, today),
            "upcoming": cls.upcoming_count(tasks, today),
            "inbox": cls.inbox_count(tasks),
            "archived": cls.archived_count(tasks),
            "completed": cls.completed_count(tasks),
        }
