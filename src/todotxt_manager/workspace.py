"""The controller tying a todo file to its view state."""

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional

from .config import ConfigModel
from .filters import FilterManager, FilterState, TaskCounter
from .parser import TaskLineBuilder
from .project import ProjectRegistry
from .services import ProjectService, TaskService
from .state import StateStore, ViewState
from .storage import TodoFile
from .task import Task

logger = logging.getLogger(__name__)


class TodoWorkspace:
    """Owns the todo file, project registry, filters and services.

    All collaborators receive the registry and file from here; nothing is kept
    in module-level state.
    """

    def __init__(self, config: ConfigModel, todo_path: Optional[Path] = None):
        self.config = config
        self.state_store = StateStore(config.get_state_path())

        state = self.state_store.load()
        if todo_path is None:
            todo_path = Path(state.file) if state.file else config.get_todo_path()
        self.todo_file = TodoFile(todo_path, group_by_date=config.group_by_creation_date)

        if not self.state_store.path.exists():
            state.filters = FilterState(sort_option=config.default_sort)
        self.registry: ProjectRegistry = state.projects
        self.filters = FilterManager(state.filters)
        self.tasks = TaskService(self.todo_file)
        self.projects = ProjectService(self.todo_file, self.registry)

    def load_tasks(self) -> List[Task]:
        """Parse the file and register any new projects found in it."""
        tasks = self.todo_file.load_tasks()
        self.registry.update_from_tasks(tasks)
        logger.debug(f"Loaded {len(tasks)} tasks from {self.todo_file.path}")
        return tasks

    def visible_tasks(self, today: Optional[date] = None) -> List[Task]:
        return self.filters.apply_filters(self.load_tasks(), today)

    def task_at(self, position: int, today: Optional[date] = None) -> Optional[Task]:
        """Task at a 1-based position of the current view."""
        visible = self.visible_tasks(today)
        if 1 <= position <= len(visible):
            return visible[position - 1]
        return None

    def counts(self, today: Optional[date] = None):
        return TaskCounter.summary(self.load_tasks(), today)

    def new_task_line(self, description: str, priority: Optional[str] = None,
                      project: Optional[str] = None, due_date: Optional[str] = None,
                      notes: Optional[str] = None, today: Optional[date] = None) -> Optional[str]:
        """Build a line for a new task using the current view's defaults."""
        builder = TaskLineBuilder(
            description=description,
            priority=priority,
            project=project or self.filters.default_project(),
            due_date=due_date or self.filters.default_due_date(today),
            notes=notes,
            add_creation_date=self.config.add_creation_date,
        )
        return builder.build(today)

    def view_state(self) -> ViewState:
        return ViewState(
            file=str(self.todo_file.path),
            filters=self.filters.state,
            projects=self.registry,
        )

    def save_state(self):
        self.state_store.save(self.view_state())
