"""Project-level operations spanning the todo file and the registry."""

import logging
from typing import Optional

from ..project import ProjectRegistry
from ..storage import TodoFile

logger = logging.getLogger(__name__)


class ProjectService:
    """Create, rename, delete and pin projects."""

    def __init__(self, todo_file: TodoFile, registry: ProjectRegistry):
        self.todo_file = todo_file
        self.registry = registry

    def create_empty_project(self, name: str, icon: Optional[str] = None) -> bool:
        created = self.registry.add(name)
        if icon:
            self.registry.icons[name] = icon
        logger.info(f"Created project {name!r}" if created else f"Project {name!r} already known")
        return created

    def update_project_name(self, old_name: str, new_name: str) -> int:
        """Rename a project on every line and in the registry."""
        if old_name == new_name:
            return 0
        changed = self.todo_file.replace_project_name(old_name, new_name)
        self.registry.rename(old_name, new_name)
        return changed

    def delete_project(self, name: str) -> int:
        """Remove the project and every task tagged with it."""
        removed = self.todo_file.remove_project_from_tasks(name)
        self.registry.delete(name)
        return removed

    def toggle_project_pin(self, name: str, pinned: bool):
        if pinned:
            self.registry.pin(name)
        else:
            self.registry.unpin(name)
        logger.debug(f"Project {name!r} pinned={pinned}")
