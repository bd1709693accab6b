"""Services that mutate todo files."""

from .task_service import TaskService
from .project_service import ProjectService

__all__ = ["TaskService", "ProjectService"]
