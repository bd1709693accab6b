"""Persisted view state: open file, filters and project registry."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .filters import FilterState
from .project import ProjectRegistry

logger = logging.getLogger(__name__)


@dataclass
class ViewState:
    """Everything restored when the task view is reopened."""

    file: Optional[str] = None
    filters: FilterState = field(default_factory=FilterState)
    projects: ProjectRegistry = field(default_factory=ProjectRegistry)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"file": self.file}
        data.update(self.filters.to_dict())
        data.update(self.projects.to_dict())
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ViewState":
        data = data or {}
        return cls(
            file=data.get("file"),
            filters=FilterState.from_dict(data),
            projects=ProjectRegistry.from_dict(data),
        )


class StateStore:
    """Reads and writes ViewState as YAML."""

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def load(self) -> ViewState:
        """Load saved state; a missing or unreadable file gives a fresh state."""
        if not self.path.exists():
            return ViewState()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load view state from {self.path}: {e}")
            return ViewState()
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed view state in {self.path}")
            return ViewState()
        return ViewState.from_dict(data)

    def save(self, state: ViewState):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(state.to_dict(), f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Saved view state to {self.path}")
