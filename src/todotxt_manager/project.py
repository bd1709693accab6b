"""Project registry: known projects, pinned projects and their icons."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from .task import ARCHIVED, INBOX, Task

logger = logging.getLogger(__name__)

RESERVED_PROJECTS = (INBOX, ARCHIVED)


@dataclass
class ProjectRegistry:
    """Ordered project lists shown in the sidebar.

    ``known`` keeps the user's ordering; projects found in the file are
    appended in first-seen order. ``Inbox`` and ``Archived`` are implicit and
    never stored.
    """

    known: List[str] = field(default_factory=list)
    pinned: List[str] = field(default_factory=list)
    icons: Dict[str, str] = field(default_factory=dict)

    def update_from_tasks(self, tasks: Iterable[Task]) -> List[str]:
        """Register projects seen in ``tasks``; returns the newly added ones."""
        added = []
        for task in tasks:
            for project in task.projects:
                if project in RESERVED_PROJECTS or project in self.known or project in added:
                    continue
                added.append(project)
        self.known.extend(added)
        if added:
            logger.debug(f"Discovered projects: {added}")
        return added

    def add(self, name: str) -> bool:
        if name in RESERVED_PROJECTS or name in self.known:
            return False
        self.known.append(name)
        return True

    def remove_duplicates(self):
        self.known = list(dict.fromkeys(self.known))
        self.pinned = list(dict.fromkeys(self.pinned))

    def _registry_order(self, order: List[str], names: List[str]) -> List[str]:
        """Names in ``order``'s order; unlisted names after them alphabetically."""
        listed = [name for name in order if name in names]
        unlisted = sorted(name for name in names if name not in order)
        return listed + unlisted

    def project_counts(self, tasks: Iterable[Task]) -> List[Tuple[str, int]]:
        """Active task count per known project, in registry order."""
        counts = {project: 0 for project in self.known}
        for task in tasks:
            if not task.is_active:
                continue
            for project in task.projects:
                if project in RESERVED_PROJECTS:
                    continue
                counts[project] = counts.get(project, 0) + 1
        ordered = self._registry_order(self.known, list(counts))
        return [(project, counts[project]) for project in ordered]

    def ordered_pinned(self, counts: List[Tuple[str, int]]) -> List[Tuple[str, int]]:
        """Pinned entries of ``counts`` in pin order."""
        by_name = dict(counts)
        names = [name for name in by_name if name in self.pinned]
        return [(name, by_name[name]) for name in self._registry_order(self.pinned, names)]

    def reorder(self, name: str, target_index: int, pinned: bool = False) -> bool:
        """Move a project to ``target_index`` (the slot it is dropped on)."""
        items = self.pinned if pinned else self.known
        if name not in items:
            return False
        source_index = items.index(name)
        if source_index == target_index:
            return False
        items.pop(source_index)
        insert_index = target_index - 1 if source_index < target_index else target_index
        items.insert(insert_index, name)
        return True

    def available_projects(self) -> List[str]:
        """Choices for a project picker."""
        return sorted(set(self.known) | {ARCHIVED})

    def rename(self, old_name: str, new_name: str):
        def swap(items: List[str]) -> List[str]:
            return [new_name if item == old_name else item for item in items]

        self.known = swap(self.known)
        self.pinned = swap(self.pinned)
        if old_name in self.icons:
            self.icons[new_name] = self.icons.pop(old_name)
        self.remove_duplicates()

    def delete(self, name: str):
        self.known = [item for item in self.known if item != name]
        self.pinned = [item for item in self.pinned if item != name]
        self.icons.pop(name, None)

    def pin(self, name: str):
        if name not in self.pinned:
            self.pinned.append(name)

    def unpin(self, name: str):
        self.pinned = [item for item in self.pinned if item != name]

    def is_pinned(self, name: str) -> bool:
        return name in self.pinned

    def to_dict(self) -> Dict[str, Any]:
        return {
            "known_projects": list(self.known),
            "pinned_projects": list(self.pinned),
            "project_icons": dict(self.icons),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectRegistry":
        registry = cls(
            known=[str(name) for name in data.get("known_projects") or []],
            pinned=[str(name) for name in data.get("pinned_projects") or []],
            icons={str(k): str(v) for k, v in (data.get("project_icons") or {}).items()},
        )
        registry.remove_duplicates()
        return registry
