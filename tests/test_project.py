"""Tests for the project registry."""

from todotxt_manager.parser import parse_text
from todotxt_manager.project import ProjectRegistry


class TestProjectRegistry:
    """Test known/pinned project bookkeeping."""

    def test_update_from_tasks_first_seen_order(self, sample_tasks):
        registry = ProjectRegistry(known=["Garden"])
        added = registry.update_from_tasks(sample_tasks)

        assert added == ["Home", "Work"]
        assert registry.known == ["Garden", "Home", "Work"]

    def test_reserved_projects_not_registered(self):
        registry = ProjectRegistry()
        registry.update_from_tasks(parse_text("A +Inbox\nB +Archived"))

        assert registry.known == []
        assert not registry.add("Inbox")

    def test_project_counts_active_only(self, sample_tasks):
        registry = ProjectRegistry(known=["Work", "Home", "Empty"])

        assert registry.project_counts(sample_tasks) == [("Work", 1), ("Home", 1), ("Empty", 0)]

    def test_unknown_projects_sorted_after_known(self):
        registry = ProjectRegistry(known=["Zeta"])
        tasks = parse_text("A +Zeta\nB +Beta\nC +Alpha")

        assert [name for name, _ in registry.project_counts(tasks)] == ["Zeta", "Alpha", "Beta"]

    def test_ordered_pinned(self):
        registry = ProjectRegistry(known=["A", "B", "C"], pinned=["C", "A"])
        counts = [("A", 1), ("B", 2), ("C", 3)]

        assert registry.ordered_pinned(counts) == [("C", 3), ("A", 1)]

    def test_reorder_down_and_up(self):
        registry = ProjectRegistry(known=["A", "B", "C", "D"])

        assert registry.reorder("A", 3)
        assert registry.known == ["B", "C", "A", "D"]

        assert registry.reorder("D", 0)
        assert registry.known == ["D", "B", "C", "A"]

    def test_reorder_noop(self):
        registry = ProjectRegistry(known=["A", "B"], pinned=["B"])

        assert not registry.reorder("A", 0)
        assert not registry.reorder("Missing", 1)
        assert not registry.reorder("A", 0, pinned=True)

    def test_available_projects(self):
        registry = ProjectRegistry(known=["Work", "Home"])
        assert registry.available_projects() == ["Archived", "Home", "Work"]

    def test_rename_merges_duplicates(self):
        registry = ProjectRegistry(known=["Work", "Job"], pinned=["Work"])
        registry.rename("Work", "Job")

        assert registry.known == ["Job"]
        assert registry.pinned == ["Job"]

    def test_dict_round_trip(self):
        registry = ProjectRegistry(known=["Work", "Home"], pinned=["Home"], icons={"Home": "🏠"})
        data = registry.to_dict()

        assert data == {
            "known_projects": ["Work", "Home"],
            "pinned_projects": ["Home"],
            "project_icons": {"Home": "🏠"},
        }
        assert ProjectRegistry.from_dict(data) == registry

    def test_from_dict_missing_and_duplicate_entries(self):
        registry = ProjectRegistry.from_dict({"known_projects": ["A", "A", "B"], "pinned_projects": None})

        assert registry.known == ["A", "B"]
        assert registry.pinned == []
        assert registry.icons == {}
