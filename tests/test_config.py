"""Tests for configuration, persisted view state and the workspace."""

from pathlib import Path

import pytest
import yaml

from todotxt_manager.config import CONFIG_ENV_VAR, Config, ConfigModel, load_config, save_config
from todotxt_manager.exceptions import ConfigError
from todotxt_manager.filters import FilterState, ProjectView
from todotxt_manager.project import ProjectRegistry
from todotxt_manager.state import StateStore, ViewState
from todotxt_manager.task import SortOption
from todotxt_manager.workspace import TodoWorkspace


class TestConfigModel:
    """Test the configuration model."""

    def test_defaults(self):
        config = ConfigModel()

        assert config.data_dir == str(Path("~/.todotxt").expanduser())
        assert config.default_sort == SortOption.PRIORITY
        assert config.group_by_creation_date is True
        assert config.get_todo_path() == Path(config.data_dir) / "todo.txt"

    def test_absolute_todo_file(self, tmp_path):
        config = ConfigModel(data_dir=str(tmp_path), todo_file=str(tmp_path / "elsewhere.txt"))
        assert config.get_todo_path() == tmp_path / "elsewhere.txt"

    def test_yaml_round_trip(self, tmp_path):
        config = ConfigModel(data_dir=str(tmp_path), default_sort=SortOption.DUE_DATE,
                             add_creation_date=False)
        restored = ConfigModel.from_yaml(config.to_yaml())

        assert restored == config

    def test_unknown_keys_ignored(self, tmp_path):
        config = ConfigModel.from_yaml(f"data_dir: {tmp_path}\ntheme: dark\n")
        assert config.data_dir == str(tmp_path)

    def test_invalid_sort_raises(self):
        with pytest.raises(ConfigError):
            ConfigModel.from_yaml("default_sort: sideways\n")

    def test_invalid_yaml_raises(self):
        with pytest.raises(ConfigError):
            ConfigModel.from_yaml("data_dir: [unclosed\n")

    def test_non_mapping_raises(self):
        with pytest.raises(ConfigError):
            ConfigModel.from_yaml("- a\n- b\n")


class TestConfigLoading:
    """Test loading and saving config files."""

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(tmp_path / "nope.yaml") == ConfigModel()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "conf" / "config.yaml"
        config = ConfigModel(data_dir=str(tmp_path), todo_file="tasks.txt")
        save_config(config, path)

        assert load_config(path) == config

    def test_env_var_overrides_path(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))

        assert Config.default_path() == path


class TestStateStore:
    """Test persisting the view state."""

    def test_save_and_load(self, tmp_path):
        store = StateStore(tmp_path / "state.yaml")
        state = ViewState(
            file="/tmp/todo.txt",
            filters=FilterState(view=ProjectView("Work"), sort_option=SortOption.ALPHABETICAL),
            projects=ProjectRegistry(known=["Work"], pinned=["Work"]),
        )
        store.save(state)

        assert store.load() == state

    def test_flat_layout(self, tmp_path):
        store = StateStore(tmp_path / "state.yaml")
        store.save(ViewState(file="todo.txt"))

        data = yaml.safe_load((tmp_path / "state.yaml").read_text())
        assert data["file"] == "todo.txt"
        assert data["sortOption"] == "priority"
        assert data["known_projects"] == []

    def test_missing_or_broken_state_gives_defaults(self, tmp_path):
        assert StateStore(tmp_path / "missing.yaml").load() == ViewState()

        broken = tmp_path / "broken.yaml"
        broken.write_text("sortOption: [oops\n")
        assert StateStore(broken).load() == ViewState()

        scalar = tmp_path / "scalar.yaml"
        scalar.write_text("just text\n")
        assert StateStore(scalar).load() == ViewState()


class TestTodoWorkspace:
    """Test the controller wiring."""

    def test_uses_config_paths(self, config):
        workspace = TodoWorkspace(config)

        assert workspace.todo_file.path == config.get_todo_path()
        assert workspace.filters.state.sort_option == config.default_sort

    def test_default_sort_from_config(self, tmp_path):
        config = ConfigModel(data_dir=str(tmp_path), default_sort=SortOption.DUE_DATE)
        assert TodoWorkspace(config).filters.state.sort_option == SortOption.DUE_DATE

    def test_state_survives_restart(self, config, todo_path, today):
        workspace = TodoWorkspace(config, todo_path)
        workspace.load_tasks()
        workspace.filters.set_project_filter("Work")
        workspace.projects.toggle_project_pin("Home", True)
        workspace.save_state()

        reopened = TodoWorkspace(config)
        assert reopened.todo_file.path == todo_path
        assert reopened.filters.state.view == ProjectView("Work")
        assert reopened.registry.pinned == ["Home"]
        assert reopened.registry.known == ["Home", "Work"]
        assert [task.description.split()[0] for task in reopened.visible_tasks(today)] == ["Draft"]

    def test_task_at_position(self, config, todo_path, today):
        workspace = TodoWorkspace(config, todo_path)

        assert workspace.task_at(1, today).priority == "A"
        assert workspace.task_at(0, today) is None
        assert workspace.task_at(99, today) is None

    def test_new_task_line_uses_view_defaults(self, config, todo_path, today):
        workspace = TodoWorkspace(config, todo_path)
        assert workspace.new_task_line("Plain", today=today) == "2025-08-03 Plain"

        workspace.filters.set_quick_filter("today")
        assert workspace.new_task_line("Due now", today=today) == "2025-08-03 Due now due:2025-08-03"

        workspace.filters.set_quick_filter("Work")
        assert workspace.new_task_line("Memo", project="Home", today=today) == "2025-08-03 Memo +Home"
        assert workspace.new_task_line("Memo", today=today) == "2025-08-03 Memo +Work"

    def test_counts(self, config, todo_path, today):
        assert TodoWorkspace(config, todo_path).counts(today)["all"] == 4
