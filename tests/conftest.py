"""Pytest configuration and shared fixtures."""

import sys
from datetime import date
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from todotxt_manager.config import ConfigModel  # noqa: E402
from todotxt_manager.parser import parse_text  # noqa: E402
from todotxt_manager.storage import TodoFile  # noqa: E402


SAMPLE_TODO = """\
(A) 2025-08-01 Call plumber @phone +Home due:2025-08-03
(B) 2025-08-01 Draft report @desk +Work due:2025-08-10
2025-08-02 Buy milk @errands
Read novel +Inbox
x 2025-08-02 2025-08-01 File taxes +Home pri:A
2025-07-01 Old idea +Archived origProj:Work
"""


@pytest.fixture
def today():
    """A fixed Sunday."""
    return date(2025, 8, 3)


@pytest.fixture
def sample_tasks():
    return parse_text(SAMPLE_TODO)


@pytest.fixture
def todo_path(tmp_path):
    path = tmp_path / "todo.txt"
    path.write_text(SAMPLE_TODO, encoding="utf-8")
    return path


@pytest.fixture
def todo_file(todo_path):
    return TodoFile(todo_path)


@pytest.fixture
def config(tmp_path):
    return ConfigModel(data_dir=str(tmp_path / "data"))
