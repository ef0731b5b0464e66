"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Ensure src directory is in Python path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from task_hub.config import Config, ConfigModel  # noqa: E402
from task_hub.storage import VaultStorage  # noqa: E402


PROJECTS_NOTE = """# Projects

- [ ] Write report @due(2024-01-12) @priority(High) @project(Q1)
Some prose that is not a task.
  * [x] Call Bob @due(2024-03-01) @person(Bob) @person(Alice)
- [ ] Plan offsite @status(In Progress) @created(2024-01-02)
"""

INBOX_NOTE = "- [ ] Buy milk @priority(Low)\r\n- [X] Pay rent @closed(2024-01-05)\r\n"


@pytest.fixture(autouse=True)
def reset_config():
    """Each test starts without a cached configuration."""
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def vault(tmp_path):
    """A small vault with two notes, a nested folder and a hidden folder."""
    root = tmp_path / "vault"
    (root / "work").mkdir(parents=True)
    (root / ".obsidian").mkdir()

    (root / "work" / "projects.md").write_text(PROJECTS_NOTE, encoding="utf-8")
    (root / "inbox.md").write_bytes(INBOX_NOTE.encode("utf-8"))
    (root / "empty.md").write_text("# Nothing to do here\n", encoding="utf-8")
    (root / "notes.txt").write_text("- [ ] Not markdown\n", encoding="utf-8")
    (root / ".obsidian" / "hidden.md").write_text("- [ ] Hidden\n", encoding="utf-8")
    return root


@pytest.fixture
def storage(vault):
    return VaultStorage(vault)


@pytest.fixture
def config(vault):
    return ConfigModel(vault_dir=str(vault), scan_workers=2)
