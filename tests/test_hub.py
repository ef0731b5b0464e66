"""Tests for the TaskHub facade."""

from datetime import date

import pytest

from task_hub.hub import TaskHub
from task_hub.mutation import LineMismatch
from task_hub.query_engine import QueryParams, QuickDateFilter, SortKey
from task_hub.storage import WriteError


TODAY = date(2024, 1, 10)


class TestTaskHub:
    """Test scanning, querying and editing through the facade."""

    def test_scan_all(self, config):
        hub = TaskHub(config)
        tasks = hub.scan_all()

        assert [t.text for t in tasks] == ["Buy milk", "Pay rent", "Write report", "Call Bob", "Plan offsite"]
        pay_rent = tasks[1]
        assert pay_rent.checked and pay_rent.status == "Complete"

    def test_query(self, config):
        hub = TaskHub(config)
        params = QueryParams(quick=QuickDateFilter.WEEK, sort=SortKey.PRIORITY)

        assert [t.text for t in hub.query(hub.scan_all(), params, TODAY)] == ["Write report"]

    def test_show_due_only_is_enforced(self, config):
        config.show_due_only = True
        hub = TaskHub(config)
        tasks = hub.query(hub.scan_all(), QueryParams(sort=SortKey.DUE), TODAY)

        assert [t.text for t in tasks] == ["Write report", "Call Bob"]

    def test_apply_field_change_rewrites_one_line(self, config, vault):
        hub = TaskHub(config)
        task = hub.find_task("inbox.md", 1)

        new_line = hub.apply_field_change(task, "status", "Complete", today=TODAY)

        assert new_line == "- [x] Buy milk @closed(2024-01-10) @status(Complete) @priority(Low)"
        content = (vault / "inbox.md").read_bytes().decode("utf-8")
        assert content == (
            "- [x] Buy milk @closed(2024-01-10) @status(Complete) @priority(Low)\r\n"
            "- [X] Pay rent @closed(2024-01-05)\r\n"
        )

    def test_store_rescans_after_edit(self, config):
        hub = TaskHub(config)
        task = hub.find_task("work/projects.md", 5)
        hub.apply_field_change(task, "priority", "High")

        assert hub.store.is_stale
        updated = hub.find_task("work/projects.md", 5)
        assert updated.priority == "High"
        assert updated.people == ["Bob", "Alice"]

    def test_in_memory_task_is_not_patched(self, config):
        hub = TaskHub(config)
        task = hub.find_task("inbox.md", 1)
        hub.apply_field_change(task, "priority", "High")

        assert task.priority == "Low"

    def test_line_mismatch_after_external_edit(self, config, vault):
        hub = TaskHub(config)
        task = hub.find_task("work/projects.md", 3)

        (vault / "work" / "projects.md").write_text("# Rewritten\n\nNo tasks here\n", encoding="utf-8")

        with pytest.raises(LineMismatch) as exc_info:
            hub.apply_field_change(task, "status", "Complete")
        assert exc_info.value.document_id == "work/projects.md"
        assert (vault / "work" / "projects.md").read_text(encoding="utf-8") == "# Rewritten\n\nNo tasks here\n"

    def test_write_error_surfaces(self, config, monkeypatch):
        hub = TaskHub(config)
        task = hub.find_task("inbox.md", 1)

        def failing_write(ref, text):
            raise WriteError("disk full", ref.id)

        monkeypatch.setattr(hub.storage, "write_document", failing_write)

        with pytest.raises(WriteError):
            hub.apply_field_change(task, "priority", "High")
        assert hub.store.is_stale

    def test_another_task_moved_onto_the_line(self, config, vault):
        hub = TaskHub(config)
        task = hub.find_task("inbox.md", 1)
        moved = "- [ ] Inserted above\r\n" + (vault / "inbox.md").read_bytes().decode("utf-8")
        (vault / "inbox.md").write_bytes(moved.encode("utf-8"))

        with pytest.raises(LineMismatch) as exc_info:
            hub.apply_field_change(task, "status", "Complete")
        assert exc_info.value.document_id == "inbox.md"
        assert (vault / "inbox.md").read_bytes().decode("utf-8") == moved

    def test_line_break_in_value_is_refused(self, config, vault):
        hub = TaskHub(config)
        task = hub.find_task("inbox.md", 1)
        before = (vault / "inbox.md").read_bytes()

        with pytest.raises(ValueError):
            hub.apply_field_change(task, "project", "Home\nSecond")
        assert (vault / "inbox.md").read_bytes() == before
        assert len(hub.scan_all()) == 5
