"""Tests for vault change notifications."""

from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from task_hub.store import TaskStore
from task_hub.watcher import ChangeKind, VaultEventHandler, VaultWatcher


class TestVaultEventHandler:
    """Test event translation and filtering."""

    def setup_method(self):
        self.events = []

    def make_handler(self, storage):
        return VaultEventHandler(storage, self.events.append)

    def test_markdown_events(self, storage, vault):
        handler = self.make_handler(storage)

        handler.on_created(FileCreatedEvent(str(vault / "new.md")))
        handler.on_modified(FileModifiedEvent(str(vault / "work" / "projects.md")))
        handler.on_deleted(FileDeletedEvent(str(vault / "inbox.md")))

        assert [(e.kind, e.ref.id) for e in self.events] == [
            (ChangeKind.CREATED, "new.md"),
            (ChangeKind.MODIFIED, "work/projects.md"),
            (ChangeKind.DELETED, "inbox.md"),
        ]

    def test_ignored_paths(self, storage, vault):
        handler = self.make_handler(storage)

        handler.on_modified(FileModifiedEvent(str(vault / "notes.txt")))
        handler.on_modified(FileModifiedEvent(str(vault / ".obsidian" / "hidden.md")))
        handler.on_modified(DirModifiedEvent(str(vault / "work")))
        handler.on_created(FileCreatedEvent(str(vault / ".inbox.md.abc.tmp")))

        assert self.events == []

    def test_move_is_delete_then_create(self, storage, vault):
        handler = self.make_handler(storage)

        handler.on_moved(FileMovedEvent(str(vault / "inbox.md"), str(vault / "work" / "inbox.md")))

        assert [(e.kind, e.ref.id) for e in self.events] == [
            (ChangeKind.DELETED, "inbox.md"),
            (ChangeKind.CREATED, "work/inbox.md"),
        ]


class TestVaultWatcher:
    """Test store refresh on change events."""

    def test_event_refreshes_store(self, storage, vault):
        store = TaskStore(storage, workers=1)
        seen = []
        watcher = VaultWatcher(store, listener=seen.append)
        store.tasks()

        (vault / "new.md").write_text("- [ ] From the watcher\n", encoding="utf-8")
        watcher.handler.on_created(FileCreatedEvent(str(vault / "new.md")))

        assert [e.ref.id for e in seen] == ["new.md"]
        assert store.scan_count == 2
        assert not store.is_stale
        assert any(t.text == "From the watcher" for t in store.tasks())

    def test_start_and_stop(self, storage):
        watcher = VaultWatcher(TaskStore(storage))

        with watcher:
            assert watcher.observer is not None
            assert watcher.observer.is_alive()
        assert watcher.observer is None
