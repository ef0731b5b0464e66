"""Vault change notifications for Task Hub, built on watchdog."""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .storage import DocumentRef, VaultStorage
from .store import TaskStore

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Kinds of document change."""
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class ChangeEvent:
    """A change to one document in the vault."""
    kind: ChangeKind
    ref: DocumentRef


ChangeListener = Callable[[ChangeEvent], None]


class VaultEventHandler(FileSystemEventHandler):
    """Translate watchdog events into ChangeEvents for markdown documents.

    Directories, hidden paths and non-markdown files are ignored. A move is
    reported as a deletion of the old path followed by a creation of the
    new one.
    """

    def __init__(self, storage: VaultStorage, listener: ChangeListener):
        super().__init__()
        self.storage = storage
        self.listener = listener

    def _emit(self, kind: ChangeKind, path) -> None:
        ref = self.storage.ref_for_path(Path(str(path)))
        if ref is None:
            return
        logger.debug(f"Document {kind.value}: {ref.id}")
        self.listener(ChangeEvent(kind, ref))

    def on_created(self, event):
        if not event.is_directory:
            self._emit(ChangeKind.CREATED, event.src_path)

    def on_modified(self, event):
        if not event.is_directory:
            self._emit(ChangeKind.MODIFIED, event.src_path)

    def on_deleted(self, event):
        if not event.is_directory:
            self._emit(ChangeKind.DELETED, event.src_path)

    def on_moved(self, event):
        if event.is_directory:
            return
        self._emit(ChangeKind.DELETED, event.src_path)
        self._emit(ChangeKind.CREATED, event.dest_path)


class VaultWatcher:
    """Keep a TaskStore in step with the vault.

    Every document event invalidates the store and triggers a refresh;
    overlapping refreshes are coalesced by the store itself.
    """

    def __init__(self, store: TaskStore, listener: Optional[ChangeListener] = None):
        self.store = store
        self.listener = listener
        self.handler = VaultEventHandler(store.storage, self.handle_event)
        self.observer = None

    def handle_event(self, event: ChangeEvent) -> None:
        """Refresh the store in response to a document change."""
        self.store.invalidate()
        if self.listener:
            self.listener(event)
        self.store.refresh()

    def start(self) -> None:
        """Start watching the vault directory recursively."""
        if self.observer is not None:
            return
        self.observer = Observer()
        self.observer.schedule(self.handler, str(self.store.storage.vault_dir), recursive=True)
        self.observer.start()
        logger.info(f"Watching {self.store.storage.vault_dir}")

    def stop(self) -> None:
        """Stop watching and wait for the observer thread."""
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join()
        self.observer = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False
