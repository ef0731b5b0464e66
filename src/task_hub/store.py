"""In-memory task snapshot for the whole vault."""

import logging
import threading
from typing import Callable, List, Optional

from .extractor import scan_collection
from .storage import VaultStorage
from .task import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """Holds the tasks of the last full scan.

    There is no incremental indexing: any change invalidates the snapshot
    and the next ``refresh`` rescans every document.

    ``refresh`` never runs twice at once. A refresh requested while one is
    in flight is coalesced into a single trailing refresh that starts as
    soon as the current one finishes, so change events are not lost.
    """

    def __init__(self, storage: VaultStorage, workers: int = 4,
                 on_refresh: Optional[Callable[[List[Task]], None]] = None):
        self.storage = storage
        self.workers = workers
        self.on_refresh = on_refresh

        self._tasks: List[Task] = []
        self._stale = True
        self._refresh_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._pending = False
        self.scan_count = 0

    @property
    def is_stale(self) -> bool:
        return self._stale

    def invalidate(self) -> None:
        """Mark the snapshot out of date."""
        self._stale = True

    def tasks(self) -> List[Task]:
        """Return the current snapshot, scanning first if it is stale."""
        if self._stale:
            self.refresh()
        return list(self._tasks)

    def refresh(self) -> bool:
        """Rescan the vault.

        Returns:
            True if this call performed the scan, False if it was folded
            into a refresh already in progress
        """
        with self._state_lock:
            if not self._refresh_lock.acquire(blocking=False):
                self._pending = True
                logger.debug("Refresh already in progress, scheduling a trailing refresh")
                return False
            self._pending = False

        try:
            while True:
                self._scan()
                with self._state_lock:
                    if not self._pending:
                        self._refresh_lock.release()
                        break
                    self._pending = False
        except BaseException:
            with self._state_lock:
                self._pending = False
                self._refresh_lock.release()
            raise

        return True

    def _scan(self) -> None:
        tasks = scan_collection(self.storage, workers=self.workers)
        self._tasks = tasks
        self._stale = False
        self.scan_count += 1
        logger.debug(f"Task store refreshed: {len(tasks)} tasks")
        if self.on_refresh:
            self.on_refresh(list(tasks))

    def find(self, document_id: str, line_number: int) -> Optional[Task]:
        """Find a task by its location in the current snapshot."""
        for task in self.tasks():
            if task.document_id == document_id and task.line_number == line_number:
                return task
        return None
