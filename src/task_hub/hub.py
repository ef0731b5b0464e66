"""Task Hub core facade: scan, query and edit tasks in a vault."""

import logging
import re
from datetime import date
from typing import Iterable, List, Optional, Union

from .config import ConfigModel
from .mutation import FieldValue, LineMismatch, TaskField, apply_field_change, parse_task_field
from .query_engine import QueryParams, query
from .storage import VaultStorage
from .store import TaskStore
from .task import Task

logger = logging.getLogger(__name__)

# Splits text into lines while keeping each separator as its own item
LINE_WITH_SEP_RE = re.compile(r"(\r?\n)")


class TaskHub:
    """Entry point used by the CLI and the watcher.

    Owns the vault storage and the task store; queries are pure functions
    of a task snapshot and a QueryParams value.
    """

    def __init__(self, config: ConfigModel, storage: Optional[VaultStorage] = None):
        self.config = config
        self.storage = storage or VaultStorage(config.vault_path)
        self.store = TaskStore(self.storage, workers=config.scan_workers)

    def scan_all(self) -> List[Task]:
        """Rescan every document and return the fresh snapshot."""
        self.store.refresh()
        return self.store.tasks()

    def tasks(self) -> List[Task]:
        """Return the current snapshot, rescanning only if it is stale."""
        return self.store.tasks()

    def default_params(self) -> QueryParams:
        return self.config.query_params()

    def query(self, tasks: Iterable[Task], params: QueryParams, today: Optional[date] = None) -> List[Task]:
        """Filter and sort tasks; ``show_due_only`` is always enforced."""
        if self.config.show_due_only and not params.due_only:
            params = params.with_changes(due_only=True)
        return query(tasks, params, today)

    def find_task(self, document_id: str, line_number: int) -> Optional[Task]:
        return self.store.find(document_id, line_number)

    def apply_field_change(self, task: Task, field: Union[str, TaskField], new_value: FieldValue,
                           today: Optional[date] = None) -> str:
        """Rewrite the line a task came from with one field changed.

        The document is read, the single line recomputed and the whole
        document written back atomically. The in-memory snapshot is never
        patched; it is invalidated so the next read rescans.

        Returns:
            The new line text

        Raises:
            ReadError: If the document cannot be read
            LineMismatch: If the line changed or is no longer a checklist line
            ValueError: If the value cannot be written into the line
            WriteError: If the document cannot be written
        """
        field = parse_task_field(field)
        ref = self.storage.get_document(task.document_id)

        try:
            text = self.storage.read_document(ref)
            parts = LINE_WITH_SEP_RE.split(text)
            # Even indexes hold line content, odd indexes the separators
            lines = parts[0::2]

            try:
                new_line = apply_field_change(lines, task.line_number, field, new_value, today=today,
                                              expected_line=task.raw_line or None)
            except LineMismatch as e:
                e.document_id = task.document_id
                raise

            parts[2 * (task.line_number - 1)] = new_line
            self.storage.write_document(ref, "".join(parts))
        finally:
            self.store.invalidate()

        logger.info(f"Updated {task.location}: {field.value} -> {new_value!r}")
        return new_line
