"""Checklist task extraction for Task Hub."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .annotations import decode_annotations
from .storage import DocumentRef, ReadError, VaultStorage
from .task import Priority, Task, default_status

logger = logging.getLogger(__name__)


# Indent, bullet and opening bracket | mark | closing bracket and spacing | body
CHECKLIST_RE = re.compile(r"^(\s*[-*]\s+\[)( |x|X)(\]\s+)(.*)$")
LINE_SPLIT_RE = re.compile(r"\r?\n")

CHECKED_MARK = "x"
UNCHECKED_MARK = " "


@dataclass
class ChecklistLine:
    """A line split into its checklist parts."""
    prefix: str
    mark: str
    separator: str
    body: str

    @property
    def checked(self) -> bool:
        return self.mark.lower() == CHECKED_MARK

    def render(self, mark: Optional[str] = None, body: Optional[str] = None) -> str:
        """Rebuild the line, optionally replacing the mark and body."""
        return "".join((
            self.prefix,
            self.mark if mark is None else mark,
            self.separator,
            self.body if body is None else body,
        ))


def match_checklist_line(line: str) -> Optional[ChecklistLine]:
    """Split a checklist line, or return None if the line is not one."""
    m = CHECKLIST_RE.match(line)
    if not m:
        return None
    return ChecklistLine(prefix=m.group(1), mark=m.group(2), separator=m.group(3), body=m.group(4))


def split_lines(text: str) -> List[str]:
    """Split document text into lines on LF or CRLF."""
    return LINE_SPLIT_RE.split(text)


def parse_task_line(line: str, document_id: str, line_number: int) -> Optional[Task]:
    """Parse one line into a Task.

    Returns:
        Task, or None if the line is not a checklist line
    """
    checklist = match_checklist_line(line)
    if checklist is None:
        return None

    parsed = decode_annotations(checklist.body.strip())

    return Task(
        document_id=document_id,
        line_number=line_number,
        text=parsed.text,
        checked=checklist.checked,
        status=parsed.status or default_status(checklist.checked),
        priority=parsed.priority or Priority.MEDIUM.value,
        created=parsed.created or None,
        due=parsed.due or None,
        closed=parsed.closed or None,
        project=parsed.project or None,
        people=parsed.people,
        extra=parsed.extra,
        raw_line=line,
    )


def scan_document(document_id: str, lines: Iterable[str]) -> List[Task]:
    """Extract every task of a document in line order."""
    tasks = []
    for i, line in enumerate(lines, start=1):
        task = parse_task_line(line, document_id, i)
        if task:
            tasks.append(task)
    return tasks


def _scan_ref(storage: VaultStorage, ref: DocumentRef) -> List[Task]:
    try:
        text = storage.read_document(ref)
    except ReadError as e:
        logger.warning(f"Skipping unreadable document {ref.id}: {e}")
        return []
    return scan_document(ref.id, split_lines(text))


def scan_collection(storage: VaultStorage, workers: int = 4) -> List[Task]:
    """Extract tasks from every document in the vault.

    Documents are read concurrently but results are concatenated in
    document-list order, then line order. An unreadable document
    contributes no tasks and does not abort the scan.
    """
    refs = storage.list_documents()

    if workers > 1 and len(refs) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            per_document = list(executor.map(lambda ref: _scan_ref(storage, ref), refs))
    else:
        per_document = [_scan_ref(storage, ref) for ref in refs]

    tasks = [task for document_tasks in per_document for task in document_tasks]
    logger.debug(f"Scanned {len(refs)} documents, found {len(tasks)} tasks")
    return tasks
