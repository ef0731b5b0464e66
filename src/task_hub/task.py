"""Task data model for Task Hub."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .utils.datetime import parse_task_date


class TaskStatus(Enum):
    """Task status states."""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    COMPLETE = "Complete"
    CANCELED = "Canceled"


class Priority(Enum):
    """Task priority levels."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# Statuses that close a task: checkbox checked, closed date stamped.
CLOSED_STATUSES = {TaskStatus.COMPLETE.value, TaskStatus.CANCELED.value, "Cancelled"}


def default_status(checked: bool) -> str:
    """Status implied by the checkbox when no ``@status`` token is present."""
    return TaskStatus.COMPLETE.value if checked else TaskStatus.OPEN.value


def is_closed_status(status: Optional[str]) -> bool:
    """Check if a status value closes the task."""
    return status in CLOSED_STATUSES


@dataclass
class Task:
    """A checklist line extracted from a document.

    Tasks are value records rebuilt on every scan. ``document_id`` and
    ``line_number`` identify the originating line for as long as the
    document is not edited above it.
    """

    document_id: str
    line_number: int
    text: str
    checked: bool = False

    status: str = TaskStatus.OPEN.value
    priority: str = Priority.MEDIUM.value

    # Raw annotation dates; may be unparseable
    created: Optional[str] = None
    due: Optional[str] = None
    closed: Optional[str] = None

    project: Optional[str] = None
    people: List[str] = field(default_factory=list)

    # Unrecognized @key(value) tokens, kept for re-serialization
    extra: List[Tuple[str, str]] = field(default_factory=list)

    raw_line: str = ""

    @property
    def location(self) -> str:
        """``path:line`` form used by the CLI."""
        return f"{self.document_id}:{self.line_number}"

    @property
    def due_date(self) -> Optional[date]:
        return parse_task_date(self.due)

    @property
    def created_date(self) -> Optional[date]:
        return parse_task_date(self.created)

    @property
    def closed_date(self) -> Optional[date]:
        return parse_task_date(self.closed)

    def is_closed(self) -> bool:
        """Check if the task is complete or canceled."""
        return is_closed_status(self.status)

    def is_overdue(self, today: date) -> bool:
        """Check if the task is due before ``today``."""
        due = self.due_date
        return due is not None and due < today

    def to_dict(self) -> Dict[str, Any]:
        """Convert the Task to a plain dictionary."""
        return {
            "document_id": self.document_id,
            "line_number": self.line_number,
            "checked": self.checked,
            "text": self.text,
            "status": self.status,
            "priority": self.priority,
            "created": self.created,
            "due": self.due,
            "closed": self.closed,
            "project": self.project,
            "people": list(self.people),
            "extra": [list(pair) for pair in self.extra],
        }
