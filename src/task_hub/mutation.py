"""Single-field task edits that rewrite the originating line."""

import logging
from datetime import date
from enum import Enum
from typing import List, Optional, Sequence, Union

from fuzzywuzzy import fuzz, process

from .annotations import decode_annotations, encode_annotations
from .extractor import CHECKED_MARK, UNCHECKED_MARK, match_checklist_line
from .task import Priority, TaskStatus, default_status, is_closed_status
from .utils.datetime import format_task_date, local_today

logger = logging.getLogger(__name__)


class TaskField(Enum):
    """Editable task fields."""
    TEXT = "text"
    CREATED = "created"
    DUE = "due"
    CLOSED = "closed"
    STATUS = "status"
    PRIORITY = "priority"
    PROJECT = "project"
    PEOPLE = "people"


FieldValue = Union[None, str, List[str]]


class LineMismatch(Exception):
    """Raised when the target line is no longer a checklist line."""

    def __init__(self, message: str, line_number: int, document_id: Optional[str] = None):
        self.line_number = line_number
        self.document_id = document_id
        super().__init__(message)


def parse_task_field(value: Union[str, TaskField]) -> TaskField:
    """Parse a field name (case-insensitive, ``person`` means ``people``)."""
    if isinstance(value, TaskField):
        return value
    name = value.strip().lower()
    if name == "person":
        name = TaskField.PEOPLE.value
    try:
        return TaskField(name)
    except ValueError:
        choices = ", ".join(f.value for f in TaskField)
        raise ValueError(f"Unknown field '{value}' (use one of: {choices})")


def apply_field_change(lines: Sequence[str], line_number: int, field: Union[str, TaskField],
                       new_value: FieldValue, today: Optional[date] = None,
                       expected_line: Optional[str] = None) -> str:
    """Compute the new text of a task line after changing one field.

    Args:
        lines: Current document lines
        line_number: 1-based index of the task line
        field: Field to change
        new_value: New value; None or "" removes the annotation
        today: Day used when a closed date is stamped (defaults to today)
        expected_line: Line text the task was scanned from, if known

    Returns:
        The rewritten line. No other line is affected.

    Raises:
        LineMismatch: If the line is missing, no longer a checklist line or
            differs from ``expected_line``
        ValueError: If the new value cannot be written into a single line
            that decodes back to the same fields
    """
    field = parse_task_field(field)

    if line_number < 1 or line_number > len(lines):
        raise LineMismatch(f"Line {line_number} is out of range", line_number)

    line = lines[line_number - 1]
    if expected_line is not None and line != expected_line:
        raise LineMismatch(f"Line {line_number} has changed since the last scan: {line!r}", line_number)

    checklist = match_checklist_line(line)
    if checklist is None:
        raise LineMismatch(f"Line {line_number} is no longer a task: {line!r}", line_number)

    parsed = decode_annotations(checklist.body.strip())
    parsed.set_field(field.value, new_value)

    if field == TaskField.STATUS and is_closed_status(parsed.status) and not parsed.closed:
        # One-way: reopening a task never clears the closed date
        parsed.closed = format_task_date(today or local_today())

    # Status drives the checkbox, never the other way round
    status = parsed.status or default_status(checklist.checked)
    mark = CHECKED_MARK if is_closed_status(status) else UNCHECKED_MARK

    body = encode_annotations(parsed)
    if decode_annotations(body) != parsed:
        # e.g. an unterminated "@key(" in the text swallowing the next token
        raise ValueError(f"Line {line_number} cannot be rewritten without altering the task: {body!r}")

    return checklist.render(mark=mark, body=body)


def replace_line(lines: List[str], line_number: int, new_line: str) -> List[str]:
    """Return a copy of ``lines`` with one line replaced."""
    updated = list(lines)
    updated[line_number - 1] = new_line
    return updated


KNOWN_VALUES = {
    TaskField.STATUS: [s.value for s in TaskStatus],
    TaskField.PRIORITY: [p.value for p in Priority],
}


def suggest_values(field: Union[str, TaskField], value: str, limit: int = 2) -> List[str]:
    """Suggest recognized values close to an unrecognized one.

    Returns an empty list when the value is already recognized or the field
    has no fixed vocabulary.
    """
    choices = KNOWN_VALUES.get(parse_task_field(field))
    if not choices or not value or value in choices:
        return []

    close_matches = process.extractBests(value, choices, scorer=fuzz.ratio, score_cutoff=60, limit=limit)
    return [match[0] for match in close_matches]
