"""
Query Engine for Task Hub

Filters and sorts a snapshot of tasks. Queries are described by an
immutable QueryParams value; the functions here hold no state, so the caller
owns the current filters and simply re-runs ``query`` when they change.
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .task import Task
from .utils.datetime import days_from, local_today, parse_task_date


ALL = "All"

WEEK_DAYS = 7


class QuickDateFilter(Enum):
    """Due-date buckets relative to today"""
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    OVERDUE = "overdue"


class SortKey(Enum):
    """Primary sort keys"""
    CREATED = "Created"
    DUE = "Due"
    PRIORITY = "Priority"
    STATUS = "Status"


PRIORITY_RANKS = {
    "high": 0,
    "medium": 1,
    "low": 2,
}

STATUS_RANKS = {
    "open": 0,
    "in progress": 1,
    "complete": 2,
    "canceled": 3,
    "cancelled": 3,
}

UNRANKED_PRIORITY = 3
UNRANKED_STATUS = 4


def priority_rank(priority: Optional[str]) -> int:
    """Rank a priority; unrecognized values sort last."""
    return PRIORITY_RANKS.get((priority or "").lower(), UNRANKED_PRIORITY)


def status_rank(status: Optional[str]) -> int:
    """Rank a status; unrecognized values sort last."""
    return STATUS_RANKS.get((status or "").lower(), UNRANKED_STATUS)


def _date_key(value: Optional[str]) -> Tuple:
    # Parseable dates first, chronologically; missing or unparseable after
    parsed = parse_task_date(value)
    if parsed is None:
        return (1,)
    return (0, parsed)


@dataclass(frozen=True)
class QueryParams:
    """Filter and sort settings for a task query."""
    status: str = ALL
    priority: str = ALL
    quick: QuickDateFilter = QuickDateFilter.ALL
    sort: SortKey = SortKey.DUE
    due_only: bool = False

    def with_changes(self, **changes) -> "QueryParams":
        """Return a copy with some settings replaced."""
        return replace(self, **changes)


def matches_quick_filter(task: Task, quick: QuickDateFilter, today: date) -> bool:
    """Check a task's due date against a quick date filter."""
    if quick == QuickDateFilter.ALL:
        return True

    due = parse_task_date(task.due)
    if due is None:
        return False

    if quick == QuickDateFilter.TODAY:
        return due == today
    elif quick == QuickDateFilter.WEEK:
        # Half-open window [today, today + 7)
        return today <= due < days_from(today, WEEK_DAYS)
    elif quick == QuickDateFilter.OVERDUE:
        return due < today

    return False


def matches(task: Task, params: QueryParams, today: date) -> bool:
    """Evaluate all filters of ``params`` against a task."""
    if params.status != ALL and task.status != params.status:
        return False
    if params.priority != ALL and task.priority != params.priority:
        return False
    if params.due_only and not task.due:
        return False
    return matches_quick_filter(task, params.quick, today)


def filter_tasks(tasks: Iterable[Task], params: QueryParams, today: Optional[date] = None) -> List[Task]:
    """Keep the tasks matching every filter in ``params``."""
    today = today or local_today()
    return [task for task in tasks if matches(task, params, today)]


def sort_key_for(sort: SortKey):
    """Build the key function for a primary sort key.

    The document id is always the secondary key so ties order the same
    way on every run.
    """
    if sort == SortKey.CREATED:
        return lambda t: (_date_key(t.created), t.document_id)
    elif sort == SortKey.DUE:
        return lambda t: (_date_key(t.due), t.document_id)
    elif sort == SortKey.PRIORITY:
        return lambda t: (priority_rank(t.priority), t.document_id)
    elif sort == SortKey.STATUS:
        return lambda t: (status_rank(t.status), t.document_id)

    return lambda t: t.document_id


def sort_tasks(tasks: Iterable[Task], sort: SortKey) -> List[Task]:
    """Return tasks in a stable order for ``sort``."""
    return sorted(tasks, key=sort_key_for(sort))


def query(tasks: Iterable[Task], params: QueryParams, today: Optional[date] = None) -> List[Task]:
    """Filter then sort a task snapshot."""
    return sort_tasks(filter_tasks(tasks, params, today), params.sort)


def parse_quick_filter(value: str) -> QuickDateFilter:
    """Parse a quick filter name (case-insensitive)."""
    try:
        return QuickDateFilter(value.lower())
    except ValueError:
        choices = ", ".join(q.value for q in QuickDateFilter)
        raise ValueError(f"Unknown quick filter '{value}' (use one of: {choices})")


def parse_sort_key(value: str) -> SortKey:
    """Parse a sort key name (case-insensitive)."""
    for key in SortKey:
        if key.value.lower() == value.lower():
            return key
    choices = ", ".join(k.value for k in SortKey)
    raise ValueError(f"Unknown sort key '{value}' (use one of: {choices})")
