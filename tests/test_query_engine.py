"""Tests for filtering and sorting tasks."""

from datetime import date

import pytest

from task_hub.query_engine import (
    QueryParams,
    QuickDateFilter,
    SortKey,
    filter_tasks,
    matches_quick_filter,
    parse_quick_filter,
    parse_sort_key,
    priority_rank,
    query,
    sort_tasks,
    status_rank,
)
from task_hub.task import Task


TODAY = date(2024, 1, 10)


def make_task(text="Task", document_id="a.md", line_number=1, **kwargs):
    return Task(document_id=document_id, line_number=line_number, text=text, **kwargs)


class TestQuickDateFilter:
    """Test due-date buckets."""

    def test_week_window_is_half_open(self):
        def in_week(due):
            return matches_quick_filter(make_task(due=due), QuickDateFilter.WEEK, TODAY)

        assert in_week("2024-01-10")
        assert in_week("2024-01-16")
        assert not in_week("2024-01-17")
        assert not in_week("2024-01-09")

    def test_today(self):
        assert matches_quick_filter(make_task(due="2024-01-10"), QuickDateFilter.TODAY, TODAY)
        assert matches_quick_filter(make_task(due="01-10-2024"), QuickDateFilter.TODAY, TODAY)
        assert not matches_quick_filter(make_task(due="2024-01-11"), QuickDateFilter.TODAY, TODAY)

    def test_overdue(self):
        assert matches_quick_filter(make_task(due="2024-01-09"), QuickDateFilter.OVERDUE, TODAY)
        assert not matches_quick_filter(make_task(due="2024-01-10"), QuickDateFilter.OVERDUE, TODAY)

    @pytest.mark.parametrize("due", [None, "someday", "2024/01/10", "2024-02-30"])
    def test_unparseable_due_only_matches_all(self, due):
        task = make_task(due=due)

        assert matches_quick_filter(task, QuickDateFilter.ALL, TODAY)
        for quick in (QuickDateFilter.TODAY, QuickDateFilter.WEEK, QuickDateFilter.OVERDUE):
            assert not matches_quick_filter(task, quick, TODAY)


class TestFilterTasks:
    """Test composed filters."""

    def setup_method(self):
        self.tasks = [
            make_task("a", status="Open", priority="High", due="2024-01-10"),
            make_task("b", status="Open", priority="Low", due="2024-01-12"),
            make_task("c", status="Complete", priority="High", due="2024-01-01"),
            make_task("d", status="In Progress", priority="High"),
        ]

    def texts(self, params):
        return [t.text for t in filter_tasks(self.tasks, params, TODAY)]

    def test_all_keeps_everything(self):
        assert self.texts(QueryParams()) == ["a", "b", "c", "d"]

    def test_status_and_priority_compose(self):
        assert self.texts(QueryParams(status="Open", priority="High")) == ["a"]

    def test_exact_match(self):
        assert self.texts(QueryParams(status="open")) == []

    def test_quick_filter_composes(self):
        assert self.texts(QueryParams(priority="High", quick=QuickDateFilter.WEEK)) == ["a"]
        assert self.texts(QueryParams(quick=QuickDateFilter.OVERDUE)) == ["c"]

    def test_due_only(self):
        assert self.texts(QueryParams(due_only=True)) == ["a", "b", "c"]


class TestSortTasks:
    """Test multi-key sorting."""

    def test_priority_order(self):
        tasks = [make_task(priority=p, line_number=i) for i, p in enumerate(["Low", "High", "Medium", "High"])]
        result = sort_tasks(tasks, SortKey.PRIORITY)

        assert [t.priority for t in result] == ["High", "High", "Medium", "Low"]
        # Stable for identical document ids
        assert [t.line_number for t in result] == [1, 3, 2, 0]

    def test_priority_ties_break_on_document_id(self):
        tasks = [
            make_task(priority="High", document_id="zeta.md"),
            make_task(priority="Low", document_id="alpha.md"),
            make_task(priority="High", document_id="beta.md"),
        ]
        result = sort_tasks(tasks, SortKey.PRIORITY)

        assert [t.document_id for t in result] == ["beta.md", "zeta.md", "alpha.md"]

    def test_unrecognized_priority_sorts_last(self):
        tasks = [make_task(priority="Urgent"), make_task(priority="low")]

        assert [t.priority for t in sort_tasks(tasks, SortKey.PRIORITY)] == ["low", "Urgent"]

    def test_status_order(self):
        statuses = ["Blocked", "Cancelled", "Complete", "In Progress", "Open", "Canceled"]
        tasks = [make_task(status=s) for s in statuses]
        result = [t.status for t in sort_tasks(tasks, SortKey.STATUS)]

        assert result == ["Open", "In Progress", "Complete", "Cancelled", "Canceled", "Blocked"]

    def test_due_dates_missing_and_unparseable_last(self):
        tasks = [
            make_task("none", document_id="a.md"),
            make_task("bad", due="soon", document_id="b.md"),
            make_task("late", due="2024-03-01", document_id="c.md"),
            make_task("us", due="02-01-2024", document_id="d.md"),
        ]
        result = [t.text for t in sort_tasks(tasks, SortKey.DUE)]

        assert result == ["us", "late", "none", "bad"]

    def test_created_sort(self):
        tasks = [
            make_task("b", created="2024-01-05"),
            make_task("a", created="2023-12-31"),
            make_task("c"),
        ]

        assert [t.text for t in sort_tasks(tasks, SortKey.CREATED)] == ["a", "b", "c"]

    def test_ranks(self):
        assert priority_rank("HIGH") == 0
        assert priority_rank(None) == 3
        assert status_rank("in progress") == 1
        assert status_rank("") == 4


class TestQuery:
    """Test the combined query entry point."""

    def test_filter_then_sort(self):
        tasks = [
            make_task("b", priority="Low", due="2024-01-11", document_id="b.md"),
            make_task("a", priority="High", due="2024-01-15", document_id="a.md"),
            make_task("x", priority="High", due="2024-02-15", document_id="c.md"),
        ]
        params = QueryParams(quick=QuickDateFilter.WEEK, sort=SortKey.PRIORITY)

        assert [t.text for t in query(tasks, params, TODAY)] == ["a", "b"]

    def test_params_are_immutable(self):
        params = QueryParams()
        changed = params.with_changes(status="Open")

        assert params.status == "All"
        assert changed.status == "Open"
        with pytest.raises(AttributeError):
            params.status = "Open"

    def test_parse_names(self):
        assert parse_quick_filter("Week") == QuickDateFilter.WEEK
        assert parse_sort_key("priority") == SortKey.PRIORITY
        with pytest.raises(ValueError):
            parse_sort_key("size")
