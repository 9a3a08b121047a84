"""Tests for core task logic."""

from datetime import date, timedelta

import pytest

from keeper.core.recurrence import RecurrenceRule, SundayOrdinal
from keeper.core.tasks import (
    SortOrder,
    Task,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    filter_overdue,
    filter_tasks,
    new_task,
    reconcile,
    reschedule,
    sort_tasks,
    toggle_completion,
)


# Fixtures
@pytest.fixture
def today():
    return date(2024, 3, 1)


@pytest.fixture
def sample_tasks(today):
    """Sample tasks covering one-time and recurring scenarios."""
    return [
        Task(
            id="1",
            title="Water the lawn",
            due_date=date(2024, 1, 7),
            recurrence=RecurrenceRule.weekly_sunday(),
            category=TaskCategory.GARDENING,
        ),
        Task(
            id="2",
            title="File expense report",
            due_date=today - timedelta(days=3),
            category=TaskCategory.OFFICE,
            priority=TaskPriority.HIGH,
        ),
        Task(
            id="3",
            title="Inspect boiler",
            due_date=date(2024, 1, 14),
            recurrence=RecurrenceRule.monthly_nth_sunday(SundayOrdinal.SECOND),
            status=TaskStatus.COMPLETED,
            category=TaskCategory.BUILDING,
        ),
        Task(
            id="4",
            title="Clean gutters",
            due_date=today + timedelta(days=2),
            recurrence=RecurrenceRule.weekly_sunday(),
            priority=TaskPriority.LOW,
        ),
        Task(
            id="5",
            title="Replace smoke alarm battery",
            description="Hallway and kitchen",
            due_date=today - timedelta(days=10),
            status=TaskStatus.COMPLETED,
        ),
    ]


class TestTask:
    def test_defaults(self):
        task = Task(title="Test", due_date=date(2024, 1, 1))
        assert task.status is TaskStatus.PENDING
        assert task.recurrence == RecurrenceRule.one_time()
        assert task.category is TaskCategory.HOUSE
        assert task.priority is TaskPriority.MEDIUM
        assert task.id

    def test_ids_are_unique(self):
        a = Task(title="A", due_date=date(2024, 1, 1))
        b = Task(title="B", due_date=date(2024, 1, 1))
        assert a.id != b.id

    def test_is_lapsed_recurring_past_due(self, today):
        task = Task(title="T", due_date=today - timedelta(days=1), recurrence=RecurrenceRule.weekly_sunday())
        assert task.is_lapsed(today) is True

    def test_is_lapsed_due_today(self, today):
        task = Task(title="T", due_date=today, recurrence=RecurrenceRule.weekly_sunday())
        assert task.is_lapsed(today) is False

    def test_one_time_never_lapses(self, today):
        task = Task(title="T", due_date=today - timedelta(days=30))
        assert task.is_lapsed(today) is False

    def test_to_dict(self):
        task = Task(
            id="abc",
            title="Inspect boiler",
            due_date=date(2024, 1, 14),
            recurrence=RecurrenceRule.monthly_nth_sunday(2),
            category=TaskCategory.BUILDING,
        )
        assert task.to_dict() == {
            "id": "abc",
            "title": "Inspect boiler",
            "description": "",
            "category": "Building Maintenance",
            "dueDate": "2024-01-14",
            "status": "Pending",
            "priority": "medium",
            "recurrence": {"type": "monthly-nth-sunday", "ordinal": "second"},
        }

    def test_from_dict(self):
        data = {
            "id": "abc",
            "title": "Water plants",
            "description": "Balcony",
            "category": "Gardening Maintenance",
            "dueDate": "2024-01-07",
            "status": "Completed",
            "priority": "high",
            "recurrence": {"type": "one-time"},
        }
        task = Task.from_dict(data)
        assert task.id == "abc"
        assert task.due_date == date(2024, 1, 7)
        assert task.status is TaskStatus.COMPLETED
        assert task.priority is TaskPriority.HIGH
        assert task.category is TaskCategory.GARDENING
        assert task.recurrence == RecurrenceRule.one_time()

    def test_from_dict_minimal(self):
        task = Task.from_dict(
            {"id": "x", "title": "Bare", "dueDate": "2024-05-05", "status": "Pending", "recurrence": {"type": "one-time"}}
        )
        assert task.status is TaskStatus.PENDING
        assert task.recurrence == RecurrenceRule.one_time()
        assert task.description == ""

    def test_from_dict_requires_recurrence(self):
        with pytest.raises(KeyError):
            Task.from_dict({"id": "x", "title": "Lost rule", "dueDate": "2024-05-05", "status": "Pending"})

    def test_from_dict_requires_status(self):
        with pytest.raises(KeyError):
            Task.from_dict(
                {"id": "x", "title": "No status", "dueDate": "2024-05-05", "recurrence": {"type": "weekly-sunday"}}
            )

    def test_from_dict_rejects_bad_date(self):
        with pytest.raises(ValueError):
            Task.from_dict({"id": "x", "title": "Bad", "dueDate": "05/05/2024"})

    def test_from_dict_rejects_bad_status(self):
        with pytest.raises(ValueError):
            Task.from_dict({"id": "x", "title": "Bad", "dueDate": "2024-05-05", "status": "Done"})

    @pytest.mark.parametrize(
        "field, value",
        [("description", None), ("title", 42), ("id", ["a"])],
    )
    def test_from_dict_rejects_non_string_text(self, field, value):
        data = {
            "id": "x",
            "title": "Water",
            "description": "",
            "dueDate": "2024-05-05",
            "status": "Pending",
            "recurrence": {"type": "one-time"},
        }
        data[field] = value
        with pytest.raises(ValueError, match=field):
            Task.from_dict(data)


class TestNewTask:
    def test_one_time_keeps_given_date(self, today):
        task = new_task("Dentist", today, due_date=date(2024, 3, 20))
        assert task.due_date == date(2024, 3, 20)
        assert task.status is TaskStatus.PENDING

    def test_one_time_requires_date(self, today):
        with pytest.raises(ValueError):
            new_task("Dentist", today)

    def test_recurring_computes_date(self, today):
        task = new_task("Mow", today, recurrence=RecurrenceRule.weekly_sunday())
        assert task.due_date == date(2024, 3, 3)

    def test_recurring_ignores_supplied_date(self, today):
        task = new_task(
            "Mow",
            today,
            recurrence=RecurrenceRule.weekly_sunday(),
            due_date=date(2023, 6, 6),
        )
        assert task.due_date == date(2024, 3, 3)

    def test_monthly_creation(self, today):
        task = new_task("Boiler", today, recurrence=RecurrenceRule.monthly_nth_sunday(SundayOrdinal.THIRD))
        assert task.due_date == date(2024, 3, 17)

    def test_extra_fields(self, today):
        task = new_task(
            "Report",
            today,
            due_date=today,
            category=TaskCategory.OFFICE,
            priority=TaskPriority.HIGH,
            description="Q1",
        )
        assert task.category is TaskCategory.OFFICE
        assert task.priority is TaskPriority.HIGH
        assert task.description == "Q1"


class TestReconcile:
    def test_stale_weekly_task(self, today):
        task = Task(title="Water", due_date=date(2024, 1, 7), recurrence=RecurrenceRule.weekly_sunday())
        [result] = reconcile([task], today)
        assert result.due_date == date(2024, 3, 3)
        assert result.due_date.weekday() == 6
        assert result.status is TaskStatus.PENDING

    def test_completed_recurring_reset_to_pending(self, sample_tasks, today):
        result = reconcile(sample_tasks, today)
        boiler = result[2]
        assert boiler.status is TaskStatus.PENDING
        assert boiler.due_date == date(2024, 3, 10)

    def test_one_time_untouched(self, sample_tasks, today):
        result = reconcile(sample_tasks, today)
        assert result[1] is sample_tasks[1]
        assert result[4] is sample_tasks[4]
        assert result[4].status is TaskStatus.COMPLETED

    def test_future_recurring_untouched(self, sample_tasks, today):
        result = reconcile(sample_tasks, today)
        assert result[3] is sample_tasks[3]

    def test_preserves_order(self, sample_tasks, today):
        result = reconcile(sample_tasks, today)
        assert [t.id for t in result] == ["1", "2", "3", "4", "5"]

    def test_does_not_mutate_input(self, sample_tasks, today):
        reconcile(sample_tasks, today)
        assert sample_tasks[0].due_date == date(2024, 1, 7)
        assert sample_tasks[2].status is TaskStatus.COMPLETED

    def test_idempotent(self, sample_tasks, today):
        once = reconcile(sample_tasks, today)
        twice = reconcile(once, today)
        assert twice == once

    def test_recurring_dates_not_before_today(self, sample_tasks, today):
        for task in reconcile(sample_tasks, today):
            if task.is_recurring:
                assert task.due_date >= today

    def test_empty(self, today):
        assert reconcile([], today) == []


class TestToggleCompletion:
    def test_one_time_completes(self, today):
        task = Task(title="T", due_date=today)
        result = toggle_completion(task, today)
        assert result.status is TaskStatus.COMPLETED
        assert result.due_date == today

    def test_one_time_reopens(self, today):
        task = Task(title="T", due_date=today, status=TaskStatus.COMPLETED)
        assert toggle_completion(task, today).status is TaskStatus.PENDING

    def test_recurring_advances_and_stays_pending(self):
        task = Task(title="T", due_date=date(2024, 1, 14), recurrence=RecurrenceRule.weekly_sunday())
        result = toggle_completion(task, date(2024, 1, 14))
        assert result.due_date == date(2024, 1, 21)
        assert result.status is TaskStatus.PENDING

    def test_recurring_completed_early(self):
        task = Task(
            title="T",
            due_date=date(2024, 1, 14),
            recurrence=RecurrenceRule.monthly_nth_sunday(SundayOrdinal.SECOND),
        )
        result = toggle_completion(task, date(2024, 1, 10))
        assert result.due_date == date(2024, 2, 11)

    def test_does_not_mutate_input(self, today):
        task = Task(title="T", due_date=today)
        toggle_completion(task, today)
        assert task.status is TaskStatus.PENDING


class TestReschedule:
    def test_one_time_keeps_submitted_date(self, today):
        task = Task(title="T", due_date=date(2025, 1, 1))
        assert reschedule(task, today) is task

    def test_recurring_recomputed_from_submitted_date(self, today):
        task = Task(title="T", due_date=date(2024, 3, 10), recurrence=RecurrenceRule.weekly_sunday())
        assert reschedule(task, today).due_date == date(2024, 3, 17)

    def test_recurring_with_past_date(self, today):
        task = Task(
            title="T",
            due_date=date(2023, 5, 5),
            recurrence=RecurrenceRule.monthly_nth_sunday(SundayOrdinal.FIRST),
        )
        assert reschedule(task, today).due_date == date(2024, 3, 3)


class TestFilterTasks:
    def test_no_filters(self, sample_tasks):
        assert filter_tasks(sample_tasks) == sample_tasks

    def test_by_category(self, sample_tasks):
        result = filter_tasks(sample_tasks, category=TaskCategory.OFFICE)
        assert [t.id for t in result] == ["2"]

    def test_by_status(self, sample_tasks):
        result = filter_tasks(sample_tasks, status=TaskStatus.COMPLETED)
        assert [t.id for t in result] == ["3", "5"]

    def test_search_title_case_insensitive(self, sample_tasks):
        result = filter_tasks(sample_tasks, search="BOILER")
        assert [t.id for t in result] == ["3"]

    def test_search_description(self, sample_tasks):
        result = filter_tasks(sample_tasks, search="kitchen")
        assert [t.id for t in result] == ["5"]

    def test_combined(self, sample_tasks):
        result = filter_tasks(sample_tasks, category=TaskCategory.HOUSE, status=TaskStatus.PENDING)
        assert [t.id for t in result] == ["4"]


class TestSortTasks:
    def test_due_ascending(self, sample_tasks):
        result = sort_tasks(sample_tasks)
        assert [t.id for t in result] == ["1", "3", "5", "2", "4"]

    def test_due_descending(self, sample_tasks):
        result = sort_tasks(sample_tasks, SortOrder.DUE_DESC)
        assert [t.id for t in result] == ["4", "2", "5", "3", "1"]

    def test_priority_descending_is_stable(self, sample_tasks):
        result = sort_tasks(sample_tasks, SortOrder.PRIORITY_DESC)
        assert [t.id for t in result] == ["2", "1", "3", "5", "4"]


class TestFilterOverdue:
    def test_only_pending_one_time(self, sample_tasks, today):
        result = filter_overdue(sample_tasks, today)
        assert [t.id for t in result] == ["2"]
