"""Functional core - pure business logic with no I/O."""

from .recurrence import (
    InvalidRecurrenceError,
    RecurrenceError,
    RecurrenceKind,
    RecurrenceRule,
    SundayOrdinal,
    locate_nth_sunday,
    next_sunday_on_or_after,
    next_sunday_strictly_after,
    next_due_date,
    upcoming_occurrences,
)
from .tasks import (
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

__all__ = [
    # Recurrence
    "InvalidRecurrenceError",
    "RecurrenceError",
    "RecurrenceKind",
    "RecurrenceRule",
    "SundayOrdinal",
    "locate_nth_sunday",
    "next_sunday_on_or_after",
    "next_sunday_strictly_after",
    "next_due_date",
    "upcoming_occurrences",
    # Tasks
    "SortOrder",
    "Task",
    "TaskCategory",
    "TaskPriority",
    "TaskStatus",
    "filter_overdue",
    "filter_tasks",
    "new_task",
    "reconcile",
    "reschedule",
    "sort_tasks",
    "toggle_completion",
]
