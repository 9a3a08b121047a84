"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum

from .recurrence import RecurrenceRule, next_due_date


class TaskStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class TaskCategory(Enum):
    OFFICE = "Office Work"
    HOUSE = "House Maintenance"
    GARDENING = "Gardening Maintenance"
    BUILDING = "Building Maintenance"


class TaskPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return {"low": 1, "medium": 2, "high": 3}[self.value]


class SortOrder(Enum):
    DUE_ASC = "due_asc"
    DUE_DESC = "due_desc"
    PRIORITY_DESC = "priority_desc"


@dataclass
class Task:
    """A tracked task, optionally repeating on Sundays."""

    title: str
    due_date: date
    recurrence: RecurrenceRule = field(default_factory=RecurrenceRule.one_time)
    status: TaskStatus = TaskStatus.PENDING
    description: str = ""
    category: TaskCategory = TaskCategory.HOUSE
    priority: TaskPriority = TaskPriority.MEDIUM
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def is_recurring(self) -> bool:
        return self.recurrence.is_recurring

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    def is_lapsed(self, today: date) -> bool:
        """Recurring and due strictly before today."""
        return self.is_recurring and self.due_date < today

    def to_dict(self) -> dict:
        """Serialize to the stored JSON record."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "dueDate": self.due_date.isoformat(),
            "status": self.status.value,
            "priority": self.priority.value,
            "recurrence": self.recurrence.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """
        Create Task from a stored JSON record.

        Raises KeyError or ValueError on malformed records.
        """
        for key in ("id", "title", "description"):
            if key in data and not isinstance(data[key], str):
                raise ValueError(f"{key} must be a string, got {type(data[key]).__name__}")
        return cls(
            id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            category=TaskCategory(data.get("category", TaskCategory.HOUSE.value)),
            due_date=date.fromisoformat(data["dueDate"]),
            status=TaskStatus(data["status"]),
            priority=TaskPriority(data.get("priority", TaskPriority.MEDIUM.value)),
            recurrence=RecurrenceRule.from_dict(data["recurrence"]),
        )


def new_task(
    title: str,
    today: date,
    recurrence: RecurrenceRule | None = None,
    due_date: date | None = None,
    **fields,
) -> Task:
    """
    Build a new pending task.

    Recurring tasks get a computed due date; any supplied date is ignored.
    One-time tasks must be given one.
    """
    recurrence = recurrence or RecurrenceRule.one_time()
    if recurrence.is_recurring:
        due_date = next_due_date(recurrence, None, today)
    elif due_date is None:
        raise ValueError("One-time tasks need a due date")
    return Task(title=title, due_date=due_date, recurrence=recurrence, **fields)


def reconcile(tasks: list[Task], today: date) -> list[Task]:
    """
    Bring every lapsed recurring task forward to its next occurrence.

    Returns a new list in the same order; untouched tasks are passed through
    as-is. Running it twice with the same `today` changes nothing the second
    time.
    """
    return [
        replace(
            t,
            due_date=next_due_date(t.recurrence, t.due_date, today),
            status=TaskStatus.PENDING,
        )
        if t.is_lapsed(today)
        else t
        for t in tasks
    ]


def toggle_completion(task: Task, today: date) -> Task:
    """
    Completion trigger.

    One-time tasks flip between pending and completed. Recurring tasks never
    stay completed: they move to their next occurrence and remain pending.
    """
    if task.is_recurring:
        return replace(
            task,
            due_date=next_due_date(task.recurrence, task.due_date, today),
            status=TaskStatus.PENDING,
        )
    if task.is_completed:
        return replace(task, status=TaskStatus.PENDING)
    return replace(task, status=TaskStatus.COMPLETED)


def reschedule(task: Task, today: date) -> Task:
    """
    Edit trigger: recompute a recurring task's due date from the submitted one.

    One-time tasks keep whatever date was submitted.
    """
    if not task.is_recurring:
        return task
    return replace(
        task,
        due_date=next_due_date(task.recurrence, task.due_date, today),
        status=TaskStatus.PENDING,
    )


def filter_tasks(
    tasks: list[Task],
    category: TaskCategory | None = None,
    status: TaskStatus | None = None,
    search: str | None = None,
) -> list[Task]:
    """Filter by category, status and a case-insensitive text search."""
    filtered = tasks
    if category is not None:
        filtered = [t for t in filtered if t.category is category]
    if status is not None:
        filtered = [t for t in filtered if t.status is status]
    if search:
        needle = search.lower()
        filtered = [
            t for t in filtered if needle in t.title.lower() or needle in t.description.lower()
        ]
    return filtered


def sort_tasks(tasks: list[Task], order: SortOrder = SortOrder.DUE_ASC) -> list[Task]:
    """Sort by due date or priority. Ties keep their original order."""
    match order:
        case SortOrder.DUE_ASC:
            return sorted(tasks, key=lambda t: t.due_date)
        case SortOrder.DUE_DESC:
            return sorted(tasks, key=lambda t: t.due_date, reverse=True)
        case SortOrder.PRIORITY_DESC:
            return sorted(tasks, key=lambda t: -t.priority.rank)
    raise ValueError(f"Unknown sort order: {order!r}")


def filter_overdue(tasks: list[Task], today: date) -> list[Task]:
    """Pending one-time tasks whose due date has passed."""
    return [t for t in tasks if not t.is_recurring and not t.is_completed and t.due_date < today]
