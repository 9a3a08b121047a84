"""Shared workflow layer between the CLI and storage.

Each function loads the collection through a TaskStore, applies one user
action with a `today` captured by the caller, saves, and returns the result.
"""

import logging
from dataclasses import replace
from datetime import date

from .adapters.json_store import JsonTaskStore
from .config import Config
from .core.recurrence import RecurrenceRule
from .core.tasks import (
    Task,
    TaskCategory,
    TaskPriority,
    new_task,
    reconcile,
    reschedule,
    toggle_completion,
)
from .ports.task_store import TaskStore

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
    """Raised when a task id does not match exactly one task."""

    pass


def get_store(config: Config) -> JsonTaskStore:
    """Resolve the task store from config."""
    return JsonTaskStore(config.tasks_path)


def find_task(tasks: list[Task], task_id: str) -> Task:
    """Look up a task by full id or unique id prefix."""
    for t in tasks:
        if t.id == task_id:
            return t

    matches = [t for t in tasks if t.id.startswith(task_id)] if task_id else []
    if not matches:
        raise TaskNotFoundError(f"No task with id {task_id!r}")
    if len(matches) > 1:
        raise TaskNotFoundError(f"Task id {task_id!r} is ambiguous ({len(matches)} matches)")
    return matches[0]


def _replace_task(tasks: list[Task], updated: Task) -> list[Task]:
    return [updated if t.id == updated.id else t for t in tasks]


def open_tasks(store: TaskStore, today: date) -> list[Task]:
    """Load all tasks, reconcile lapsed recurring ones, and save the result."""
    loaded = store.load()
    tasks = reconcile(loaded, today)

    moved = 0
    for before, after in zip(loaded, tasks):
        if after is not before:
            moved += 1
            logger.debug(f"Rescheduled {after.title!r}: {before.due_date} -> {after.due_date}")
    if moved:
        logger.info(f"Reconciled {moved} lapsed recurring task(s) as of {today}")

    store.save(tasks)
    return tasks


def add_task(
    store: TaskStore,
    today: date,
    title: str,
    recurrence: RecurrenceRule | None = None,
    due_date: date | None = None,
    description: str = "",
    category: TaskCategory = TaskCategory.HOUSE,
    priority: TaskPriority = TaskPriority.MEDIUM,
) -> Task:
    """Create a task and append it to the collection."""
    task = new_task(
        title,
        today,
        recurrence=recurrence,
        due_date=due_date,
        description=description,
        category=category,
        priority=priority,
    )
    tasks = open_tasks(store, today)
    store.save([*tasks, task])
    logger.info(f"Added {task.title!r} due {task.due_date} ({task.recurrence.describe()})")
    return task


def edit_task(
    store: TaskStore,
    today: date,
    task_id: str,
    title: str | None = None,
    description: str | None = None,
    category: TaskCategory | None = None,
    priority: TaskPriority | None = None,
    recurrence: RecurrenceRule | None = None,
    due_date: date | None = None,
) -> Task:
    """
    Apply an edit to one task.

    Plain field changes leave the schedule alone. When the recurrence or the
    due date is submitted and the resulting rule repeats, the due date is
    recomputed from the submitted (or current) date instead of taken as-is.
    """
    tasks = open_tasks(store, today)
    task = find_task(tasks, task_id)

    changes = {
        name: value
        for name, value in {
            "title": title,
            "description": description,
            "category": category,
            "priority": priority,
            "recurrence": recurrence,
            "due_date": due_date,
        }.items()
        if value is not None
    }
    updated = replace(task, **changes)

    if recurrence is not None or due_date is not None:
        updated = reschedule(updated, today)
        if updated.is_recurring:
            logger.info(f"Recomputed {updated.title!r} due date: {task.due_date} -> {updated.due_date}")

    store.save(_replace_task(tasks, updated))
    return updated


def toggle_task(store: TaskStore, today: date, task_id: str) -> Task:
    """Toggle completion; recurring tasks advance to their next occurrence."""
    tasks = open_tasks(store, today)
    task = find_task(tasks, task_id)
    updated = toggle_completion(task, today)
    if updated.is_recurring:
        logger.info(f"Completed {task.title!r}, next due {updated.due_date}")
    store.save(_replace_task(tasks, updated))
    return updated


def delete_task(store: TaskStore, today: date, task_id: str) -> Task:
    """Remove a task from the collection."""
    tasks = open_tasks(store, today)
    task = find_task(tasks, task_id)
    store.save([t for t in tasks if t.id != task.id])
    logger.info(f"Deleted {task.title!r}")
    return task
