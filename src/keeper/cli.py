"""Keeper CLI - Sunday-recurring task tracker."""

import json
import logging
import sys
from datetime import date
from typing import NoReturn

import click

from .adapters.json_store import TaskStoreError
from .config import load_config
from .core.recurrence import (
    InvalidRecurrenceError,
    RecurrenceError,
    RecurrenceKind,
    RecurrenceRule,
    SundayOrdinal,
    upcoming_occurrences,
)
from .core.tasks import (
    SortOrder,
    Task,
    TaskCategory,
    TaskPriority,
    TaskStatus,
    filter_overdue,
    filter_tasks,
    reconcile,
    sort_tasks,
)
from .workflows import (
    TaskNotFoundError,
    add_task,
    delete_task,
    edit_task,
    get_store,
    open_tasks,
    toggle_task,
)

DATE = click.DateTime(formats=["%Y-%m-%d"])
RECURRENCE_CHOICE = click.Choice([k.value for k in RecurrenceKind])
ORDINAL_CHOICE = click.Choice([o.label for o in SundayOrdinal])
CATEGORY_CHOICE = click.Choice([c.value for c in TaskCategory], case_sensitive=False)
PRIORITY_CHOICE = click.Choice([p.value for p in TaskPriority], case_sensitive=False)
STATUS_CHOICE = click.Choice([s.value for s in TaskStatus], case_sensitive=False)
SORT_CHOICE = click.Choice([o.value for o in SortOrder])

# Errors a command reports as "Error: ..." instead of a traceback
USER_ERRORS = (TaskStoreError, TaskNotFoundError, InvalidRecurrenceError, RecurrenceError, ValueError)


def _fail(e: Exception) -> NoReturn:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _build_rule(recurrence: str | None, ordinal: str | None) -> RecurrenceRule | None:
    """Turn --recurrence/--ordinal options into a rule (None if neither given)."""
    if recurrence is None:
        if ordinal is not None:
            recurrence = RecurrenceKind.MONTHLY_NTH_SUNDAY.value
        else:
            return None
    kind = RecurrenceKind(recurrence)
    return RecurrenceRule(kind, SundayOrdinal.from_label(ordinal) if ordinal else None)


def _serialize(t: Task, today: date) -> dict:
    data = t.to_dict()
    data["daysUntilDue"] = (t.due_date - today).days
    return data


def _format_task(t: Task, overdue: set[str]) -> str:
    check = "x" if t.is_completed else " "
    flag = " OVERDUE" if t.id in overdue else ""
    repeat = f" [{t.recurrence.describe()}]" if t.is_recurring else ""
    return f"[{check}] {t.id[:8]}  {t.due_date.isoformat()}  {t.title}{repeat}{flag}"


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--today", "today_override", type=DATE, help="Treat this date as today (YYYY-MM-DD)")
@click.pass_context
def main(ctx, debug: bool, today_override):
    """Keeper - Sunday-recurring task tracker."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )
    ctx.ensure_object(dict)
    config = load_config()
    ctx.obj["config"] = config
    ctx.obj["store"] = get_store(config)
    # Captured once so every task in this invocation shares the same boundary
    ctx.obj["today"] = today_override.date() if today_override else date.today()


@main.command("list")
@click.option("--category", type=CATEGORY_CHOICE, help="Only this category")
@click.option("--status", type=STATUS_CHOICE, help="Only this status")
@click.option("--search", help="Case-insensitive text in title or description")
@click.option("--sort", "sort_order", type=SORT_CHOICE, default=SortOrder.DUE_ASC.value, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_tasks(obj, category, status, search, sort_order, as_json: bool):
    """List tasks."""
    today = obj["today"]
    try:
        tasks = open_tasks(obj["store"], today)
    except TaskStoreError as e:
        _fail(e)

    shown = filter_tasks(
        tasks,
        category=TaskCategory(category) if category else None,
        status=TaskStatus(status) if status else None,
        search=search,
    )
    shown = sort_tasks(shown, SortOrder(sort_order))

    if as_json:
        click.echo(json.dumps([_serialize(t, today) for t in shown], indent=2))
        return

    if not shown:
        click.echo("No tasks.")
        return

    overdue = {t.id for t in filter_overdue(shown, today)}
    for t in shown:
        click.echo(_format_task(t, overdue))


@main.command()
@click.argument("title")
@click.option("--recurrence", type=RECURRENCE_CHOICE, help="How the task repeats")
@click.option("--ordinal", type=ORDINAL_CHOICE, help="Which Sunday, for monthly-nth-sunday")
@click.option("--due", type=DATE, help="Due date for one-time tasks (YYYY-MM-DD)")
@click.option("--description", default="", help="Longer description")
@click.option("--category", type=CATEGORY_CHOICE, help="Task category")
@click.option("--priority", type=PRIORITY_CHOICE, help="Task priority")
@click.pass_obj
def add(obj, title, recurrence, ordinal, due, description, category, priority):
    """Add a task."""
    config = obj["config"]
    try:
        rule = _build_rule(recurrence, ordinal)
        task = add_task(
            obj["store"],
            obj["today"],
            title,
            recurrence=rule,
            due_date=due.date() if due else None,
            description=description,
            category=TaskCategory(category) if category else config.default_category,
            priority=TaskPriority(priority.lower()) if priority else config.default_priority,
        )
    except USER_ERRORS as e:
        _fail(e)

    click.echo(f"Added {task.id[:8]}: {task.title} (due {task.due_date.isoformat()})")


@main.command()
@click.argument("task_id")
@click.option("--title", help="New title")
@click.option("--description", help="New description")
@click.option("--category", type=CATEGORY_CHOICE, help="New category")
@click.option("--priority", type=PRIORITY_CHOICE, help="New priority")
@click.option("--recurrence", type=RECURRENCE_CHOICE, help="New recurrence")
@click.option("--ordinal", type=ORDINAL_CHOICE, help="Which Sunday, for monthly-nth-sunday")
@click.option("--due", type=DATE, help="New due date (YYYY-MM-DD)")
@click.pass_obj
def edit(obj, task_id, title, description, category, priority, recurrence, ordinal, due):
    """Edit a task."""
    try:
        task = edit_task(
            obj["store"],
            obj["today"],
            task_id,
            title=title,
            description=description,
            category=TaskCategory(category) if category else None,
            priority=TaskPriority(priority.lower()) if priority else None,
            recurrence=_build_rule(recurrence, ordinal),
            due_date=due.date() if due else None,
        )
    except USER_ERRORS as e:
        _fail(e)

    click.echo(f"Updated {task.id[:8]}: {task.title} (due {task.due_date.isoformat()})")


@main.command()
@click.argument("task_id")
@click.pass_obj
def done(obj, task_id):
    """Toggle completion. Recurring tasks move to their next occurrence."""
    try:
        task = toggle_task(obj["store"], obj["today"], task_id)
    except USER_ERRORS as e:
        _fail(e)

    if task.is_recurring:
        click.echo(f"Done: {task.title}. Next due {task.due_date.isoformat()}")
    elif task.is_completed:
        click.echo(f"Completed: {task.title}")
    else:
        click.echo(f"Reopened: {task.title}")


@main.command()
@click.argument("task_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_obj
def delete(obj, task_id, yes: bool):
    """Delete a task."""
    if not yes:
        click.confirm(f"Delete task {task_id}?", abort=True)
    try:
        task = delete_task(obj["store"], obj["today"], task_id)
    except USER_ERRORS as e:
        _fail(e)

    click.echo(f"Deleted: {task.title}")


@main.command("reconcile")
@click.pass_obj
def reconcile_cmd(obj):
    """Move lapsed recurring tasks forward to today or later."""
    today = obj["today"]
    store = obj["store"]
    try:
        before = store.load()
    except TaskStoreError as e:
        _fail(e)

    after = reconcile(before, today)
    store.save(after)

    moved = [(b, a) for b, a in zip(before, after) if a is not b]
    if not moved:
        click.echo("Nothing to reconcile.")
        return
    for b, a in moved:
        click.echo(f"{a.title}: {b.due_date.isoformat()} -> {a.due_date.isoformat()}")
    click.echo(f"Reconciled {len(moved)} task(s).")


@main.command("next")
@click.option("--recurrence", type=RECURRENCE_CHOICE, default=RecurrenceKind.WEEKLY_SUNDAY.value, show_default=True)
@click.option("--ordinal", type=ORDINAL_CHOICE, help="Which Sunday, for monthly-nth-sunday")
@click.option("--count", type=click.IntRange(min=1), help="How many occurrences to show")
@click.pass_obj
def next_occurrences(obj, recurrence, ordinal, count):
    """Preview upcoming occurrences of a recurrence rule."""
    if count is None:
        count = obj["config"].upcoming_count
    try:
        rule = _build_rule(recurrence, ordinal)
        dates = upcoming_occurrences(rule, obj["today"], count)
    except USER_ERRORS as e:
        _fail(e)

    click.echo(f"{rule.describe()}:")
    for d in dates:
        click.echo(f"  {d.strftime('%a %Y-%m-%d')}")


if __name__ == "__main__":
    main()
