# src/tasky/tasks/task_api.py

from __future__ import annotations

"""
High-level reminder operations used by the front end.

Each operation drives the NotificationScheduler and then persists the trigger
blob it returns. Notification problems never block the store write; store
errors propagate to the caller.
"""

import datetime as dt
import logging
import uuid
from collections.abc import Iterable

from ..core.ports import ReminderRepo
from ..core.state import AppState
from ..notifications.occurrence import resolve_next_occurrence
from .task_models import (
    DailyTask,
    RecurrenceKind,
    Reminder,
    TaskDefinition,
    WeeklyTask,
    make_task,
    task_weekdays,
)

logger = logging.getLogger(__name__)

DAYS_SHORT = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def _require(state: AppState, reminder_id: str) -> Reminder:
    rem = state.store.get_reminder(reminder_id)
    if rem is None:
        raise KeyError(f"reminder not found: {reminder_id}")
    return rem


async def create_reminder(
    state: AppState,
    *,
    title: str,
    due_at: dt.datetime,
    recurrence: RecurrenceKind | str = RecurrenceKind.SINGLE,
    weekdays: Iterable[int] = (),
    icon: str | None = None,
    now: dt.datetime | None = None,
) -> Reminder:
    if not title or not title.strip():
        raise ValueError("title is required")

    task = make_task(
        id=str(uuid.uuid4()),
        title=title.strip(),
        due_at=due_at,
        kind=recurrence,
        weekdays=weekdays,
    )
    blob = await state.scheduler.on_create(task, now=now)

    try:
        state.store.add_reminder(
            reminder_id=task.id,
            title=task.title,
            due_at=task.due_at,
            recurrence=task.kind,
            weekdays=task_weekdays(task),
            icon=icon,
            trigger_blob=blob,
        )
    except Exception:
        # Do not leave live reminders behind for a task that was never saved.
        await state.scheduler.on_delete(task.id, blob)
        raise

    logger.info("Reminder created id=%s kind=%s", task.id, task.kind.value)
    return _require(state, task.id)


async def update_reminder(
    state: AppState,
    reminder_id: str,
    *,
    title: str,
    due_at: dt.datetime,
    recurrence: RecurrenceKind | str,
    weekdays: Iterable[int] = (),
    icon: str | None = None,
    now: dt.datetime | None = None,
) -> Reminder:
    """
    Replace a reminder's schedule.

    The old blob is always cancelled first. Completed reminders stay silent
    until they are re-opened.
    """
    existing = _require(state, reminder_id)
    if not title or not title.strip():
        raise ValueError("title is required")

    task = make_task(id=reminder_id, title=title.strip(), due_at=due_at, kind=recurrence, weekdays=weekdays)
    if existing.is_completed:
        blob = await state.scheduler.on_complete(reminder_id, existing.triggers)
    else:
        blob = await state.scheduler.on_update(task, existing.triggers, now=now)

    state.store.update_reminder(
        reminder_id,
        title=task.title,
        due_at=task.due_at,
        recurrence=task.kind,
        weekdays=task_weekdays(task),
        icon=icon,
        trigger_blob=blob,
    )
    logger.info("Reminder updated id=%s kind=%s", reminder_id, task.kind.value)
    return _require(state, reminder_id)


async def toggle_completed(state: AppState, reminder_id: str, *, now: dt.datetime | None = None) -> Reminder:
    rem = _require(state, reminder_id)
    completed = not rem.is_completed
    state.store.set_completed(reminder_id, completed)

    if completed:
        blob = await state.scheduler.on_complete(reminder_id, rem.triggers)
    else:
        blob = await state.scheduler.on_update(rem.task, rem.triggers, now=now)
    state.store.set_trigger_blob(reminder_id, blob)

    logger.info("Reminder id=%s completed=%s", reminder_id, completed)
    return _require(state, reminder_id)


async def delete_reminder(state: AppState, reminder_id: str) -> bool:
    rem = state.store.get_reminder(reminder_id)
    if rem is None:
        return False
    await state.scheduler.on_delete(reminder_id, rem.triggers)
    state.store.delete_reminder(reminder_id)
    logger.info("Reminder deleted id=%s", reminder_id)
    return True


async def reschedule_open_reminders(state: AppState, *, now: dt.datetime | None = None) -> int:
    """
    Re-register every open reminder, e.g. after the registrar lost its state
    on restart. Stale identifiers are cancelled best-effort first.
    """
    n = 0
    for rem in state.store.list_reminders(include_completed=False):
        blob = await state.scheduler.on_update(rem.task, rem.triggers, now=now)
        state.store.set_trigger_blob(rem.id, blob)
        n += 1
    logger.info("Rescheduled %d open reminder(s)", n)
    return n


# ---- read side ----

def sort_by_next_occurrence(reminders: Iterable[Reminder], now: dt.datetime) -> list[Reminder]:
    return sorted(reminders, key=lambda r: resolve_next_occurrence(r.task, now))


def list_reminders_sorted(repo: ReminderRepo, now: dt.datetime) -> list[Reminder]:
    return sort_by_next_occurrence(repo.list_reminders(), now)


def group_by_day(reminders: Iterable[Reminder], now: dt.datetime) -> list[tuple[dt.date, list[Reminder]]]:
    """
    Sections for the list view: one per calendar day of the next occurrence,
    in occurrence order.
    """
    groups: dict[dt.date, list[Reminder]] = {}
    for rem in sort_by_next_occurrence(reminders, now):
        day = resolve_next_occurrence(rem.task, now).date()
        groups.setdefault(day, []).append(rem)
    return list(groups.items())


def describe_repeat(task: TaskDefinition) -> str | None:
    """Short repeat label, e.g. "Daily" or "Weekly on Mon, Wed"."""
    if isinstance(task, DailyTask):
        return "Daily"
    if isinstance(task, WeeklyTask):
        return "Weekly on " + ", ".join(DAYS_SHORT[d] for d in task.effective_weekdays())
    return None


def section_title(day: dt.date, now: dt.datetime) -> str:
    if day == now.date():
        return "Today"
    if day == now.date() + dt.timedelta(days=1):
        return "Tomorrow"
    return day.strftime("%a, %b %d")

