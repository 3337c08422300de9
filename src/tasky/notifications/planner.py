# src/tasky/notifications/planner.py

from __future__ import annotations

"""
Trigger planning.

plan_triggers() turns a task's schedule into the concrete platform triggers
that fire LEAD_TIME before each occurrence. register_plan() hands them to the
registrar one at a time; a rejected trigger is logged and skipped.
"""

import datetime as dt
import logging
from collections.abc import Iterable, Sequence

from ..core.ports import NotificationRegistrar
from ..tasks.task_models import (
    RecurrenceKind,
    TaskDefinition,
    normalize_weekdays,
    sunday_weekday,
    task_weekdays,
)
from .triggers import (
    DailyTrigger,
    DateTrigger,
    NotificationContent,
    TriggerSpec,
    WeeklyTrigger,
    describe_trigger,
)

logger = logging.getLogger(__name__)

LEAD_TIME = dt.timedelta(minutes=10)


def plan_triggers(
        title: str,
        due_at: dt.datetime,
        kind: RecurrenceKind | str | None,
        weekdays: Iterable[int] | None,
        now: dt.datetime,
        *,
        lead_time: dt.timedelta = LEAD_TIME,
) -> list[TriggerSpec]:
    """
    Triggers to register for one task, in registration order.

    - weekly: one WeeklyTrigger per effective weekday, ascending, weekday
      shifted to the platform's 1=Sunday convention
    - daily: one DailyTrigger
    - single: one DateTrigger if it is still in the future, else nothing
    """
    recurrence = kind if isinstance(kind, RecurrenceKind) else RecurrenceKind.from_db(kind)
    trigger_at = due_at - lead_time

    if recurrence == RecurrenceKind.WEEKLY:
        days = normalize_weekdays(weekdays, fallback=sunday_weekday(due_at))
        specs: list[TriggerSpec] = [
            WeeklyTrigger(weekday=day + 1, hour=trigger_at.hour, minute=trigger_at.minute)
            for day in days
        ]
    elif recurrence == RecurrenceKind.DAILY:
        specs = [DailyTrigger(hour=trigger_at.hour, minute=trigger_at.minute)]
    elif trigger_at > now:
        specs = [DateTrigger(at=trigger_at)]
    else:
        logger.debug("Single task %r: trigger %s already passed, nothing to plan", title, trigger_at)
        specs = []

    return specs


def plan_task_triggers(
        task: TaskDefinition,
        now: dt.datetime,
        *,
        lead_time: dt.timedelta = LEAD_TIME,
) -> list[TriggerSpec]:
    return plan_triggers(
        task.title,
        task.due_at,
        task.kind,
        task_weekdays(task),
        now,
        lead_time=lead_time,
    )


async def register_plan(
        registrar: NotificationRegistrar,
        specs: Sequence[TriggerSpec],
        content: NotificationContent,
) -> list[str]:
    """
    Register `specs` sequentially, in order.

    Returns the identifiers of the registrations that succeeded (possibly
    none). Never raises.
    """
    identifiers: list[str] = []
    for spec in specs:
        try:
            identifier = await registrar.schedule(spec, content)
        except Exception:
            logger.exception("schedule failed trigger=%s", describe_trigger(spec))
            continue
        identifiers.append(identifier)
        logger.debug("Scheduled %s id=%s", describe_trigger(spec), identifier)
    return identifiers
