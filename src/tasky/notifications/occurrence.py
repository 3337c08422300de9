# src/tasky/notifications/occurrence.py

from __future__ import annotations

"""
Next-occurrence resolution for display and ordering.

Pure functions: `now` is always passed in, nothing reads the clock.
All instants are naive local wall-clock datetimes.
"""

import datetime as dt
from collections.abc import Callable

from ..tasks.task_models import DailyTask, TaskDefinition, WeeklyTask, sunday_weekday


def _time_of_day(instant: dt.datetime) -> dt.time:
    return dt.time(instant.hour, instant.minute, instant.second)


def resolve_next_occurrence(task: TaskDefinition, now: dt.datetime) -> dt.datetime:
    """
    Next concrete instant at which `task` is due, relative to `now`.

    - single (and anything unknown): due_at as is, never rolled forward
    - daily: today at due_at's time, or tomorrow if that already passed
    - weekly: first day in the effective weekday set, starting today; today
      only counts if its time has not passed yet
    """
    due_at = task.due_at

    if isinstance(task, DailyTask):
        candidate = dt.datetime.combine(now.date(), _time_of_day(due_at))
        if candidate < now:
            candidate += dt.timedelta(days=1)
        return candidate

    if isinstance(task, WeeklyTask):
        weekdays = task.effective_weekdays()
        today = now.date()
        today_weekday = sunday_weekday(now)

        # 0..7 inclusive: a full week plus today's weekday again, for when
        # this week's occurrence today has already passed.
        for offset in range(8):
            day = (today_weekday + offset) % 7
            if day not in weekdays:
                continue
            candidate = dt.datetime.combine(today + dt.timedelta(days=offset), _time_of_day(due_at))
            if offset == 0 and candidate < now:
                continue
            return candidate

        return due_at

    return due_at


def occurrence_sort_key(now: dt.datetime) -> Callable[[TaskDefinition], dt.datetime]:
    """Key function ordering tasks by their next occurrence."""

    def key(task: TaskDefinition) -> dt.datetime:
        return resolve_next_occurrence(task, now)

    return key
