# src/tasky/tasks/task_models.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import ClassVar

from ..notifications.registry import TriggerBlob, TriggerList

logger = logging.getLogger(__name__)

DEFAULT_ICON = "📝"


class RecurrenceKind(StrEnum):
    """How a task repeats."""

    SINGLE = "single"
    DAILY = "daily"
    WEEKLY = "weekly"

    @classmethod
    def from_db(cls, raw: str | None) -> RecurrenceKind:
        if not raw:
            return cls.SINGLE
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.SINGLE


def sunday_weekday(instant: datetime) -> int:
    """Weekday of `instant` with Sunday=0 .. Saturday=6."""
    return instant.isoweekday() % 7


def normalize_weekdays(weekdays: Iterable[object] | None, fallback: int) -> tuple[int, ...]:
    """
    Effective weekday set of a weekly task.

    - drops anything that is not an int in [0, 6]
    - removes duplicates, sorts ascending
    - returns (fallback,) when nothing valid is left
    """
    raw = list(weekdays or ())
    kept = [d for d in raw if isinstance(d, int) and not isinstance(d, bool) and 0 <= d <= 6]
    if len(kept) != len(raw):
        logger.debug("Dropped invalid weekdays: given=%s kept=%s", raw, kept)
    valid = sorted(set(kept))
    if not valid:
        return (fallback,)
    return tuple(valid)


@dataclass(frozen=True, slots=True)
class SingleTask:
    id: str
    title: str
    due_at: datetime

    kind: ClassVar[RecurrenceKind] = RecurrenceKind.SINGLE


@dataclass(frozen=True, slots=True)
class DailyTask:
    id: str
    title: str
    due_at: datetime

    kind: ClassVar[RecurrenceKind] = RecurrenceKind.DAILY


@dataclass(frozen=True, slots=True)
class WeeklyTask:
    id: str
    title: str
    due_at: datetime
    weekdays: tuple[int, ...] = ()

    kind: ClassVar[RecurrenceKind] = RecurrenceKind.WEEKLY

    def effective_weekdays(self) -> tuple[int, ...]:
        return normalize_weekdays(self.weekdays, fallback=sunday_weekday(self.due_at))


TaskDefinition = SingleTask | DailyTask | WeeklyTask


def make_task(
    *,
    id: str,
    title: str,
    due_at: datetime,
    kind: RecurrenceKind | str | None = None,
    weekdays: Iterable[int] | None = None,
) -> TaskDefinition:
    """Build the right task variant from flat fields; unknown kinds become single."""
    recurrence = kind if isinstance(kind, RecurrenceKind) else RecurrenceKind.from_db(kind)

    if recurrence == RecurrenceKind.DAILY:
        return DailyTask(id=id, title=title, due_at=due_at)
    if recurrence == RecurrenceKind.WEEKLY:
        return WeeklyTask(id=id, title=title, due_at=due_at, weekdays=tuple(weekdays or ()))
    return SingleTask(id=id, title=title, due_at=due_at)


def task_weekdays(task: TaskDefinition) -> tuple[int, ...]:
    """Weekday set as stored; empty for anything but weekly tasks."""
    if isinstance(task, WeeklyTask):
        return task.weekdays
    return ()


@dataclass(slots=True)
class Reminder:
    """A stored task together with its bookkeeping fields."""

    task: TaskDefinition
    is_completed: bool = False
    triggers: TriggerBlob = TriggerList()
    icon: str = DEFAULT_ICON
    created_at: datetime | None = None

    @property
    def id(self) -> str:
        return self.task.id
