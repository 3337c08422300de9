# src/tasky/notifications/triggers.py

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

APP_TITLE = "Tasky Reminder"


@dataclass(frozen=True, slots=True)
class DateTrigger:
    """Fires once at `at`."""

    at: dt.datetime

    def next_fire_after(self, instant: dt.datetime) -> dt.datetime | None:
        return self.at if self.at > instant else None


@dataclass(frozen=True, slots=True)
class DailyTrigger:
    """Fires every day at hour:minute."""

    hour: int
    minute: int

    def next_fire_after(self, instant: dt.datetime) -> dt.datetime:
        candidate = dt.datetime.combine(instant.date(), dt.time(self.hour, self.minute))
        if candidate <= instant:
            candidate += dt.timedelta(days=1)
        return candidate


@dataclass(frozen=True, slots=True)
class WeeklyTrigger:
    """
    Fires every week on `weekday` at hour:minute.

    `weekday` follows the platform convention: 1=Sunday .. 7=Saturday.
    """

    weekday: int
    hour: int
    minute: int

    def next_fire_after(self, instant: dt.datetime) -> dt.datetime:
        target = (self.weekday - 1) % 7
        today = instant.isoweekday() % 7
        ahead = (target - today) % 7
        candidate = dt.datetime.combine(
            instant.date() + dt.timedelta(days=ahead), dt.time(self.hour, self.minute)
        )
        if candidate <= instant:
            candidate += dt.timedelta(days=7)
        return candidate


TriggerSpec = DateTrigger | DailyTrigger | WeeklyTrigger


@dataclass(frozen=True, slots=True)
class NotificationContent:
    title: str
    body: str
    sound: bool = True


def reminder_content(task_title: str, lead_minutes: int = 10) -> NotificationContent:
    return NotificationContent(
        title=APP_TITLE,
        body=f'"{task_title}" is due in {lead_minutes} minutes!',
    )


@dataclass(slots=True)
class ScheduledNotification:
    """One live registration as reported by a registrar."""

    identifier: str
    trigger: TriggerSpec
    content: NotificationContent
    next_fire_at: dt.datetime | None = None


def describe_trigger(trigger: TriggerSpec) -> str:
    if isinstance(trigger, DateTrigger):
        return f"once at {trigger.at:%Y-%m-%d %H:%M}"
    if isinstance(trigger, DailyTrigger):
        return f"daily at {trigger.hour:02d}:{trigger.minute:02d}"
    return f"weekly on day {trigger.weekday} at {trigger.hour:02d}:{trigger.minute:02d}"
