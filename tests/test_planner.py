# tests/test_planner.py

from __future__ import annotations

import datetime as dt

import pytest

from tasky.notifications.planner import LEAD_TIME, plan_task_triggers, plan_triggers, register_plan
from tasky.notifications.triggers import (
    DailyTrigger,
    DateTrigger,
    WeeklyTrigger,
    reminder_content,
)
from tasky.tasks.task_models import DailyTask, RecurrenceKind, SingleTask, WeeklyTask

from .conftest import WED_14
from .fakes import FakeRegistrar

WED_15 = dt.datetime(2025, 12, 17, 15, 0)
WED_10 = dt.datetime(2025, 12, 17, 10, 0)


def test_lead_time_is_ten_minutes() -> None:
    assert LEAD_TIME == dt.timedelta(minutes=10)


def test_single_in_future_yields_one_date_trigger() -> None:
    specs = plan_triggers("dentist", WED_15, RecurrenceKind.SINGLE, [], WED_14)
    assert specs == [DateTrigger(at=dt.datetime(2025, 12, 17, 14, 50))]


def test_single_in_past_yields_empty_plan() -> None:
    assert plan_triggers("dentist", WED_10, RecurrenceKind.SINGLE, [], WED_14) == []


def test_single_trigger_exactly_now_is_not_scheduled() -> None:
    due = WED_14 + LEAD_TIME
    assert plan_triggers("x", due, "single", [], WED_14) == []
    assert plan_triggers("x", due + dt.timedelta(seconds=1), "single", [], WED_14) != []


def test_single_ignores_weekdays() -> None:
    assert plan_triggers("x", WED_15, "single", [1, 2, 3], WED_14) == [
        DateTrigger(at=dt.datetime(2025, 12, 17, 14, 50))
    ]


def test_daily_yields_one_trigger_even_when_due_passed() -> None:
    specs = plan_triggers("meds", WED_10, RecurrenceKind.DAILY, [4, 5], WED_14)
    assert specs == [DailyTrigger(hour=9, minute=50)]


def test_lead_time_crosses_midnight_for_daily() -> None:
    due = dt.datetime(2025, 12, 17, 0, 5)
    assert plan_triggers("x", due, "daily", [], WED_14) == [DailyTrigger(hour=23, minute=55)]


def test_weekly_dedups_and_maps_to_platform_weekdays() -> None:
    specs = plan_triggers("gym", WED_15, RecurrenceKind.WEEKLY, [1, 3, 1, 5, 3], WED_14)
    assert specs == [
        WeeklyTrigger(weekday=2, hour=14, minute=50),
        WeeklyTrigger(weekday=4, hour=14, minute=50),
        WeeklyTrigger(weekday=6, hour=14, minute=50),
    ]


def test_weekly_drops_invalid_weekdays() -> None:
    specs = plan_triggers("gym", WED_15, RecurrenceKind.WEEKLY, [-1, 7, 10, 3], WED_14)
    assert specs == [WeeklyTrigger(weekday=4, hour=14, minute=50)]


@pytest.mark.parametrize("weekdays", [[], [-1, 7, 10], None])
def test_weekly_falls_back_to_due_weekday(weekdays) -> None:
    # due Friday 2025-12-19 -> weekday 5 -> platform 6
    due = dt.datetime(2025, 12, 19, 8, 0)
    specs = plan_triggers("gym", due, RecurrenceKind.WEEKLY, weekdays, WED_14)
    assert specs == [WeeklyTrigger(weekday=6, hour=7, minute=50)]


def test_weekly_sunday_and_saturday_map_to_1_and_7() -> None:
    specs = plan_triggers("x", WED_15, "weekly", [6, 0], WED_14)
    assert [s.weekday for s in specs] == [1, 7]


def test_unknown_kind_is_planned_as_single() -> None:
    assert plan_triggers("x", WED_15, "monthly", [], WED_14) == [
        DateTrigger(at=dt.datetime(2025, 12, 17, 14, 50))
    ]


def test_plan_task_triggers_uses_variant() -> None:
    assert plan_task_triggers(SingleTask(id="1", title="x", due_at=WED_15), WED_14) == [
        DateTrigger(at=dt.datetime(2025, 12, 17, 14, 50))
    ]
    assert plan_task_triggers(DailyTask(id="2", title="x", due_at=WED_15), WED_14) == [
        DailyTrigger(hour=14, minute=50)
    ]
    weekly = WeeklyTask(id="3", title="x", due_at=WED_15, weekdays=(0,))
    assert plan_task_triggers(weekly, WED_14) == [WeeklyTrigger(weekday=1, hour=14, minute=50)]


@pytest.mark.asyncio
async def test_register_plan_is_sequential_and_in_order() -> None:
    registrar = FakeRegistrar()
    specs = plan_triggers("gym", WED_15, "weekly", [5, 1, 3], WED_14)

    ids = await register_plan(registrar, specs, reminder_content("gym"))

    assert ids == ["id-1", "id-2", "id-3"]
    assert [arg for name, arg in registrar.calls if name == "schedule"] == specs


@pytest.mark.asyncio
async def test_register_plan_skips_failed_entries_and_continues() -> None:
    registrar = FakeRegistrar(fail_schedule=lambda t: isinstance(t, WeeklyTrigger) and t.weekday == 4)
    specs = plan_triggers("gym", WED_15, "weekly", [1, 3, 5], WED_14)

    ids = await register_plan(registrar, specs, reminder_content("gym"))

    assert registrar.call_names() == ["schedule", "schedule", "schedule"]
    assert ids == ["id-1", "id-2"]
    assert [s.trigger.weekday for s in registrar.scheduled.values()] == [2, 6]


@pytest.mark.asyncio
async def test_register_plan_all_failing_returns_empty() -> None:
    registrar = FakeRegistrar(fail_schedule=lambda _t: True)
    specs = plan_triggers("gym", WED_15, "weekly", [1, 3], WED_14)
    assert await register_plan(registrar, specs, reminder_content("gym")) == []


def test_reminder_content_mentions_title_and_lead() -> None:
    content = reminder_content("Water plants")
    assert content.title == "Tasky Reminder"
    assert content.body == '"Water plants" is due in 10 minutes!'
