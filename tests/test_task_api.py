# tests/test_task_api.py

from __future__ import annotations

import datetime as dt
import sqlite3

import pytest

from tasky.core.state import AppState
from tasky.notifications.registry import TriggerList
from tasky.tasks import task_api
from tasky.tasks.task_models import DailyTask, Reminder, SingleTask, WeeklyTask

from .conftest import WED_14
from .fakes import FakeRegistrar

WED_15 = dt.datetime(2025, 12, 17, 15, 0)


@pytest.mark.asyncio
async def test_create_persists_blob(state: AppState, registrar: FakeRegistrar) -> None:
    rem = await task_api.create_reminder(
        state, title="gym", due_at=WED_15, recurrence="weekly", weekdays=[1, 3, 1, 5], now=WED_14
    )

    assert isinstance(rem.task, WeeklyTask)
    assert rem.triggers == TriggerList(("id-1", "id-2", "id-3"))
    assert [s.trigger.weekday for s in registrar.scheduled.values()] == [2, 4, 6]


@pytest.mark.asyncio
async def test_create_without_permission_still_saves(state: AppState, registrar: FakeRegistrar) -> None:
    registrar.granted = False

    rem = await task_api.create_reminder(state, title="gym", due_at=WED_15, recurrence="daily", now=WED_14)

    assert state.store.get_reminder(rem.id) is not None
    assert rem.triggers == TriggerList()


@pytest.mark.asyncio
async def test_create_rejects_empty_title_before_scheduling(state: AppState, registrar: FakeRegistrar) -> None:
    with pytest.raises(ValueError):
        await task_api.create_reminder(state, title=" ", due_at=WED_15, now=WED_14)
    assert registrar.calls == []


@pytest.mark.asyncio
async def test_create_cancels_new_triggers_when_store_write_fails(
    state: AppState, registrar: FakeRegistrar, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken_add(**kwargs):
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(state.store, "add_reminder", broken_add)

    with pytest.raises(sqlite3.OperationalError, match="database is locked"):
        await task_api.create_reminder(
            state, title="gym", due_at=WED_15, recurrence="weekly", weekdays=[1, 3], now=WED_14
        )

    assert registrar.cancelled == ["id-1", "id-2"]
    assert registrar.scheduled == {}
    assert state.store.count_reminders() == 0


@pytest.mark.asyncio
async def test_update_cancels_existing_blob_first(state: AppState, registrar: FakeRegistrar) -> None:
    rid = state.store.add_reminder(title="meds", due_at=WED_15, recurrence="daily", trigger_blob='["x","y"]')

    rem = await task_api.update_reminder(
        state, rid, title="meds", due_at=dt.datetime(2025, 12, 17, 20, 0), recurrence="daily", now=WED_14
    )

    assert registrar.calls[:2] == [("cancel", "x"), ("cancel", "y")]
    assert rem.triggers == TriggerList(("id-1",))
    assert rem.task.due_at == dt.datetime(2025, 12, 17, 20, 0)


@pytest.mark.asyncio
async def test_update_unknown_id_raises(state: AppState) -> None:
    with pytest.raises(KeyError):
        await task_api.update_reminder(state, "nope", title="x", due_at=WED_15, recurrence="single")


@pytest.mark.asyncio
async def test_toggle_completed_cancels_then_reopen_replans(state: AppState, registrar: FakeRegistrar) -> None:
    rem = await task_api.create_reminder(state, title="meds", due_at=WED_15, recurrence="daily", now=WED_14)

    done = await task_api.toggle_completed(state, rem.id, now=WED_14)
    assert done.is_completed is True
    assert done.triggers == TriggerList()
    assert registrar.cancelled == ["id-1"]

    reopened = await task_api.toggle_completed(state, rem.id, now=WED_14)
    assert reopened.is_completed is False
    assert reopened.triggers == TriggerList(("id-2",))


@pytest.mark.asyncio
async def test_update_of_completed_reminder_stays_silent(state: AppState, registrar: FakeRegistrar) -> None:
    rem = await task_api.create_reminder(state, title="meds", due_at=WED_15, recurrence="daily", now=WED_14)
    await task_api.toggle_completed(state, rem.id)

    updated = await task_api.update_reminder(state, rem.id, title="meds", due_at=WED_15, recurrence="daily")

    assert updated.triggers == TriggerList()
    assert registrar.call_names().count("schedule") == 1


@pytest.mark.asyncio
async def test_delete_cancels_and_removes(state: AppState, registrar: FakeRegistrar) -> None:
    rid = state.store.add_reminder(title="x", due_at=WED_15, trigger_blob="legacy-7")

    assert await task_api.delete_reminder(state, rid) is True
    assert registrar.calls == [("cancel", "legacy-7")]
    assert state.store.get_reminder(rid) is None
    assert await task_api.delete_reminder(state, rid) is False


@pytest.mark.asyncio
async def test_reschedule_open_reminders(state: AppState, registrar: FakeRegistrar) -> None:
    state.store.add_reminder(title="a", due_at=WED_15, recurrence="daily", trigger_blob='["stale"]')
    done = state.store.add_reminder(title="b", due_at=WED_15, recurrence="daily")
    state.store.set_completed(done, True)
    registrar.fail_cancel.add("stale")

    assert await task_api.reschedule_open_reminders(state, now=WED_14) == 1

    triggers = {r.task.title: r.triggers for r in state.store.list_reminders()}
    assert triggers == {"a": TriggerList(("id-1",)), "b": TriggerList()}


def _rem(task) -> Reminder:
    return Reminder(task=task)


def test_group_by_day_in_occurrence_order() -> None:
    reminders = [
        _rem(SingleTask(id="next-week", title="a", due_at=dt.datetime(2025, 12, 23, 9, 0))),
        _rem(DailyTask(id="daily-tomorrow", title="b", due_at=dt.datetime(2025, 1, 1, 8, 0))),
        _rem(DailyTask(id="daily-today", title="c", due_at=dt.datetime(2025, 1, 1, 18, 0))),
        _rem(WeeklyTask(id="weekly-today", title="d", due_at=dt.datetime(2025, 1, 1, 16, 0), weekdays=(3,))),
    ]

    groups = task_api.group_by_day(reminders, WED_14)

    assert [(day, [r.id for r in items]) for day, items in groups] == [
        (dt.date(2025, 12, 17), ["weekly-today", "daily-today"]),
        (dt.date(2025, 12, 18), ["daily-tomorrow"]),
        (dt.date(2025, 12, 23), ["next-week"]),
    ]


def test_section_title() -> None:
    assert task_api.section_title(dt.date(2025, 12, 17), WED_14) == "Today"
    assert task_api.section_title(dt.date(2025, 12, 18), WED_14) == "Tomorrow"
    assert task_api.section_title(dt.date(2025, 12, 23), WED_14) == "Tue, Dec 23"


def test_describe_repeat() -> None:
    due = dt.datetime(2025, 12, 17, 9, 0)  # Wednesday
    assert task_api.describe_repeat(SingleTask(id="1", title="x", due_at=due)) is None
    assert task_api.describe_repeat(DailyTask(id="2", title="x", due_at=due)) == "Daily"
    assert task_api.describe_repeat(WeeklyTask(id="3", title="x", due_at=due, weekdays=(3, 1))) == "Weekly on Mon, Wed"
    assert task_api.describe_repeat(WeeklyTask(id="4", title="x", due_at=due)) == "Weekly on Wed"
