# tests/test_task_store.py

from __future__ import annotations

import datetime as dt
import sqlite3
from pathlib import Path

import pytest

from tasky.notifications.registry import LegacyTrigger, TriggerList
from tasky.tasks.task_models import DailyTask, SingleTask, WeeklyTask
from tasky.tasks.task_store import ReminderStore

DUE = dt.datetime(2025, 12, 17, 15, 0)


def test_add_and_get_round_trip(store: ReminderStore) -> None:
    rid = store.add_reminder(
        title="  gym  ",
        due_at=DUE,
        recurrence="weekly",
        weekdays=[1, 3, 5],
        trigger_blob='["a","b"]',
    )

    rem = store.get_reminder(rid)
    assert rem is not None
    assert isinstance(rem.task, WeeklyTask)
    assert rem.task.title == "gym"
    assert rem.task.due_at == DUE
    assert rem.task.weekdays == (1, 3, 5)
    assert rem.triggers == TriggerList(("a", "b"))
    assert rem.icon == "📝"
    assert rem.is_completed is False
    assert store.count_reminders() == 1


def test_empty_title_is_rejected(store: ReminderStore) -> None:
    with pytest.raises(ValueError):
        store.add_reminder(title="   ", due_at=DUE)
    assert store.count_reminders() == 0


def test_default_blob_is_empty_list(store: ReminderStore) -> None:
    rid = store.add_reminder(title="x", due_at=DUE)
    rem = store.get_reminder(rid)
    assert rem is not None
    assert isinstance(rem.task, SingleTask)
    assert rem.triggers == TriggerList()


def test_legacy_blob_is_parsed_at_read(store: ReminderStore) -> None:
    rid = store.add_reminder(title="x", due_at=DUE, recurrence="daily", trigger_blob="legacy-42")
    rem = store.get_reminder(rid)
    assert rem is not None
    assert isinstance(rem.task, DailyTask)
    assert rem.triggers == LegacyTrigger("legacy-42")


def test_update_complete_blob_delete(store: ReminderStore) -> None:
    rid = store.add_reminder(title="x", due_at=DUE)

    store.update_reminder(rid, title="y", due_at=DUE, recurrence="daily", icon="🏋️", trigger_blob='["n"]')
    store.set_completed(rid, True)
    rem = store.get_reminder(rid)
    assert rem is not None
    assert isinstance(rem.task, DailyTask)
    assert (rem.task.title, rem.icon, rem.is_completed) == ("y", "🏋️", True)
    assert rem.triggers == TriggerList(("n",))

    store.set_trigger_blob(rid, "[]")
    assert store.get_reminder(rid).triggers == TriggerList()

    assert [r.id for r in store.list_reminders(include_completed=False)] == []
    assert [r.id for r in store.list_reminders()] == [rid]

    store.delete_reminder(rid)
    assert store.get_reminder(rid) is None


def test_unknown_recurrence_reads_back_as_single(store: ReminderStore, tmp_path: Path) -> None:
    rid = store.add_reminder(title="x", due_at=DUE)
    conn = sqlite3.connect(str(tmp_path / "tasky.sqlite3"))
    conn.execute("UPDATE reminders SET recurrence = 'monthly', weekdays = 'junk' WHERE id = ?", (rid,))
    conn.commit()
    conn.close()

    rem = store.get_reminder(rid)
    assert rem is not None
    assert isinstance(rem.task, SingleTask)


def test_migration_adds_missing_columns(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(str(db))
    conn.execute("CREATE TABLE reminders (id TEXT PRIMARY KEY NOT NULL, title TEXT NOT NULL, due_at TEXT NOT NULL)")
    conn.execute("INSERT INTO reminders VALUES ('r1', 'old task', ?)", (DUE.isoformat(),))
    conn.commit()
    conn.close()

    store = ReminderStore(db)
    rem = store.get_reminder("r1")
    assert rem is not None
    assert isinstance(rem.task, SingleTask)
    assert rem.triggers == TriggerList()
    assert rem.icon == "📝"
