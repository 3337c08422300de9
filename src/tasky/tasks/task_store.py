# src/tasky/tasks/task_store.py

from __future__ import annotations

import contextlib
import datetime as dt
import json
import logging
import sqlite3
import uuid
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..notifications.registry import EMPTY_BLOB, parse_blob
from .task_models import DEFAULT_ICON, RecurrenceKind, Reminder, make_task

logger = logging.getLogger(__name__)


class ReminderStore:
    """
    SQLite reminder store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    The trigger blob column is parsed into a TriggerBlob when rows are read;
    the engine never sees the raw string.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasky.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_reminders()
        except Exception:
            total = -1
        logger.info("ReminderStore ready db=%s total=%s", self._db_path, total)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS reminders (
                    id TEXT PRIMARY KEY NOT NULL,
                    title TEXT NOT NULL,
                    due_at TEXT NOT NULL,
                    recurrence TEXT NOT NULL DEFAULT 'single',
                    weekdays TEXT NOT NULL DEFAULT '[]',
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    trigger_blob TEXT,
                    icon TEXT,
                    created_at TEXT
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(reminders)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE reminders ADD COLUMN {name} {decl}")
                logger.info("ReminderStore migration: added column %s", name)

            add_col("recurrence", "TEXT NOT NULL DEFAULT 'single'")
            add_col("weekdays", "TEXT NOT NULL DEFAULT '[]'")
            add_col("is_completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("trigger_blob", "TEXT")
            add_col("icon", "TEXT")
            add_col("created_at", "TEXT")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_reminders_completed ON reminders(is_completed)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _weekdays_to_str(weekdays: Iterable[int]) -> str:
        return json.dumps([int(d) for d in weekdays])

    @staticmethod
    def _str_to_weekdays(s: str | None) -> list[int]:
        if not s:
            return []
        try:
            val = json.loads(s)
        except ValueError:
            return []
        return [d for d in val if isinstance(d, int)] if isinstance(val, list) else []

    def _row_to_reminder(self, row: sqlite3.Row) -> Reminder:
        created_raw = row["created_at"]
        task = make_task(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            due_at=dt.datetime.fromisoformat(row["due_at"]),
            kind=row["recurrence"],
            weekdays=self._str_to_weekdays(row["weekdays"]),
        )
        return Reminder(
            task=task,
            is_completed=bool(row["is_completed"]),
            triggers=parse_blob(row["trigger_blob"]),
            icon=str(row["icon"] or DEFAULT_ICON),
            created_at=dt.datetime.fromisoformat(created_raw) if created_raw else None,
        )

    @staticmethod
    def _clean_title(title: str) -> str:
        if not title or not title.strip():
            raise ValueError("title is required")
        return title.strip()

    # ---- public API ----

    def count_reminders(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM reminders")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_reminder(
        self,
        *,
        title: str,
        due_at: dt.datetime,
        recurrence: RecurrenceKind | str = RecurrenceKind.SINGLE,
        weekdays: Iterable[int] = (),
        icon: str | None = None,
        trigger_blob: str | None = None,
        reminder_id: str | None = None,
    ) -> str:
        title = self._clean_title(title)
        reminder_id = reminder_id or str(uuid.uuid4())
        kind = RecurrenceKind.from_db(str(recurrence))

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO reminders(
                    id, title, due_at, recurrence, weekdays,
                    is_completed, trigger_blob, icon, created_at
                )
                VALUES (?, ?, ?, ?, ?, 0, ?, ?, ?)
                """,
                (
                    reminder_id,
                    title,
                    due_at.isoformat(),
                    kind.value,
                    self._weekdays_to_str(weekdays),
                    trigger_blob if trigger_blob is not None else EMPTY_BLOB,
                    icon or DEFAULT_ICON,
                    dt.datetime.now().isoformat(timespec="seconds"),
                ),
            )
            conn.commit()
            logger.debug("Reminder added id=%s kind=%s due_at=%s", reminder_id, kind.value, due_at)
            return reminder_id
        finally:
            conn.close()

    def get_reminder(self, reminder_id: str) -> Reminder | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM reminders WHERE id = ?", (reminder_id,))
            row = cur.fetchone()
            return self._row_to_reminder(row) if row else None
        finally:
            conn.close()

    def list_reminders(self, *, include_completed: bool = True) -> list[Reminder]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            if include_completed:
                cur.execute("SELECT * FROM reminders ORDER BY created_at ASC, rowid ASC")
            else:
                cur.execute("SELECT * FROM reminders WHERE is_completed = 0 ORDER BY created_at ASC, rowid ASC")
            return [self._row_to_reminder(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def update_reminder(
        self,
        reminder_id: str,
        *,
        title: str,
        due_at: dt.datetime,
        recurrence: RecurrenceKind | str,
        weekdays: Iterable[int] = (),
        icon: str | None = None,
        trigger_blob: str | None = None,
    ) -> None:
        fields: list[str] = ["title = ?", "due_at = ?", "recurrence = ?", "weekdays = ?"]
        params: list[Any] = [
            self._clean_title(title),
            due_at.isoformat(),
            RecurrenceKind.from_db(str(recurrence)).value,
            self._weekdays_to_str(weekdays),
        ]

        if icon is not None:
            fields.append("icon = ?")
            params.append(icon)

        if trigger_blob is not None:
            fields.append("trigger_blob = ?")
            params.append(trigger_blob)

        params.append(reminder_id)
        sql = f"UPDATE reminders SET {', '.join(fields)} WHERE id = ?"

        conn = self._get_conn()
        try:
            conn.execute(sql, params)
            conn.commit()
        finally:
            conn.close()

    def set_completed(self, reminder_id: str, completed: bool) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE reminders SET is_completed = ? WHERE id = ?",
                (1 if completed else 0, reminder_id),
            )
            conn.commit()
        finally:
            conn.close()

    def set_trigger_blob(self, reminder_id: str, trigger_blob: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE reminders SET trigger_blob = ? WHERE id = ?",
                (trigger_blob, reminder_id),
            )
            conn.commit()
        finally:
            conn.close()

    def delete_reminder(self, reminder_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
            conn.commit()
        finally:
            conn.close()
