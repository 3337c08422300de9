# src/tasky/cli/commands.py

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..core.state import AppState
from ..notifications.diagnostics import cancel_orphans, collect_diagnostics, send_test_notification
from ..notifications.occurrence import resolve_next_occurrence
from ..notifications.triggers import describe_trigger
from ..tasks import task_api
from ..tasks.task_models import RecurrenceKind, Reminder

Runner = Callable[[Awaitable[Any]], Any]
CommandHandler = Callable[[AppState, list[str], Runner], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, run: Runner) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args, run)
        except (ValueError, KeyError) as e:
            return f"Error: {e.args[0] if e.args else e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument parsing ----

def parse_when(raw: str, now: dt.datetime) -> dt.datetime:
    """"HH:MM" (today) or an ISO date-time like 2025-12-17T15:00."""
    try:
        if "T" in raw or "-" in raw:
            return dt.datetime.fromisoformat(raw).replace(microsecond=0)
        t = dt.time.fromisoformat(raw)
    except ValueError:
        raise ValueError(f"bad time {raw!r}; use HH:MM or YYYY-MM-DDTHH:MM") from None
    return dt.datetime.combine(now.date(), t.replace(microsecond=0))


def parse_rule(raw: str) -> tuple[RecurrenceKind, list[int]] | None:
    """"once", "daily", "weekly" or "weekly:1,3,5" (0=Sun). None if not a rule."""
    word, _, days = raw.lower().partition(":")
    if word in ("once", "single"):
        return RecurrenceKind.SINGLE, []
    if word == "daily":
        return RecurrenceKind.DAILY, []
    if word == "weekly":
        try:
            weekdays = [int(d) for d in days.split(",") if d.strip()]
        except ValueError:
            raise ValueError(f"bad weekdays {days!r}; use e.g. weekly:1,3,5 (0=Sun)") from None
        return RecurrenceKind.WEEKLY, weekdays
    return None


def parse_schedule_args(
    args: list[str], now: dt.datetime
) -> tuple[dt.datetime, RecurrenceKind, list[int], str]:
    """<when> [rule] <title...>"""
    if len(args) < 2:
        raise ValueError("usage: <HH:MM|YYYY-MM-DDTHH:MM> [once|daily|weekly[:0,3]] <title>")

    due_at = parse_when(args[0], now)
    rest = args[1:]
    rule = parse_rule(rest[0])
    kind, weekdays = RecurrenceKind.SINGLE, []
    if rule is not None:
        kind, weekdays = rule
        rest = rest[1:]

    title = " ".join(rest).strip()
    if not title:
        raise ValueError("title is required")
    return due_at, kind, weekdays, title


def find_reminder(state: AppState, prefix: str) -> Reminder:
    matches = [r for r in state.store.list_reminders() if r.id.startswith(prefix)]
    if not matches:
        raise KeyError(f"no reminder with id {prefix!r}")
    if len(matches) > 1:
        raise KeyError(f"id {prefix!r} is ambiguous ({len(matches)} matches)")
    return matches[0]


def format_reminder(rem: Reminder, now: dt.datetime) -> str:
    nxt = resolve_next_occurrence(rem.task, now)
    mark = "x" if rem.is_completed else " "
    repeat = task_api.describe_repeat(rem.task)
    suffix = f" ({repeat})" if repeat else ""
    return f"  [{mark}] {nxt:%H:%M} {rem.icon} {rem.task.title}{suffix}  id={rem.id[:8]}"


# ---- handlers ----

def cmd_help(state: AppState, args: list[str], run: Runner) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], run: Runner) -> str:
    now = dt.datetime.now()
    reminders = state.store.list_reminders()
    if not reminders:
        return "No reminders yet. Add one with /add."

    lines: list[str] = []
    for day, items in task_api.group_by_day(reminders, now):
        lines.append(task_api.section_title(day, now))
        lines.extend(format_reminder(r, now) for r in items)
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str], run: Runner) -> str:
    now = dt.datetime.now()
    due_at, kind, weekdays, title = parse_schedule_args(args, now)
    rem = run(
        task_api.create_reminder(
            state, title=title, due_at=due_at, recurrence=kind, weekdays=weekdays, now=now
        )
    )
    n = len(rem.triggers.identifiers)
    return f"Added {rem.task.title!r} id={rem.id[:8]} ({n} reminder trigger(s) scheduled)."


def cmd_edit(state: AppState, args: list[str], run: Runner) -> str:
    if not args:
        return "Usage: /edit <id> <when> [rule] <title>"
    now = dt.datetime.now()
    existing = find_reminder(state, args[0])
    due_at, kind, weekdays, title = parse_schedule_args(args[1:], now)
    rem = run(
        task_api.update_reminder(
            state,
            existing.id,
            title=title,
            due_at=due_at,
            recurrence=kind,
            weekdays=weekdays,
            now=now,
        )
    )
    n = len(rem.triggers.identifiers)
    return f"Updated {rem.task.title!r} ({n} reminder trigger(s) scheduled)."


def cmd_done(state: AppState, args: list[str], run: Runner) -> str:
    if not args:
        return "Usage: /done <id>"
    rem = find_reminder(state, args[0])
    rem = run(task_api.toggle_completed(state, rem.id))
    return f"{rem.task.title!r} marked {'done' if rem.is_completed else 'not done'}."


def cmd_delete(state: AppState, args: list[str], run: Runner) -> str:
    if not args:
        return "Usage: /delete <id>"
    rem = find_reminder(state, args[0])
    run(task_api.delete_reminder(state, rem.id))
    return f"Deleted {rem.task.title!r}."


def cmd_diag(state: AppState, args: list[str], run: Runner) -> str:
    """
    /diag       -> notification status
    /diag fix   -> cancel notifications that belong to no task
    /diag test  -> schedule a test notification in one minute
    """
    if args and args[0].lower() == "test":
        try:
            identifier = run(send_test_notification(state.registrar))
        except PermissionError as e:
            return f"Error: {e}"
        return f"Test notification scheduled in 1 minute (id={identifier[:8]})."

    diag = run(collect_diagnostics(state.registrar, state.store.list_reminders()))

    if args and args[0].lower() == "fix":
        n = run(cancel_orphans(state.registrar, diag))
        return f"Cancelled {n} orphaned notification(s)."

    lines = [
        "Notification diagnostics:",
        f"  Permission: {'granted' if diag.permission_granted else 'NOT granted'}",
        f"  Scheduled: {diag.scheduled_count}",
    ]
    for s in diag.scheduled:
        when = f"{s.next_fire_at:%Y-%m-%d %H:%M}" if s.next_fire_at else "-"
        lines.append(f"    {s.identifier[:8]} next={when} {describe_trigger(s.trigger)}")
    if diag.suggested_fixes:
        lines.append("  Suggested fixes:")
        lines.extend(f"    - {fix}" for fix in diag.suggested_fixes)
    else:
        lines.append("  All good.")
    return "\n".join(lines)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List reminders grouped by day.", aliases=["ls"])
registry.register(
    "add", cmd_add, help_text="Add: /add <HH:MM|YYYY-MM-DDTHH:MM> [once|daily|weekly[:0,3]] <title>."
)
registry.register("edit", cmd_edit, help_text="Edit: /edit <id> <when> [rule] <title>.")
registry.register("done", cmd_done, help_text="Toggle done: /done <id>.")
registry.register("delete", cmd_delete, help_text="Delete: /delete <id>.", aliases=["rm"])
registry.register("diag", cmd_diag, help_text="Notification diagnostics: /diag | /diag fix | /diag test.")
