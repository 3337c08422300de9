# src/tasky/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the engine.

The engine depends on Protocols instead of concrete implementations.
This keeps the platform notification backend and the storage swappable
and makes testing easier.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from ..notifications.triggers import NotificationContent, ScheduledNotification, TriggerSpec


class NotificationRegistrar(Protocol):
    """
    Platform scheduler capability.

    Every call is a suspension point. `schedule` returns an opaque identifier
    or raises; `cancel` raises KeyError when the identifier is unknown or already fired.
    """

    async def has_permission(self) -> bool: ...
    async def request_permission(self) -> bool: ...
    async def schedule(self, trigger: TriggerSpec, content: NotificationContent) -> str: ...
    async def cancel(self, identifier: str) -> None: ...
    async def list_scheduled(self) -> list[ScheduledNotification]: ...


class Notifier(Protocol):
    """Shows a notification right now (used when a trigger fires)."""

    def notify(self, title: str, message: str) -> None: ...


class ReminderRepo(Protocol):
    # Kept as Any-ish to avoid import coupling with tasks.task_models.
    def add_reminder(
            self,
            *,
            title: str,
            due_at: datetime,
            recurrence: str,
            weekdays: Iterable[int] = (),
            icon: str | None = None,
            trigger_blob: str | None = None,
            reminder_id: str | None = None,
    ) -> str: ...

    def get_reminder(self, reminder_id: str): ...
    def list_reminders(self, *, include_completed: bool = True) -> list: ...

    def update_reminder(
            self,
            reminder_id: str,
            *,
            title: str,
            due_at: datetime,
            recurrence: str,
            weekdays: Iterable[int] = (),
            icon: str | None = None,
            trigger_blob: str | None = None,
    ) -> None: ...

    def set_completed(self, reminder_id: str, completed: bool) -> None: ...
    def set_trigger_blob(self, reminder_id: str, trigger_blob: str) -> None: ...
    def delete_reminder(self, reminder_id: str) -> None: ...
    def count_reminders(self) -> int: ...
