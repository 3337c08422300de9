# src/tasky/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, the registrar and the scheduler into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Notifier
from ..core.state import AppState
from ..notifications.desktop import DesktopNotifier, LoggingNotifier
from ..notifications.local_registrar import LocalNotificationRegistrar
from ..notifications.scheduler import NotificationScheduler
from ..tasks.task_store import ReminderStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    registrar = LocalNotificationRegistrar(granted=settings.notifications_enabled)
    if not settings.notifications_enabled:
        logger.warning("Notifications disabled; reminders will be saved without alerts.")

    return AppState(
        settings=settings,
        store=ReminderStore(settings.tasks_db_path),
        registrar=registrar,
        scheduler=NotificationScheduler(registrar),
    )


def create_notifier(settings) -> Notifier:
    if getattr(settings, "desktop_notifications", False):
        return DesktopNotifier(app_name=getattr(settings, "app_name", "tasky"))
    return LoggingNotifier()
