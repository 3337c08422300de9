# src/tasky/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..notifications.scheduler import NotificationScheduler
from .ports import NotificationRegistrar, ReminderRepo


@dataclass
class AppState:
    # Settings are kept on the state so commands can read them.
    settings: Any

    store: ReminderRepo
    registrar: NotificationRegistrar
    scheduler: NotificationScheduler
