# tests/conftest.py

from __future__ import annotations

import datetime as dt
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasky.core.state import AppState
from tasky.notifications.scheduler import NotificationScheduler
from tasky.tasks.task_store import ReminderStore

from .fakes import FakeRegistrar

# Wednesday afternoon; every scenario below is relative to it.
WED_14 = dt.datetime(2025, 12, 17, 14, 0)


@pytest.fixture()
def now() -> dt.datetime:
    return WED_14


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="tasky-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasky.sqlite3",
        notifications_enabled=True,
        desktop_notifications=False,
        dispatch_interval_seconds=0.01,
        console_enabled=False,
    )


@pytest.fixture()
def registrar() -> FakeRegistrar:
    return FakeRegistrar()


@pytest.fixture()
def store(settings: SimpleNamespace) -> ReminderStore:
    return ReminderStore(settings.tasks_db_path)


@pytest.fixture()
def state(settings: SimpleNamespace, store: ReminderStore, registrar: FakeRegistrar) -> AppState:
    """
    AppState wired with a fake registrar.

    NOTE: We keep the real SQLite store here because its correctness is
    part of what we want to test.
    """
    return AppState(
        settings=settings,
        store=store,
        registrar=registrar,
        scheduler=NotificationScheduler(registrar, clock=lambda: WED_14),
    )
