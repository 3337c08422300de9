# src/tasky/notifications/scheduler.py

from __future__ import annotations

"""
Notification scheduler.

Runs one short-lived state machine per task operation:

    IDLE -> CANCELING_OLD -> PLANNING_NEW -> REGISTERING -> IDLE

- create skips CANCELING_OLD
- edit cancels the task's current blob before planning the replacement
- complete/delete only cancel, and hand back the cleared blob
- without notification permission nothing is registered; the caller still
  gets a valid (empty) blob to persist

Operations for the same task never overlap: each task id has its own lock.
Nothing here raises to the caller; the worst outcome is a task without a
working reminder.
"""

import asyncio
import contextlib
import datetime as dt
import logging
from collections.abc import AsyncIterator, Callable
from enum import Enum

from ..core.ports import NotificationRegistrar
from ..tasks.task_models import TaskDefinition
from .planner import LEAD_TIME, plan_task_triggers, register_plan
from .registry import EMPTY_BLOB, TriggerBlob, TriggerRegistry, serialize
from .triggers import reminder_content

logger = logging.getLogger(__name__)


class SchedulePhase(str, Enum):
    IDLE = "idle"
    CANCELING_OLD = "canceling_old"
    PLANNING_NEW = "planning_new"
    REGISTERING = "registering"


class NotificationScheduler:
    def __init__(
            self,
            registrar: NotificationRegistrar,
            *,
            clock: Callable[[], dt.datetime] = dt.datetime.now,
            lead_time: dt.timedelta = LEAD_TIME,
    ) -> None:
        self._registrar = registrar
        self._registry = TriggerRegistry(registrar)
        self._clock = clock
        self._lead_time = lead_time
        self._locks: dict[str, asyncio.Lock] = {}
        self._phases: dict[str, SchedulePhase] = {}
        self._users: dict[str, int] = {}

    @property
    def registry(self) -> TriggerRegistry:
        return self._registry

    def phase(self, task_id: str) -> SchedulePhase:
        return self._phases.get(task_id, SchedulePhase.IDLE)

    @contextlib.asynccontextmanager
    async def _serialized(self, task_id: str) -> AsyncIterator[None]:
        """
        Hold the task's lock. The lock and phase entries are dropped once no
        operation for the task is running or waiting.
        """
        lock = self._locks.get(task_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[task_id] = lock
        self._users[task_id] = self._users.get(task_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[task_id] -= 1
            if not self._users[task_id]:
                del self._users[task_id]
                del self._locks[task_id]
                self._phases.pop(task_id, None)

    def tracked_tasks(self) -> set[str]:
        """Task ids with an operation running or waiting."""
        return set(self._users)

    def _enter(self, task_id: str, phase: SchedulePhase) -> None:
        self._phases[task_id] = phase
        logger.debug("task=%s phase=%s", task_id, phase.value)

    # ---- public API ----

    async def on_create(self, task: TaskDefinition, *, now: dt.datetime | None = None) -> str:
        """Plan and register reminders for a new task; returns the blob to persist."""
        async with self._serialized(task.id):
            try:
                return await self._plan_and_register(task, now)
            finally:
                self._enter(task.id, SchedulePhase.IDLE)

    async def on_update(
            self,
            task: TaskDefinition,
            current_blob: str | TriggerBlob | None,
            *,
            now: dt.datetime | None = None,
    ) -> str:
        """Cancel the task's current reminders, then plan and register new ones."""
        async with self._serialized(task.id):
            try:
                self._enter(task.id, SchedulePhase.CANCELING_OLD)
                await self._registry.cancel_all(current_blob)
                return await self._plan_and_register(task, now)
            finally:
                self._enter(task.id, SchedulePhase.IDLE)

    async def on_complete(self, task_id: str, current_blob: str | TriggerBlob | None) -> str:
        return await self._clear(task_id, current_blob, reason="complete")

    async def on_delete(self, task_id: str, current_blob: str | TriggerBlob | None) -> str:
        return await self._clear(task_id, current_blob, reason="delete")

    # ---- internals ----

    async def _clear(self, task_id: str, current_blob: str | TriggerBlob | None, *, reason: str) -> str:
        async with self._serialized(task_id):
            try:
                self._enter(task_id, SchedulePhase.CANCELING_OLD)
                n = await self._registry.cancel_all(current_blob)
                logger.info("Reminders cleared task=%s reason=%s cancelled=%d", task_id, reason, n)
                return EMPTY_BLOB
            finally:
                self._enter(task_id, SchedulePhase.IDLE)

    async def _plan_and_register(self, task: TaskDefinition, now: dt.datetime | None) -> str:
        self._enter(task.id, SchedulePhase.PLANNING_NEW)
        if now is None:
            now = self._clock()
        specs = plan_task_triggers(task, now, lead_time=self._lead_time)

        self._enter(task.id, SchedulePhase.REGISTERING)
        if not specs:
            return EMPTY_BLOB

        if not await self._permission_granted():
            logger.warning(
                "Notification permission unavailable; task=%s saved without reminders", task.id
            )
            return EMPTY_BLOB

        content = reminder_content(task.title, int(self._lead_time.total_seconds() // 60))
        identifiers = await register_plan(self._registrar, specs, content)
        if len(identifiers) < len(specs):
            logger.warning(
                "Registered %d/%d triggers for task=%s", len(identifiers), len(specs), task.id
            )
        else:
            logger.info("Registered %d trigger(s) for task=%s", len(identifiers), task.id)
        return serialize(identifiers)

    async def _permission_granted(self) -> bool:
        try:
            return bool(await self._registrar.has_permission())
        except Exception:
            logger.exception("Permission check failed; treating as unavailable")
            return False
