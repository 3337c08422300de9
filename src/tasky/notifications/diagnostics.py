# src/tasky/notifications/diagnostics.py

from __future__ import annotations

"""
Notification diagnostics.

Compares what the registrar has scheduled with what the stored reminders
think is scheduled, and suggests fixes.
"""

import datetime as dt
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..core.ports import NotificationRegistrar
from ..tasks.task_models import Reminder, SingleTask
from .planner import LEAD_TIME
from .triggers import DateTrigger, NotificationContent, ScheduledNotification

logger = logging.getLogger(__name__)

TEST_TITLE = "Tasky Test"
TEST_DELAY = dt.timedelta(minutes=1)


@dataclass(slots=True)
class NotificationDiagnostics:
    permission_granted: bool
    scheduled: list[ScheduledNotification] = field(default_factory=list)
    tracked_ids: set[str] = field(default_factory=set)
    orphaned_ids: list[str] = field(default_factory=list)
    missing: dict[str, list[str]] = field(default_factory=dict)
    suggested_fixes: list[str] = field(default_factory=list)

    @property
    def scheduled_count(self) -> int:
        return len(self.scheduled)

    @property
    def healthy(self) -> bool:
        return self.permission_granted and not self.orphaned_ids and not self.missing


async def collect_diagnostics(
        registrar: NotificationRegistrar,
        reminders: Iterable[Reminder],
        *,
        now: dt.datetime | None = None,
        lead_time: dt.timedelta = LEAD_TIME,
) -> NotificationDiagnostics:
    """
    Never raises; registrar failures are reported as suggested fixes.

    A one-time reminder whose trigger time has passed is not "missing": its
    notification fired (or was never due) and rescheduling would not help.
    Test notifications are not orphans.
    """
    if now is None:
        now = dt.datetime.now()
    fixes: list[str] = []

    try:
        granted = bool(await registrar.has_permission())
    except Exception:
        logger.exception("has_permission failed")
        granted = False

    try:
        scheduled = await registrar.list_scheduled()
    except Exception:
        logger.exception("list_scheduled failed")
        scheduled = []
        fixes.append("Could not list scheduled notifications; restart the app.")

    live_ids = {s.identifier for s in scheduled}
    tracked: set[str] = set()
    missing: dict[str, list[str]] = {}

    for rem in reminders:
        ids = rem.triggers.identifiers
        tracked.update(ids)
        if rem.is_completed:
            continue
        if isinstance(rem.task, SingleTask) and rem.task.due_at - lead_time <= now:
            continue
        gone = [i for i in ids if i not in live_ids]
        if gone:
            missing[rem.id] = gone

    test_ids = {s.identifier for s in scheduled if s.content.title == TEST_TITLE}
    orphaned = sorted(live_ids - tracked - test_ids)

    if not granted:
        fixes.append("Notifications are disabled; set TASKY_NOTIFICATIONS_ENABLED=true.")
    if orphaned:
        fixes.append(f"{len(orphaned)} scheduled notification(s) belong to no task; run /diag fix.")
    if missing:
        fixes.append(
            f"{len(missing)} task(s) reference notifications that are no longer scheduled; "
            "edit and save them to reschedule."
        )

    return NotificationDiagnostics(
        permission_granted=granted,
        scheduled=list(scheduled),
        tracked_ids=tracked,
        orphaned_ids=orphaned,
        missing=missing,
        suggested_fixes=fixes,
    )


async def cancel_orphans(registrar: NotificationRegistrar, diagnostics: NotificationDiagnostics) -> int:
    """Cancel scheduled notifications no task references. Returns how many were cancelled."""
    n = 0
    for identifier in diagnostics.orphaned_ids:
        try:
            await registrar.cancel(identifier)
            n += 1
        except Exception:
            logger.warning("cancel orphan failed id=%s", identifier, exc_info=True)
    return n


async def send_test_notification(
        registrar: NotificationRegistrar,
        *,
        now: dt.datetime | None = None,
        delay: dt.timedelta = TEST_DELAY,
) -> str:
    """
    Schedule a one-off notification `delay` from now through the normal
    registrar path. Errors propagate so the caller can report them.
    """
    if now is None:
        now = dt.datetime.now()
    at = (now + delay).replace(microsecond=0)
    content = NotificationContent(title=TEST_TITLE, body="Notifications are working.")
    identifier = await registrar.schedule(DateTrigger(at=at), content)
    logger.info("Test notification scheduled id=%s at=%s", identifier, at.isoformat())
    return identifier
