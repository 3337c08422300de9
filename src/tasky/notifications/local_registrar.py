# src/tasky/notifications/local_registrar.py

from __future__ import annotations

"""
In-process notification registrar.

Implements the NotificationRegistrar port without a mobile platform behind it:
registrations live in memory, and run_dispatch_loop() polls them and fires the
due ones through an injected Notifier.

- date triggers fire once and are dropped
- daily/weekly triggers roll forward to their next fire time
"""

import asyncio
import datetime as dt
import logging
import uuid
from collections.abc import Callable

from ..core.ports import Notifier
from .triggers import NotificationContent, ScheduledNotification, TriggerSpec, describe_trigger

logger = logging.getLogger(__name__)


class LocalNotificationRegistrar:
    def __init__(
            self,
            *,
            granted: bool = True,
            clock: Callable[[], dt.datetime] = dt.datetime.now,
    ) -> None:
        self.granted = granted
        self._clock = clock
        self._entries: dict[str, ScheduledNotification] = {}

    # ---- NotificationRegistrar ----

    async def has_permission(self) -> bool:
        return self.granted

    async def request_permission(self) -> bool:
        # No prompt to show locally; the setting decides.
        return self.granted

    async def schedule(self, trigger: TriggerSpec, content: NotificationContent) -> str:
        if not self.granted:
            raise PermissionError("notifications are disabled")

        next_fire_at = trigger.next_fire_after(self._clock())
        if next_fire_at is None:
            raise ValueError(f"trigger never fires: {describe_trigger(trigger)}")

        identifier = str(uuid.uuid4())
        self._entries[identifier] = ScheduledNotification(
            identifier=identifier,
            trigger=trigger,
            content=content,
            next_fire_at=next_fire_at,
        )
        logger.debug("Registered id=%s %s next=%s", identifier, describe_trigger(trigger), next_fire_at)
        return identifier

    async def cancel(self, identifier: str) -> None:
        try:
            del self._entries[identifier]
        except KeyError:
            raise KeyError(f"no scheduled notification with id={identifier}") from None

    async def list_scheduled(self) -> list[ScheduledNotification]:
        return sorted(
            self._entries.values(),
            key=lambda e: (e.next_fire_at or dt.datetime.max, e.identifier),
        )

    # ---- dispatch ----

    def fire_due(self, notifier: Notifier, now: dt.datetime | None = None) -> int:
        """Fire every registration due at `now`. Returns how many fired."""
        if now is None:
            now = self._clock()

        due = [e for e in self._entries.values() if e.next_fire_at is not None and e.next_fire_at <= now]
        due.sort(key=lambda e: e.next_fire_at or now)

        for entry in due:
            try:
                notifier.notify(entry.content.title, entry.content.body)
            except Exception:
                logger.exception("notify failed id=%s", entry.identifier)

            nxt = entry.trigger.next_fire_after(now)
            if nxt is None:
                self._entries.pop(entry.identifier, None)
                logger.info("Fired id=%s (one-shot, removed)", entry.identifier)
            else:
                entry.next_fire_at = nxt
                logger.info("Fired id=%s next=%s", entry.identifier, nxt)

        return len(due)


async def run_dispatch_loop(
        registrar: LocalNotificationRegistrar,
        notifier: Notifier,
        *,
        interval_seconds: float = 15.0,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling loop.

    Every interval_seconds fire whatever is due. Stops when stop_event is set;
    otherwise cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        try:
            registrar.fire_due(notifier)
        except Exception:
            logger.exception("fire_due failed")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
            continue
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)
        except asyncio.TimeoutError:
            pass
