# src/tasky/notifications/registry.py

from __future__ import annotations

"""
Trigger identifier bookkeeping.

A task's live reminders are tracked as one persisted string (the trigger blob):
- current format: JSON array of registrar identifiers, possibly "[]"
- legacy format: one bare identifier string (read and cancelled, never written)

The string is parsed once into TriggerList / LegacyTrigger at the store boundary.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..core.ports import NotificationRegistrar

logger = logging.getLogger(__name__)

EMPTY_BLOB = "[]"


@dataclass(frozen=True, slots=True)
class TriggerList:
    identifiers: tuple[str, ...] = ()

    def to_db(self) -> str:
        return serialize(self.identifiers)


@dataclass(frozen=True, slots=True)
class LegacyTrigger:
    identifier: str

    def to_db(self) -> str:
        return self.identifier

    @property
    def identifiers(self) -> tuple[str, ...]:
        return (self.identifier,)


TriggerBlob = TriggerList | LegacyTrigger


def serialize(identifiers: Iterable[str]) -> str:
    """Encode registrar identifiers as the persisted JSON array."""
    return json.dumps([str(i) for i in identifiers])


def parse_blob(raw: str | TriggerBlob | None) -> TriggerBlob:
    """
    Parse a persisted trigger blob.

    None/blank means "nothing scheduled". A JSON array is the current format;
    anything else (not JSON, or JSON that is not an array) is one legacy id.
    """
    if isinstance(raw, (TriggerList, LegacyTrigger)):
        return raw
    if raw is None or not raw.strip():
        return TriggerList()
    try:
        val = json.loads(raw)
    except ValueError:
        return LegacyTrigger(raw)
    if isinstance(val, list):
        return TriggerList(tuple(str(v) for v in val))
    return LegacyTrigger(raw)


class TriggerRegistry:
    """Cancels every trigger recorded in a blob, best-effort."""

    def __init__(self, registrar: NotificationRegistrar) -> None:
        self._registrar = registrar

    serialize = staticmethod(serialize)

    async def cancel_all(self, blob: str | TriggerBlob | None) -> int:
        """
        Cancel all identifiers in `blob`. Never raises.

        A trigger that already fired (or was cancelled before) is unknown to
        the registrar, which raises KeyError; that is expected and logged at
        debug. Other failures are logged as warnings. Returns how many
        cancellations succeeded.
        """
        parsed = parse_blob(blob)
        if isinstance(parsed, LegacyTrigger):
            logger.debug("Cancelling legacy trigger id=%s", parsed.identifier)

        cancelled = 0
        for identifier in parsed.identifiers:
            try:
                await self._registrar.cancel(identifier)
                cancelled += 1
            except KeyError:
                logger.debug("cancel skipped id=%s (not scheduled)", identifier)
            except Exception:
                logger.warning("cancel failed id=%s (ignored)", identifier, exc_info=True)

        if parsed.identifiers:
            logger.debug("Cancelled %d/%d triggers", cancelled, len(parsed.identifiers))
        return cancelled
