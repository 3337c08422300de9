# src/tasky/cli/background.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.ports import Notifier
from ..notifications.local_registrar import LocalNotificationRegistrar, run_dispatch_loop

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class EngineRunner:
    """
    Event loop running on a background thread.

    The console REPL is blocking (input()), the engine is async: commands
    submit coroutines here and wait for them to settle.
    """

    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = 30.0) -> T:
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout=timeout)

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal engine stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_engine_in_background(
        registrar: LocalNotificationRegistrar,
        notifier: Notifier,
        *,
        interval_seconds: float,
) -> EngineRunner:
    """Start the dispatch loop on its own thread and event loop."""
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_dispatch_loop(registrar, notifier, interval_seconds=interval_seconds, stop_event=stop_event)
            )
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="tasky-engine", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        raise RuntimeError("engine thread did not initialize")

    logger.info("Engine background thread started (interval=%ss).", interval_seconds)
    return EngineRunner(thread=t, loop=loop, stop_event=stop_event)
