# src/tasky/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the engine loop on a background
thread (it fires due reminders), then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.background import start_engine_in_background
from ..cli.bootstrap import create_initial_state, create_notifier
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_api import reschedule_open_reminders

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)
    logging.getLogger("plyer").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    engine = start_engine_in_background(
        state.registrar,
        create_notifier(settings),
        interval_seconds=settings.dispatch_interval_seconds,
    )

    # The local registrar starts empty; bring stored reminders back to life.
    try:
        engine.run(reschedule_open_reminders(state))
    except Exception:
        logger.exception("Failed to reschedule stored reminders.")

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except Exception:
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state, engine.run)
            stop_main.set()
        else:
            logger.info("Console disabled. Firing reminders in the background. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        engine.stop()
        engine.join(timeout=10.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
