# src/tasky/notifications/desktop.py

from __future__ import annotations

import logging

from plyer import notification

logger = logging.getLogger(__name__)


class DesktopNotifier:
    """Cross-platform desktop notification via plyer."""

    def __init__(self, app_name: str = "tasky", timeout: int = 10) -> None:
        self.app_name = app_name
        self.timeout = timeout

    def notify(self, title: str, message: str) -> None:
        try:
            notification.notify(title=title, message=message, app_name=self.app_name, timeout=self.timeout)
        except Exception:
            # plyer raises NotImplementedError when no backend exists (headless boxes).
            logger.warning("Desktop notification unavailable: %s: %s", title, message, exc_info=True)


class LoggingNotifier:
    """Writes fired reminders to the log only."""

    def notify(self, title: str, message: str) -> None:
        logger.info("[%s] %s", title, message)
