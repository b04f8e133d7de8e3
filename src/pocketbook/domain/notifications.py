"""User-facing notifications for mutation outcomes."""

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: str
    title: str
    message: str


class Notifier:
    """Fans notifications out to subscribed handlers.

    Delivery never blocks the operation that produced the notification: a
    handler that raises is logged and skipped.
    """

    def __init__(self):
        self._subscribers: list[Callable[[Notification], None]] = []

    def subscribe(self, handler: Callable[[Notification], None]) -> None:
        if handler not in self._subscribers:
            self._subscribers.append(handler)

    def unsubscribe(self, handler: Callable[[Notification], None]) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def notify(self, level: str, title: str, message: str) -> Notification:
        notification = Notification(level=level, title=title, message=message)
        for handler in list(self._subscribers):
            try:
                handler(notification)
            except Exception:
                logger.exception("Notification handler %r failed", handler)
        return notification

    def success(self, title: str, message: str) -> Notification:
        return self.notify(SUCCESS, title, message)

    def error(self, title: str, message: str) -> Notification:
        return self.notify(ERROR, title, message)
