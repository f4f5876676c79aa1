"""Provides :class:`Notifier`, which carries short status messages from the store to whoever displays them."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
import logging
from typing import Callable, List, Optional

from agentshelf.models import utcnow

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 3.0


class Severity(Enum):
    SUCCESS = 'success'
    ERROR = 'error'
    INFO = 'info'


_LOG_LEVELS = {
    Severity.SUCCESS: logging.INFO,
    Severity.ERROR: logging.WARNING,
    Severity.INFO: logging.INFO,
}


@dataclass
class Notification:
    message: str
    severity: Severity
    raised: datetime
    expires: datetime

    def is_active(self, now: datetime = None) -> bool:
        return (now or utcnow()) < self.expires


Listener = Callable[[Notification], None]


class Notifier:
    """Fire-and-forget channel for user-facing notifications.

    Only one notification is shown at a time: raising a new one replaces the previous one. A notification stays
    :attr:`current` for :attr:`duration` seconds, after which it is dismissed automatically.

    Anything that wants to display notifications as they happen can :meth:`subscribe`.
    """
    def __init__(self, duration: float = DEFAULT_DURATION):
        self.duration = duration
        self._latest: Optional[Notification] = None
        self._listeners: List[Listener] = []

    def notify(self, message: str, severity: Severity = Severity.INFO) -> Notification:
        now = utcnow()
        notification = Notification(message, severity, now, now + timedelta(seconds=self.duration))
        self._latest = notification
        logger.log(_LOG_LEVELS[severity], '[%s] %s', severity.value, message)
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception('Notification listener %r failed', listener)
        return notification

    @property
    def current(self) -> Optional[Notification]:
        """The notification that should be on screen right now, or None once it has been dismissed."""
        if self._latest and not self._latest.is_active():
            self._latest = None
        return self._latest

    def dismiss(self) -> None:
        self._latest = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Calls ``listener`` with every notification raised from now on. Returns a function that unsubscribes."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe
