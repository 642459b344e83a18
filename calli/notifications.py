"""User-visible, non-blocking reports raised by the flows."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier(ABC):
    @abstractmethod
    def success(self, message: str) -> None:
        """Report a completed action."""
        raise NotImplementedError

    @abstractmethod
    def error(self, message: str) -> None:
        """Report a failed or rejected action."""
        raise NotImplementedError


class LogNotifier(Notifier):
    """Writes reports to the log. Default when no surface is attached."""

    def success(self, message: str) -> None:
        logger.info("[notify] %s", message)

    def error(self, message: str) -> None:
        logger.warning("[notify] %s", message)


class RecordingNotifier(Notifier):
    """Keeps every report in order. Used by tests and the console demo."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def success(self, message: str) -> None:
        self.notifications.append(Notification(NotificationLevel.SUCCESS, message))

    def error(self, message: str) -> None:
        self.notifications.append(Notification(NotificationLevel.ERROR, message))

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    @property
    def errors(self) -> list[str]:
        return [n.message for n in self.notifications if n.level == NotificationLevel.ERROR]

    def last(self) -> Notification:
        return self.notifications[-1]

    def clear(self) -> None:
        self.notifications.clear()
