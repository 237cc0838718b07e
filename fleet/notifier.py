"""User-visible save notifications."""

from typing import List, Tuple

from .log import get_logger

logger = get_logger(__name__)


class Notifier:
    """
    Receives the outcome of each write.

    ``success`` reports a remotely confirmed write ("Saved"), ``degraded``
    a write that was applied locally only ("Saved locally").
    """

    def success(self, message: str) -> None:
        raise NotImplementedError

    def degraded(self, message: str) -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    def success(self, message: str) -> None:
        logger.info(message)

    def degraded(self, message: str) -> None:
        logger.warning(message)


class ConsoleNotifier(Notifier):
    """Prints notifications for the command line."""

    def success(self, message: str) -> None:
        print(message)

    def degraded(self, message: str) -> None:
        print(f"{message} (server unreachable)")


class RecordingNotifier(Notifier):
    """Keeps every notification as a (kind, message) pair."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def degraded(self, message: str) -> None:
        self.messages.append(("degraded", message))

    @property
    def last(self) -> Tuple[str, str]:
        return self.messages[-1]
