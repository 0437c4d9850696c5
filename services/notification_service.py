import logging

logger = logging.getLogger(__name__)


class NotificationTransport:
    """Delivers a notification to a target (device token, desktop, ...)."""

    def send(self, target: str, title: str, body: str, data: dict[str, str]) -> None:
        raise NotImplementedError


class LogTransport(NotificationTransport):
    """Desktop fallback: writes notifications to the application log."""

    def __init__(self):
        self.sent: list[tuple[str, str, str, dict[str, str]]] = []

    def send(self, target: str, title: str, body: str, data: dict[str, str]) -> None:
        self.sent.append((target, title, body, dict(data)))
        logger.info("[%s] %s: %s", target, title, body)
