"""
Push channel from the tool host to the caller.

Delivery is best-effort and at-most-once: ``emit`` never raises, and a
handler that fails only loses its own copy of the event.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from mcp_bridge.types import LogLevel, NotificationEvent, NotificationKind

__all__ = [
    "NotificationHandler",
    "NotificationChannel",
    "ProgressReporter",
    "LoggingNotificationHandler",
]

NotificationHandler = Callable[[NotificationEvent], None]


@dataclass(frozen=True)
class _Subscription:
    handler: NotificationHandler
    token: Optional[str]


class NotificationChannel:
    """Fan-out of notification events to subscribed handlers."""

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._subscriptions: list[_Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: NotificationHandler, *, token: str | None = None) -> Callable[[], None]:
        """
        Register *handler*; with *token* set only that Turn's events reach it.

        Returns a callable that removes the subscription.
        """
        subscription = _Subscription(handler, token)
        with self._lock:
            self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            with self._lock:
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)

        return unsubscribe

    def emit(self, event: NotificationEvent) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if s.token is None or s.token == event.token]

        for subscription in targets:
            try:
                subscription.handler(event)
            except Exception:
                self.logger.warning(
                    "Dropping %s notification for %s: handler %r failed",
                    event.kind,
                    event.token,
                    subscription.handler,
                    exc_info=True,
                )


class ProgressReporter:
    """
    Emits the log and progress events of one Turn.

    Progress is kept within [0.0, 1.0] and never moves backwards, also across
    the Turn's successive tool calls; ``call_id`` tags events with the call
    currently running.
    """

    def __init__(
        self,
        channel: NotificationChannel,
        token: str,
        call_id: str | None = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.channel = channel
        self.token = token
        self.call_id = call_id
        self.logger = logger or logging.getLogger(__name__)
        self._last: Optional[float] = None

    @property
    def last_progress(self) -> Optional[float]:
        return self._last

    def log(self, level: LogLevel, message: str) -> None:
        self.channel.emit(NotificationEvent.log(self.token, level, message, call_id=self.call_id))

    def progress(self, value: float, message: str) -> float:
        clamped = min(max(float(value), 0.0), 1.0)
        if self._last is not None and clamped < self._last:
            self.logger.debug(
                "Progress for %s would go back from %.2f to %.2f; holding at %.2f",
                self.token, self._last, clamped, self._last,
            )
            clamped = self._last
        self._last = clamped
        self.channel.emit(
            NotificationEvent.progress_update(self.token, clamped, message, call_id=self.call_id)
        )
        return clamped


_LOG_LEVELS: dict[LogLevel, int] = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.NOTICE: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.EMERGENCY: logging.CRITICAL,
}


class LoggingNotificationHandler:
    """Caller-side handler that writes tool host notifications to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger("mcp_bridge.tool_host")

    def __call__(self, event: NotificationEvent) -> None:
        if event.kind is NotificationKind.PROGRESS:
            self.logger.info(
                "Progress notification received: [%s] progress: %d%% done | message: %s",
                event.token,
                int((event.progress or 0.0) * 100),
                event.message,
            )
        else:
            level = event.level or LogLevel.INFO
            self.logger.log(
                _LOG_LEVELS[level],
                "Tool host log: [%s] %s",
                level.upper(),
                event.message,
            )
