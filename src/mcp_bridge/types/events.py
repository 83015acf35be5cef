"""
Out-of-band signals flowing from the tool host back to the caller, and the
payloads of a nested sampling exchange.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

__all__ = [
    "LogLevel",
    "NotificationKind",
    "NotificationEvent",
    "SamplingRequest",
    "SamplingResult",
]


class NotificationKind(StrEnum):
    LOG = "log"
    PROGRESS = "progress"


class LogLevel(StrEnum):
    """Logging levels a tool host may attach to a log notification."""

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    ALERT = "alert"
    EMERGENCY = "emergency"


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """A log or progress signal tagged with the originating Turn's token."""

    token: str
    kind: NotificationKind
    message: str
    level: Optional[LogLevel] = None
    progress: Optional[float] = None
    total: float = 1.0
    call_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is NotificationKind.PROGRESS:
            if self.progress is None or not 0.0 <= self.progress <= 1.0:
                raise ValueError(f"progress must lie in [0.0, 1.0], got {self.progress!r}")
        elif self.level is None:
            raise ValueError("log notifications need a level")

    @classmethod
    def log(cls, token: str, level: LogLevel, message: str, *, call_id: str | None = None) -> "NotificationEvent":
        return cls(token=token, kind=NotificationKind.LOG, message=message, level=level, call_id=call_id)

    @classmethod
    def progress_update(
        cls, token: str, progress: float, message: str, *, call_id: str | None = None
    ) -> "NotificationEvent":
        return cls(
            token=token,
            kind=NotificationKind.PROGRESS,
            message=message,
            progress=progress,
            call_id=call_id,
        )


@dataclass(frozen=True, slots=True)
class SamplingRequest:
    """A tool host's request for the caller's model to generate text."""

    system_prompt: str
    user_prompt: str
    token: Optional[str] = None
    max_tokens: Optional[int] = None


@dataclass(frozen=True, slots=True)
class SamplingResult:
    """
    Outcome of a sampling request.

    ``declined`` and ``error`` are distinct: a caller without the sampling
    capability declines, a caller that tried and failed reports an error.
    """

    text: Optional[str] = None
    declined: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.declined and self.error is None and self.text is not None
