"""
Per-Turn state: the correlation token, the message history and the state
machine a Turn moves through.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Final, Optional

from mcp_bridge.errors import IllegalTransitionError
from mcp_bridge.types import ChatMessage

__all__ = ["TurnState", "Turn", "ProgressTokenRegistry", "new_progress_token"]


class TurnState(StrEnum):
    STARTED = "started"
    MODEL_PENDING = "model_pending"
    TOOL_PENDING = "tool_pending"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Final[dict[TurnState, frozenset[TurnState]]] = {
    TurnState.STARTED: frozenset({TurnState.MODEL_PENDING, TurnState.FAILED}),
    TurnState.MODEL_PENDING: frozenset({TurnState.TOOL_PENDING, TurnState.DONE, TurnState.FAILED}),
    TurnState.TOOL_PENDING: frozenset({TurnState.MODEL_PENDING, TurnState.FAILED}),
    TurnState.DONE: frozenset(),
    TurnState.FAILED: frozenset(),
}


def new_progress_token() -> str:
    return f"token-{uuid.uuid4().hex}"


@dataclass(eq=False)
class Turn:
    """One top-level user request through to a final answer."""

    user_text: str
    token: str
    messages: list[ChatMessage] = field(default_factory=list)
    state: TurnState = TurnState.STARTED
    transitions: list[TurnState] = field(default_factory=lambda: [TurnState.STARTED])
    model_calls: int = 0
    final_text: Optional[str] = None
    error: Optional[BaseException] = None

    def __setattr__(self, name: str, value: object) -> None:
        if name == "token" and "token" in self.__dict__:
            raise AttributeError("a Turn's token is immutable once assigned")
        super().__setattr__(name, value)

    @property
    def is_terminal(self) -> bool:
        return self.state in (TurnState.DONE, TurnState.FAILED)

    def advance(self, state: TurnState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise IllegalTransitionError(f"Turn {self.token}: {self.state} -> {state} is not allowed")
        self.state = state
        self.transitions.append(state)

    def fail(self, exc: BaseException) -> None:
        self.error = exc
        if not self.is_terminal:
            self.advance(TurnState.FAILED)


class ProgressTokenRegistry:
    """Issues correlation tokens that are unique among the Turns in flight."""

    def __init__(self, factory: Callable[[], str] = new_progress_token, max_attempts: int = 16) -> None:
        self._factory = factory
        self._max_attempts = max_attempts
        self._active: set[str] = set()
        self._lock = threading.Lock()

    def issue(self) -> str:
        with self._lock:
            for _ in range(self._max_attempts):
                token = self._factory()
                if token not in self._active:
                    self._active.add(token)
                    return token
        raise RuntimeError(f"Could not issue a unique progress token after {self._max_attempts} attempts")

    def release(self, token: str) -> None:
        with self._lock:
            self._active.discard(token)

    def is_active(self, token: str) -> bool:
        with self._lock:
            return token in self._active

    def __len__(self) -> int:
        with self._lock:
            return len(self._active)
