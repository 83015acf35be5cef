"""
Provider-neutral dataclasses for tool use.

They are intentionally minimal: everything provider-specific lives in adapters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

__all__ = ["ToolCallRequest", "ToolCallResult", "ToolCallState"]


class ToolCallState(StrEnum):
    EXECUTING = "executing"
    SAMPLING_PENDING = "sampling_pending"
    COMPLETED = "completed"


@dataclass(slots=True)
class ToolCallRequest:
    """A model-agnostic request emitted by the LLM to call a tool."""
    id: str
    name: str
    arguments: dict[str, Any]


@dataclass(slots=True)
class ToolCallResult:
    """Payload to send back to the LLM after the tool finished running."""
    id: str                     # must match the request id
    name: str
    content: str
    is_error: bool = False
    states: list[ToolCallState] = field(default_factory=list)
