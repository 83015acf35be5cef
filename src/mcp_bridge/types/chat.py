"""Unified chat response and provider-neutral history messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from mcp_bridge.errors import ModelEndpointError
from mcp_bridge.types.tool import ToolCallRequest, ToolCallResult

# Type alias for chat messages
ChatMessage = dict[str, Any]


@dataclass
class ChatResponse:
    """Unified response object for all LLM providers."""

    content: str
    tool_calls: list[ToolCallRequest] | None = None
    raw: Any = None
    error: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def raise_for_error(self) -> None:
        if self.is_error:
            raise ModelEndpointError(self.error)

    def __repr__(self) -> str:
        if self.is_error:
            return f"{self.__class__.__name__}(error={self.error!r})"
        preview = self.content[:75] + "..." if len(self.content) > 75 else self.content
        calls = [tc.name for tc in self.tool_calls or []]
        return f"{self.__class__.__name__}(content={preview!r}, tool_calls={calls!r})"


def user_message(text: str) -> ChatMessage:
    return {"role": "user", "content": text}


def assistant_message(response: ChatResponse) -> ChatMessage:
    """
    Build the neutral assistant history entry for a model response.

    Tool call arguments stay as dicts here; adapters serialize them the way
    their provider expects.
    """
    message: ChatMessage = {"role": "assistant", "content": response.content or None}
    if response.tool_calls:
        message["tool_calls"] = [
            {
                "id": tc.id,
                "type": "function",
                "function": {"name": tc.name, "arguments": dict(tc.arguments)},
            }
            for tc in response.tool_calls
        ]
    elif message["content"] is None:
        message["content"] = ""
    return message


def tool_result_message(result: ToolCallResult) -> ChatMessage:
    return {
        "role": "tool",
        "tool_call_id": result.id,
        "name": result.name,
        "content": result.content,
    }
