from .chat import (
    ChatMessage,
    ChatResponse,
    assistant_message,
    tool_result_message,
    user_message,
)
from .events import (
    LogLevel,
    NotificationEvent,
    NotificationKind,
    SamplingRequest,
    SamplingResult,
)
from .tool import ToolCallRequest, ToolCallResult, ToolCallState

__all__ = [
    "ChatMessage",
    "ChatResponse",
    "assistant_message",
    "tool_result_message",
    "user_message",
    "LogLevel",
    "NotificationEvent",
    "NotificationKind",
    "SamplingRequest",
    "SamplingResult",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolCallState",
]
