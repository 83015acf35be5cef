"""
MCP Bridge - bidirectional tool invocation and sampling between a model-owning
caller and a tool host.
"""

from .config import BridgeSettings
from .driver import ModelRoundTripDriver
from .errors import (
    BridgeError,
    InvalidArgumentsError,
    ModelEndpointError,
    RunawayLoopError,
    SamplingFailedError,
    UnknownToolError,
    UpstreamUnavailableError,
)
from .executor import ToolContext, ToolExecutor
from .factory import build_orchestrator, create_llm
from .notifications import LoggingNotificationHandler, NotificationChannel, ProgressReporter
from .orchestrator import ConversationOrchestrator
from .provider import Provider, get_api_key
from .providers import AnthropicLLM, BaseAsyncLLM, OpenAILLM
from .registry import ToolParam, ToolRegistry, ToolSpec
from .sampling import ModelSamplingHandler, SamplingBridge
from .turn import ProgressTokenRegistry, Turn, TurnState
from .types import (
    ChatMessage,
    ChatResponse,
    NotificationEvent,
    SamplingResult,
    ToolCallRequest,
    ToolCallResult,
)

__version__ = "0.1.0"

__all__ = [
    "BridgeSettings",
    "ModelRoundTripDriver",
    "BridgeError",
    "InvalidArgumentsError",
    "ModelEndpointError",
    "RunawayLoopError",
    "SamplingFailedError",
    "UnknownToolError",
    "UpstreamUnavailableError",
    "ToolContext",
    "ToolExecutor",
    "build_orchestrator",
    "create_llm",
    "LoggingNotificationHandler",
    "NotificationChannel",
    "ProgressReporter",
    "ConversationOrchestrator",
    "Provider",
    "get_api_key",
    "AnthropicLLM",
    "BaseAsyncLLM",
    "OpenAILLM",
    "ToolParam",
    "ToolRegistry",
    "ToolSpec",
    "ModelSamplingHandler",
    "SamplingBridge",
    "ProgressTokenRegistry",
    "Turn",
    "TurnState",
    "ChatMessage",
    "ChatResponse",
    "NotificationEvent",
    "SamplingResult",
    "ToolCallRequest",
    "ToolCallResult",
]
