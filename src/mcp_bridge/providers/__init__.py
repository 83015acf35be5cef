from .base import BaseAsyncLLM, RequestAdapter
from .openai import OpenAILLM
from .anthropic import AnthropicLLM

__all__ = [
    "BaseAsyncLLM",
    "RequestAdapter",
    "OpenAILLM",
    "AnthropicLLM",
]
