"""Base class for the model endpoint implementations."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, Sequence

from mcp_bridge.errors import classify_error
from mcp_bridge.params import normalize_params
from mcp_bridge.types import ChatMessage, ChatResponse

__all__ = ["BaseAsyncLLM", "RequestAdapter"]


class RequestAdapter(Protocol):
    """Protocol for adapting between the neutral chat format and a provider format."""

    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]:
        """Convert neutral messages and normalized params to a provider request."""
        ...

    def from_provider(self, raw: Any) -> ChatResponse:
        """Convert a provider response to a unified ChatResponse."""
        ...


class BaseAsyncLLM(ABC):
    """
    Base class for all LLM implementations. All implementations are async-first.
    """

    def __init__(
        self,
        model: str,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Initializes the base LLM client.

        Args:
            model: The identifier of the LLM model to be used.
            logger: Optional logger instance. If None, a logger named after
                    this module will be used.
            name: Optional name for this component, used in logging.
                  If None, defaults to the concrete class's name.
        """
        self.model = model
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    @abstractmethod
    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> Any:
        """
        Core asynchronous implementation for sending chat messages to the LLM.
        This method must be implemented by subclasses.

        Args:
            messages: A sequence of chat messages forming the conversation history.
            params: Normalized parameters for the chat completion request.

        Returns:
            The raw provider response.
        """
        ...

    @property
    @abstractmethod
    def adapter(self) -> RequestAdapter:
        """Request adapter for this provider."""
        ...

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        *,
        params: dict[str, Any] | None = None,
    ) -> ChatResponse:
        """
        Send a chat request and return a single response.

        Provider exceptions never escape; they come back as an error
        ChatResponse (see ``ChatResponse.raise_for_error``).
        """
        normalized_params = normalize_params(params)
        try:
            raw = await self._chat_impl(messages, normalized_params)
            return self.adapter.from_provider(raw)
        except Exception as exc:
            return self._wrap_error(exc)

    def _wrap_error(self, exc: Exception) -> ChatResponse:
        """Wrap exception into an error response."""
        err = classify_error(exc, self.logger)
        return ChatResponse(content="", error=str(err))

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")

    # --- lifecycle ---------------------------------------------------------
    async def aclose(self) -> None:
        """
        Close underlying async HTTP clients. Safe to call multiple times.
        """
        client = getattr(self, "_client", None)
        close = getattr(client, "close", None)
        if close:
            await close()

    async def __aenter__(self) -> "BaseAsyncLLM":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
