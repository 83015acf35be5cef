from __future__ import annotations

import logging
from typing import Any, Optional, Self, Sequence

from anthropic import AsyncAnthropic
from anthropic.types import Message

from mcp_bridge.adapters import AnthropicRequestAdapter
from mcp_bridge.providers.base import BaseAsyncLLM, RequestAdapter
from mcp_bridge.types import ChatMessage


class AnthropicLLM(BaseAsyncLLM):
    """
    Anthropic LLM implementation (async-only).

    Use ``AnthropicLLM.from_client`` when you already have an ``AsyncAnthropic`` instance.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 60.0,
        max_retries: int = 2,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(model=model, logger=logger, name=name)
        self._client = AsyncAnthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = AnthropicRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncAnthropic,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Wrap an existing ``AsyncAnthropic`` client.
        """
        if not isinstance(client, AsyncAnthropic):
            raise TypeError(
                f"AnthropicLLM.from_client expects AsyncAnthropic; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseAsyncLLM.__init__(self, model=model, logger=logger, name=name)
        self._client = client
        self._adapter = AnthropicRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        return self._adapter

    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> Message:
        args = {
            "model": self.model,
            **self._adapter.to_provider(messages, params),
        }

        self._log(f"Sending request to Anthropic model {self.model}")

        response: Message = await self._client.messages.create(**args)
        return response
