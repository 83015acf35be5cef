from __future__ import annotations

import logging
from typing import Any, Optional, Self, Sequence

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from mcp_bridge.adapters import OpenAIRequestAdapter
from mcp_bridge.providers.base import BaseAsyncLLM, RequestAdapter
from mcp_bridge.types import ChatMessage


class OpenAILLM(BaseAsyncLLM):
    """
    OpenAI LLM implementation (async-only).

    Use ``OpenAILLM.from_client`` when you already have an ``AsyncOpenAI`` instance,
    e.g. one pointed at a local OpenAI-compatible server such as Ollama.
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
        self._client = AsyncOpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = OpenAIRequestAdapter()

    # Alternate constructor
    @classmethod
    def from_client(
        cls,
        model: str,
        client: AsyncOpenAI,
        *,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """
        Build an ``OpenAILLM`` around an already-configured ``AsyncOpenAI`` client.
        """
        if not isinstance(client, AsyncOpenAI):
            raise TypeError(
                f"OpenAILLM.from_client expects AsyncOpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseAsyncLLM.__init__(self, model=model, logger=logger, name=name)
        self._client = client
        self._adapter = OpenAIRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        return self._adapter

    async def _chat_impl(
        self,
        messages: Sequence[ChatMessage],
        params: dict[str, Any],
    ) -> ChatCompletion:
        args = {
            "model": self.model,
            **self._adapter.to_provider(messages, params),
        }

        self._log(
            f"Sending request to OpenAI model {self.model} "
            f"({len(args['messages'])} messages, {len(args.get('tools', []))} tools)"
        )

        response: ChatCompletion = await self._client.chat.completions.create(**args)
        return response
