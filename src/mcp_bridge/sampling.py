"""
Sampling: a tool host asking the caller's model to generate text.

The tool host side is ``SamplingBridge``; the caller side is whatever
``SamplingHandler`` it was wired to, normally ``ModelSamplingHandler``.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Union

from mcp_bridge.errors import SamplingFailedError
from mcp_bridge.providers.base import BaseAsyncLLM
from mcp_bridge.types import ChatMessage, SamplingRequest, SamplingResult

__all__ = ["SamplingHandler", "SamplingBridge", "ModelSamplingHandler"]

SamplingHandler = Callable[[SamplingRequest], Awaitable[str]]


class SamplingBridge:
    """
    Sends nested content-generation requests to the caller.

    Args:
        handler: Caller-side coroutine that turns a SamplingRequest into text.
        supports_sampling: The caller's declared capability, either a flag or a
            zero-argument callable queried on every request.
        timeout: Seconds to wait for the caller before giving up.
    """

    def __init__(
        self,
        handler: Optional[SamplingHandler],
        *,
        supports_sampling: Union[bool, Callable[[], bool]] = True,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.handler = handler
        self._capability = supports_sampling if callable(supports_sampling) else (lambda: supports_sampling)
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def supports_sampling(self) -> bool:
        return self.handler is not None and bool(self._capability())

    async def request_sampling(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        token: str | None = None,
        max_tokens: int | None = None,
    ) -> SamplingResult:
        if not self.supports_sampling:
            self.logger.info("Sampling skipped for %s: caller has no sampling capability", token)
            return SamplingResult(declined=True)

        request = SamplingRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            token=token,
            max_tokens=max_tokens,
        )
        self.logger.info("Sending sampling request for %s", token)
        try:
            text = await asyncio.wait_for(self.handler(request), timeout=self.timeout)
        except TimeoutError:
            self.logger.warning("Sampling for %s timed out after %.1fs", token, self.timeout)
            return SamplingResult(error=f"sampling timed out after {self.timeout}s")
        except Exception as exc:
            self.logger.warning("Sampling for %s failed: %s", token, exc)
            return SamplingResult(error=str(exc) or exc.__class__.__name__)

        return SamplingResult(text=text or "")


class ModelSamplingHandler:
    """
    Caller-side sampling: asks the caller's own model for text.

    No tool declarations are sent, so the nested call cannot itself request
    a tool and sampling never nests more than one level deep.
    """

    def __init__(
        self,
        llm: BaseAsyncLLM,
        *,
        max_tokens: int = 100,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.llm = llm
        self.max_tokens = max_tokens
        self.logger = logger or logging.getLogger(__name__)

    async def __call__(self, request: SamplingRequest) -> str:
        self.logger.info("Sampling request received for %s", request.token)

        messages: list[ChatMessage] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.user_prompt})

        response = await self.llm.chat(
            messages,
            params={"max_tokens": request.max_tokens or self.max_tokens},
        )
        if response.is_error:
            raise SamplingFailedError(f"Caller model failed to sample: {response.error}")

        self.logger.info("Sampling response generated on the caller side. Size: %d", len(response.content))
        return response.content
