"""
The caller's side of a Turn: model call, tool calls, model call again, until
the model answers without asking for a tool.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from mcp_bridge.errors import ModelEndpointError, RunawayLoopError
from mcp_bridge.executor import ToolExecutor
from mcp_bridge.notifications import ProgressReporter
from mcp_bridge.params import merge_params
from mcp_bridge.providers.base import BaseAsyncLLM
from mcp_bridge.registry import ToolRegistry
from mcp_bridge.turn import Turn, TurnState
from mcp_bridge.types import (
    ChatResponse,
    ToolCallRequest,
    ToolCallResult,
    assistant_message,
    tool_result_message,
    user_message,
)

__all__ = ["ModelRoundTripDriver", "DEFAULT_MAX_ROUNDS"]

DEFAULT_MAX_ROUNDS = 10


class ModelRoundTripDriver:
    """
    Drives one Turn to completion.

    Args:
        llm: The caller's model endpoint.
        registry: Tool catalog attached to every model call.
        executor: Runs the tool calls the model asks for.
        max_rounds: Most model calls a Turn may make; a model still asking
            for tools on the last one ends the Turn with ``RunawayLoopError``
            before those tools run.
        model_timeout: Seconds to wait for each model call.
        params: Default request params (temperature, max_tokens, ...).
    """

    def __init__(
        self,
        llm: BaseAsyncLLM,
        registry: ToolRegistry,
        executor: ToolExecutor,
        *,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
        model_timeout: float = 60.0,
        params: dict[str, Any] | None = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self.llm = llm
        self.registry = registry
        self.executor = executor
        self.max_rounds = max_rounds
        self.model_timeout = model_timeout
        self.params = params or {}
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    async def run_turn(self, turn: Turn) -> str:
        """Run *turn* until the model returns a plain answer and return that text."""
        turn.messages.append(user_message(turn.user_text))
        turn.advance(TurnState.MODEL_PENDING)
        reporter = ProgressReporter(self.executor.channel, turn.token, logger=self.logger)

        while True:
            response = await self._complete(turn)
            calls = response.tool_calls or []

            if not calls:
                turn.messages.append(assistant_message(response))
                turn.final_text = response.content
                turn.advance(TurnState.DONE)
                self._log(f"Turn {turn.token} done after {turn.model_calls} model call(s)")
                return response.content

            if turn.model_calls >= self.max_rounds:
                raise RunawayLoopError(
                    f"Model was still requesting tools after {self.max_rounds} round(s) in turn {turn.token}"
                )

            turn.advance(TurnState.TOOL_PENDING)
            turn.messages.append(assistant_message(response))
            for call in calls:
                result = await self._execute(call, turn, reporter)
                turn.messages.append(tool_result_message(result))
            turn.advance(TurnState.MODEL_PENDING)

    async def _complete(self, turn: Turn) -> ChatResponse:
        params = merge_params(self.params, {"tools": self.registry.catalog()})
        turn.model_calls += 1
        self._log(f"Model call {turn.model_calls} for {turn.token} ({len(turn.messages)} messages)")
        try:
            response = await asyncio.wait_for(
                self.llm.chat(list(turn.messages), params=params),
                timeout=self.model_timeout,
            )
        except TimeoutError as exc:
            raise ModelEndpointError(f"Model call timed out after {self.model_timeout}s", exc) from exc
        response.raise_for_error()
        return response

    async def _execute(self, call: ToolCallRequest, turn: Turn, reporter: ProgressReporter) -> ToolCallResult:
        # Unknown tools end the Turn; skipping one would leave the history
        # without a result for the model's call.
        self.registry.resolve(call.name)
        task = asyncio.ensure_future(self.executor.execute(call, turn.token, reporter=reporter))
        try:
            # Shielded so a cancelled Turn lets the tool finish; the result is dropped.
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            self._log(f"Turn {turn.token} cancelled while {call.name} was running; result will be discarded")
            raise

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")
