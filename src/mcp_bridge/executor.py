"""
Runs one tool call on the tool host side.

Tool-level failures become an error ``ToolCallResult`` so the model can see
them and explain them; only Turn-level problems propagate as exceptions.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from mcp_bridge.errors import InvalidArgumentsError, UpstreamUnavailableError
from mcp_bridge.notifications import NotificationChannel, ProgressReporter
from mcp_bridge.registry import ToolRegistry
from mcp_bridge.sampling import SamplingBridge
from mcp_bridge.types import LogLevel, SamplingResult, ToolCallRequest, ToolCallResult, ToolCallState

__all__ = ["ToolContext", "ToolExecutor"]


@dataclass
class ToolContext:
    """What a tool handler may use besides its arguments."""

    token: str
    call_id: str
    reporter: ProgressReporter
    sampling: Optional[SamplingBridge] = None
    states: list[ToolCallState] = field(default_factory=lambda: [ToolCallState.EXECUTING])

    @property
    def can_sample(self) -> bool:
        return self.sampling is not None and self.sampling.supports_sampling

    def log(self, level: LogLevel, message: str) -> None:
        self.reporter.log(level, message)

    def progress(self, value: float, message: str) -> float:
        return self.reporter.progress(value, message)

    async def sample(
        self, system_prompt: str, user_prompt: str, *, max_tokens: int | None = None
    ) -> SamplingResult:
        """Ask the caller's model for text; declines when no bridge is wired in."""
        if self.sampling is None:
            return SamplingResult(declined=True)
        self.states.append(ToolCallState.SAMPLING_PENDING)
        return await self.sampling.request_sampling(
            system_prompt, user_prompt, token=self.token, max_tokens=max_tokens
        )


class ToolExecutor:
    """
    Validates, runs and reports on tool calls.

    Args:
        registry: The tool catalog.
        channel: Where log and progress notifications go.
        sampling: Optional bridge handed to tools that want generated content.
        strict_arguments: Re-raise ``InvalidArgumentsError`` instead of turning
            it into an error result, which ends the Turn.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        channel: NotificationChannel,
        *,
        sampling: Optional[SamplingBridge] = None,
        strict_arguments: bool = False,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        self.registry = registry
        self.channel = channel
        self.sampling = sampling
        self.strict_arguments = strict_arguments
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    async def execute(
        self,
        request: ToolCallRequest,
        token: str,
        *,
        reporter: Optional[ProgressReporter] = None,
    ) -> ToolCallResult:
        """
        Run *request* and return its result.

        Pass the Turn's *reporter* when a Turn makes several tool calls so its
        progress keeps rising across them; without one the call gets its own.
        """
        spec = self.registry.resolve(request.name)
        try:
            arguments = spec.validate(request.arguments)
        except InvalidArgumentsError as exc:
            self._log(f"Rejected {request.name} call {request.id}: {exc}", logging.WARNING)
            if self.strict_arguments:
                raise
            return ToolCallResult(
                id=request.id,
                name=request.name,
                content=f"Error: invalid arguments for {request.name}: {exc}",
                is_error=True,
                states=[ToolCallState.COMPLETED],
            )

        if reporter is None:
            reporter = ProgressReporter(self.channel, token, logger=self.logger)
        reporter.call_id = request.id
        ctx = ToolContext(token=token, call_id=request.id, reporter=reporter, sampling=self.sampling)

        described = ", ".join(f"{k}={v}" for k, v in arguments.items())
        self._log(f"{request.name} called with {described}, progressToken={token}")
        ctx.log(LogLevel.INFO, f"{request.name} called with {described}")
        ctx.progress(0.0, f"Start {request.name}")

        try:
            text = await spec.handler(arguments, ctx)
        except UpstreamUnavailableError as exc:
            self._log(f"{request.name} failed upstream: {exc}", logging.WARNING)
            ctx.progress(1.0, "Task failed")
            content = f"Error: upstream unavailable: {exc}"
            is_error = True
        except Exception as exc:
            self.logger.exception(f"[{self.name}] {request.name} raised")
            ctx.progress(1.0, "Task failed")
            content = f"Error: {request.name} failed: {exc}"
            is_error = True
        else:
            ctx.progress(1.0, "Task completed")
            content = text
            is_error = False

        ctx.states.append(ToolCallState.COMPLETED)
        return ToolCallResult(
            id=request.id,
            name=request.name,
            content=content,
            is_error=is_error,
            states=list(ctx.states),
        )

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")
