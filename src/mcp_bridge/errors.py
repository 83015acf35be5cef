"""
Error kinds raised across the bridge, plus translation of noisy provider
tracebacks into a unified `ModelEndpointError` while preserving the original
exception for full tracebacks.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

import anthropic
import openai

__all__: tuple[str, ...] = (
    "BridgeError",
    "InvalidArgumentsError",
    "UnknownToolError",
    "UpstreamUnavailableError",
    "SamplingFailedError",
    "ModelEndpointError",
    "RunawayLoopError",
    "IllegalTransitionError",
    "classify_error",
)


class BridgeError(RuntimeError):
    """Base class for every error the bridge raises.

    Attributes:
        original_exc: The underlying exception, if any.
    """

    kind: str = "bridge error"
    original_exc: Optional[Exception]

    def __init__(self, message: str, original_exc: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.original_exc = original_exc
        if original_exc is not None:
            self.__cause__ = original_exc


class InvalidArgumentsError(BridgeError, ValueError):
    """Tool arguments do not satisfy the tool's declared parameter schema."""

    kind = "invalid arguments"


class UnknownToolError(BridgeError, LookupError):
    """The model asked for a tool that is not in the catalog."""

    kind = "unknown tool"


class UpstreamUnavailableError(BridgeError):
    """The external service a tool depends on failed or timed out."""

    kind = "upstream unavailable"


class SamplingFailedError(BridgeError):
    """A nested sampling request failed at the transport or model level."""

    kind = "sampling failed"


class ModelEndpointError(BridgeError):
    """The model endpoint failed; terminal for the Turn."""

    kind = "model endpoint failure"


class RunawayLoopError(BridgeError):
    """The model kept requesting tools past the configured round limit."""

    kind = "runaway loop"


class IllegalTransitionError(BridgeError):
    kind = "illegal state transition"


API_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIError,
    anthropic.APIError,
)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    TimeoutError,
    ConnectionError,
)

RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.RateLimitError,
    anthropic.RateLimitError,
)


def classify_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> ModelEndpointError:
    """Wrap an SDK exception in ModelEndpointError with a friendly, concise message."""
    log = logger or logging.getLogger("mcp_bridge.errors")

    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate-limit exceeded - please retry later"
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem - unable to reach the LLM provider"
    elif isinstance(exc, API_ERRORS):
        status = getattr(exc, "status_code", "unknown")
        msg = f"Provider reported an error ({status})"
    else:
        msg = exc.__class__.__name__

    log.warning("Wrapping provider exception", extra={"exc": exc})
    return ModelEndpointError(f"{msg}: {exc}", exc)
