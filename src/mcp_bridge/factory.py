from __future__ import annotations

import logging
from typing import Any, Type

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from mcp_bridge.config import BridgeSettings
from mcp_bridge.driver import ModelRoundTripDriver
from mcp_bridge.executor import ToolExecutor
from mcp_bridge.notifications import NotificationChannel
from mcp_bridge.orchestrator import ConversationOrchestrator
from mcp_bridge.provider import Provider, get_api_key
from mcp_bridge.providers import AnthropicLLM, BaseAsyncLLM, OpenAILLM
from mcp_bridge.registry import ToolRegistry
from mcp_bridge.sampling import ModelSamplingHandler, SamplingBridge
from mcp_bridge.weather import OpenMeteoGateway, WeatherService

__all__ = ["create_llm", "build_orchestrator"]

# map Provider enum to its LLM implementation
_LLM_REGISTRY: dict[Provider, Type[OpenAILLM] | Type[AnthropicLLM]] = {
    Provider.OPENAI: OpenAILLM,
    Provider.ANTHROPIC: AnthropicLLM,
}


def create_llm(
    provider: Provider,
    model: str,
    *,
    api_key: str | None = None,
    client: AsyncOpenAI | AsyncAnthropic | None = None,
    logger: logging.Logger | None = None,
    **provider_kwargs: Any,
) -> BaseAsyncLLM:
    """
    Factory for creating any supported LLM.

    Args:
        provider: Which provider to use (OPENAI, ANTHROPIC).
        model: Model identifier (e.g. "gpt-4o-mini").
        api_key: Overrides automatic lookup; if omitted, pulled from env.
        client: Optional pre-configured SDK client (AsyncOpenAI for OPENAI,
            AsyncAnthropic for ANTHROPIC), used verbatim.
        logger: Optional custom logger.
        **provider_kwargs: Any extra args to pass through (timeout, max_retries, base_url).
    """
    try:
        llm_cls = _LLM_REGISTRY[provider]
    except KeyError as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    if client is not None:  # use caller-supplied client verbatim
        return llm_cls.from_client(model, client, logger=logger)  # type: ignore[arg-type]

    key = api_key or get_api_key(provider)
    return llm_cls(model, api_key=key, logger=logger, **provider_kwargs)


def build_orchestrator(
    settings: BridgeSettings | None = None,
    *,
    llm: BaseAsyncLLM | None = None,
    channel: NotificationChannel | None = None,
    gateway: OpenMeteoGateway | None = None,
) -> ConversationOrchestrator:
    """
    Wire caller and tool host together for the weather round trip.

    The same model serves both the Turn and the nested sampling requests.
    """
    settings = settings or BridgeSettings.from_env()
    if llm is None:
        kwargs: dict[str, Any] = {"timeout": settings.model_timeout}
        if settings.base_url:
            kwargs["base_url"] = settings.base_url
        llm = create_llm(settings.provider, settings.model, **kwargs)

    channel = channel or NotificationChannel()
    gateway = gateway or OpenMeteoGateway(settings.open_meteo_url, timeout=settings.open_meteo_timeout)

    sampling = SamplingBridge(
        ModelSamplingHandler(llm, max_tokens=settings.sampling_max_tokens),
        supports_sampling=settings.sampling_enabled,
        timeout=settings.sampling_timeout,
    )

    registry = ToolRegistry()
    registry.register(
        WeatherService(gateway, creative=settings.creative, poem_max_tokens=settings.sampling_max_tokens).spec()
    )

    executor = ToolExecutor(registry, channel, sampling=sampling, strict_arguments=settings.strict_arguments)
    driver = ModelRoundTripDriver(
        llm,
        registry,
        executor,
        max_rounds=settings.max_rounds,
        model_timeout=settings.model_timeout,
    )
    return ConversationOrchestrator(driver)
