from __future__ import annotations

import logging
from typing import Any, Optional

from mcp_bridge.executor import ToolContext
from mcp_bridge.registry import ToolParam, ToolSpec
from mcp_bridge.types import LogLevel
from mcp_bridge.weather.gateway import OpenMeteoGateway, WeatherInfo

POET_SYSTEM_PROMPT = "You are a poet!"


class WeatherService:
    """
    The ``getTemperature`` tool.

    Looks up the current temperature and, when creative augmentation is on,
    asks the caller's model for a poem about it through sampling.
    """

    tool_name = "getTemperature"

    def __init__(
        self,
        gateway: OpenMeteoGateway,
        *,
        creative: bool = True,
        poem_max_tokens: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.gateway = gateway
        self.creative = creative
        self.poem_max_tokens = poem_max_tokens
        self.logger = logger or logging.getLogger(__name__)

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.tool_name,
            description="Get the temperature (in celsius) for a specific location",
            handler=self.get_temperature,
            parameters={
                "latitude": ToolParam("number", "The location latitude"),
                "longitude": ToolParam("number", "The location longitude"),
            },
        )

    async def get_temperature(self, arguments: dict[str, Any], ctx: ToolContext) -> str:
        weather = await self.gateway.get_weather(arguments["latitude"], arguments["longitude"])
        self.logger.info("Weather info: %s", weather)

        poem = await self.generate_poem(ctx, weather) if self.creative else None

        final_response = format_final_response(poem, weather)
        self.logger.info("Final response:\n%s", final_response)
        return final_response

    async def generate_poem(self, ctx: ToolContext, weather: WeatherInfo) -> Optional[str]:
        if not ctx.can_sample:
            self._sampling_declined(ctx)
            return None

        ctx.progress(0.5, "Start sampling")

        user_prompt = (
            f"Weather forecast: {weather.temperature}°C\n"
            f"Location: ({weather.latitude}, {weather.longitude})\n"
            "Please write an epic Shakespearean-style poem about this weather.\n"
        )
        result = await ctx.sample(POET_SYSTEM_PROMPT, user_prompt, max_tokens=self.poem_max_tokens)

        if result.declined:
            self._sampling_declined(ctx)
            return None
        if result.error is not None:
            self.logger.warning("Poem sampling failed: %s", result.error)
            ctx.log(LogLevel.WARNING, f"Sampling failed, answering without a poem: {result.error}")
            return None

        self.logger.info("Poem is successfully generated on the caller side. Size: %d", len(result.text or ""))
        return result.text

    def _sampling_declined(self, ctx: ToolContext) -> None:
        self.logger.info("Sampling skipped, the caller doesn't provide sampling capability")
        ctx.log(
            LogLevel.WARNING,
            "Tool host cannot perform sampling, because the caller doesn't provide sampling capability",
        )


def format_final_response(poem: Optional[str], weather: WeatherInfo) -> str:
    poem_context = f"Weather Poem:\n{poem}\n" if poem and poem.strip() else ""
    return (
        f"{poem_context}"
        f"Weather details: {weather.temperature:.2f}°C at ({weather.latitude:.4f}, {weather.longitude:.4f})\n"
    )
