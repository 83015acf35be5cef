from __future__ import annotations

import argparse
import asyncio
import logging

from mcp_bridge import (
    BridgeSettings,
    LoggingNotificationHandler,
    NotificationEvent,
    Provider,
    build_orchestrator,
)

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


async def weather_round_trip(provider: Provider, model: str, sampling: bool) -> None:
    """
    Run one Turn and watch the tool host's notifications arrive.

    1) Send the user prompt with the getTemperature tool declared
    2) The model emits a tool call; the tool host fetches the temperature
    3) The tool host asks the caller's model for a poem (sampling)
    4) The model answers using the tool result
    """
    settings = BridgeSettings.from_env().with_overrides(
        provider=provider, model=model, sampling_enabled=sampling
    )
    orchestrator = build_orchestrator(settings)
    channel = orchestrator.driver.executor.channel

    progress: list[float] = []

    def track(event: NotificationEvent) -> None:
        if event.progress is not None:
            progress.append(event.progress)

    channel.subscribe(LoggingNotificationHandler())
    channel.subscribe(track)

    turn = await orchestrator.run("What's the temperature in Lisbon right now? Make it poetic.")
    await orchestrator.driver.llm.aclose()

    logger.info("Turn %s went through %s", turn.token, " -> ".join(turn.transitions))
    logger.info("Progress seen: %s", progress)
    if turn.error is not None:
        logger.error("%s", orchestrator.failure_text(turn.error))
    else:
        logger.info("%s says: %s", provider.value.capitalize(), turn.final_text)


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=Provider.OPENAI.value,
    )
    parser.add_argument("--model", default="gpt-4o-mini")  # "claude-3-5-haiku-20241022"
    parser.add_argument("--no-sampling", action="store_true")
    args = parser.parse_args()

    asyncio.run(weather_round_trip(Provider(args.provider), args.model, not args.no_sampling))
