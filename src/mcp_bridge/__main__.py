"""Run one weather round trip from the command line.

Example::

    $ OPENAI_API_KEY=sk-... python -m mcp_bridge "What's the weather in Lisbon?"

"""
from __future__ import annotations

import argparse
import asyncio
import logging

from mcp_bridge.config import BridgeSettings, positive_int
from mcp_bridge.factory import build_orchestrator
from mcp_bridge.notifications import LoggingNotificationHandler
from mcp_bridge.provider import Provider

logger = logging.getLogger("mcp_bridge")

DEFAULT_PROMPT = (
    "Check the weather in Thessaloniki right now and show the creative response!\n"
    "Please incorporate all creative responses from all LLM providers.\n"
)


async def run(prompt: str, settings: BridgeSettings) -> str:
    orchestrator = build_orchestrator(settings)
    orchestrator.driver.executor.channel.subscribe(LoggingNotificationHandler())

    logger.info("User prompt:\n%s", prompt)
    try:
        answer = await orchestrator.handle(prompt)
    finally:
        await orchestrator.driver.llm.aclose()
    logger.info("Final answer:\n%s", answer)
    return answer


def _max_rounds(value: str) -> int:
    try:
        return positive_int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="mcp_bridge", description=__doc__.splitlines()[0])
    parser.add_argument("prompt", nargs="?", default=DEFAULT_PROMPT)
    parser.add_argument("--provider", choices=[p.value for p in Provider])
    parser.add_argument("--model")
    parser.add_argument("--max-rounds", type=_max_rounds, help="model calls per Turn")
    parser.add_argument("--no-sampling", action="store_true", help="caller declines sampling requests")
    parser.add_argument("--no-poem", action="store_true", help="tool host skips creative augmentation")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = BridgeSettings.from_env().with_overrides(
        provider=Provider(args.provider) if args.provider else None,
        model=args.model,
        max_rounds=args.max_rounds,
        sampling_enabled=False if args.no_sampling else None,
        creative=False if args.no_poem else None,
    )
    print(asyncio.run(run(args.prompt, settings)))


if __name__ == "__main__":
    main()
