from __future__ import annotations

import logging
from typing import Optional

from mcp_bridge.driver import ModelRoundTripDriver
from mcp_bridge.errors import BridgeError
from mcp_bridge.turn import ProgressTokenRegistry, Turn

__all__ = ["ConversationOrchestrator", "DEFAULT_FAILURE_MESSAGE"]

DEFAULT_FAILURE_MESSAGE = "Sorry, the request could not be completed."


class ConversationOrchestrator:
    """
    Single entry point: one user request in, one final text out.

    Every call gets a fresh correlation token. Any error that reaches this
    level turns into one failure message; partial output is never returned.
    """

    def __init__(
        self,
        driver: ModelRoundTripDriver,
        *,
        tokens: Optional[ProgressTokenRegistry] = None,
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.driver = driver
        self.tokens = tokens or ProgressTokenRegistry()
        self.failure_message = failure_message
        self.logger = logger or logging.getLogger(__name__)

    async def run(self, user_text: str) -> Turn:
        """Run one Turn and return it, finished in ``DONE`` or ``FAILED``."""
        turn = Turn(user_text=user_text, token=self.tokens.issue())
        self.logger.info("Starting turn %s", turn.token)
        try:
            await self.driver.run_turn(turn)
        except BridgeError as exc:
            self.logger.error("Turn %s failed (%s): %s", turn.token, exc.kind, exc)
            turn.fail(exc)
        except Exception as exc:
            self.logger.exception("Turn %s failed unexpectedly", turn.token)
            turn.fail(exc)
        finally:
            self.tokens.release(turn.token)
        return turn

    async def handle(self, user_text: str) -> str:
        turn = await self.run(user_text)
        if turn.error is not None:
            return self.failure_text(turn.error)
        return turn.final_text or ""

    def failure_text(self, exc: BaseException) -> str:
        kind = getattr(exc, "kind", None)
        return f"{self.failure_message} ({kind})" if kind else self.failure_message
