import asyncio
import itertools

import pytest

from mcp_bridge.driver import ModelRoundTripDriver
from mcp_bridge.errors import IllegalTransitionError
from mcp_bridge.executor import ToolExecutor
from mcp_bridge.orchestrator import DEFAULT_FAILURE_MESSAGE, ConversationOrchestrator
from mcp_bridge.registry import ToolRegistry
from mcp_bridge.sampling import ModelSamplingHandler, SamplingBridge
from mcp_bridge.turn import ProgressTokenRegistry, Turn, TurnState
from mcp_bridge.weather import WeatherService

from conftest import ScriptedLLM, text, tool_call


def _orchestrator(llm, gateway, channel, **kwargs):
    registry = ToolRegistry([WeatherService(gateway).spec()])
    executor = ToolExecutor(registry, channel, sampling=SamplingBridge(ModelSamplingHandler(llm)))
    return ConversationOrchestrator(ModelRoundTripDriver(llm, registry, executor, max_rounds=3), **kwargs)


class TestConversationOrchestrator:
    """Test the conversation entry point."""

    def test_handle_returns_final_text(self, gateway, channel, recorder):
        """Test handle returns final text."""
        llm = ScriptedLLM(tool_call(latitude=40.6317, longitude=22.9353), text("A poem"), text("10.4°C, enjoy."))
        orchestrator = _orchestrator(llm, gateway, channel)

        answer = asyncio.run(orchestrator.handle("weather in Thessaloniki"))

        assert answer == "10.4°C, enjoy."
        tokens = {e.token for e in recorder.events}
        assert len(tokens) == 1
        assert tokens.pop().startswith("token-")
        assert len(orchestrator.tokens) == 0

    def test_fresh_token_per_turn(self, gateway, channel):
        """Test fresh token per turn."""
        llm = ScriptedLLM(text("one"), text("two"))
        orchestrator = _orchestrator(llm, gateway, channel)

        first = asyncio.run(orchestrator.run("a"))
        second = asyncio.run(orchestrator.run("b"))

        assert first.token != second.token
        assert first.final_text == "one"
        assert second.final_text == "two"

    def test_model_failure_gives_single_failure_message(self, gateway, channel):
        """Test model failure gives single failure message."""
        llm = ScriptedLLM(tool_call(latitude=1, longitude=2), text("A poem"), ConnectionError("refused"))
        orchestrator = _orchestrator(llm, gateway, channel)

        turn = asyncio.run(orchestrator.run("weather"))
        answer = orchestrator.failure_text(turn.error)

        assert turn.state is TurnState.FAILED
        assert turn.transitions[-1] is TurnState.FAILED
        assert answer == f"{DEFAULT_FAILURE_MESSAGE} (model endpoint failure)"
        assert turn.final_text is None

    def test_runaway_loop_is_reported(self, gateway, channel):
        """Test runaway loop is reported."""
        llm = ScriptedLLM(*[tool_call(call_id=f"c{i}", latitude=1, longitude=2) for i in range(6)])
        orchestrator = _orchestrator(llm, gateway, channel, failure_message="Nope.")

        answer = asyncio.run(orchestrator.handle("loop forever"))

        assert answer == "Nope. (runaway loop)"

    def test_unexpected_error_is_contained(self, gateway, channel):
        """Test unexpected error is contained."""
        class BrokenDriver:
            async def run_turn(self, turn):
                raise KeyError("surprise")

        orchestrator = ConversationOrchestrator(BrokenDriver())

        assert asyncio.run(orchestrator.handle("x")) == DEFAULT_FAILURE_MESSAGE

    def test_concurrent_turns_are_isolated(self, gateway, channel, recorder):
        """Test concurrent turns are isolated."""
        orchestrator = _orchestrator(ScriptedLLM(), gateway, channel)

        async def both():
            llm_a = ScriptedLLM(tool_call(latitude=1, longitude=2), text("poem a"), text("a"))
            llm_b = ScriptedLLM(tool_call(latitude=3, longitude=4), text("poem b"), text("b"))
            a = _orchestrator(llm_a, gateway, channel, tokens=orchestrator.tokens)
            b = _orchestrator(llm_b, gateway, channel, tokens=orchestrator.tokens)
            return await asyncio.gather(a.run("a"), b.run("b"))

        first, second = asyncio.run(both())

        assert (first.final_text, second.final_text) == ("a", "b")
        for turn in (first, second):
            progress = [e.progress for e in recorder.events if e.token == turn.token and e.progress is not None]
            assert progress == [0.0, 0.5, 1.0]


class TestTurn:
    """Test the Turn state machine."""

    def test_state_machine(self):
        """Test the legal path through the Turn states."""
        turn = Turn(user_text="x", token="t")

        turn.advance(TurnState.MODEL_PENDING)
        turn.advance(TurnState.TOOL_PENDING)
        turn.advance(TurnState.MODEL_PENDING)
        turn.advance(TurnState.DONE)

        assert turn.is_terminal
        with pytest.raises(IllegalTransitionError):
            turn.advance(TurnState.MODEL_PENDING)

    def test_cannot_skip_model_call(self):
        """Test cannot skip model call."""
        with pytest.raises(IllegalTransitionError):
            Turn(user_text="x", token="t").advance(TurnState.TOOL_PENDING)

    def test_token_is_immutable(self):
        """Test token is immutable."""
        turn = Turn(user_text="x", token="t")

        with pytest.raises(AttributeError):
            turn.token = "other"

    def test_fail_is_idempotent_on_terminal_turns(self):
        """Test fail is idempotent on terminal turns."""
        turn = Turn(user_text="x", token="t")
        turn.fail(RuntimeError("first"))
        turn.fail(RuntimeError("second"))

        assert turn.transitions == [TurnState.STARTED, TurnState.FAILED]
        assert str(turn.error) == "second"


class TestProgressTokenRegistry:
    """Test progress token issuing."""

    def test_regenerates_on_collision(self):
        """Test a colliding token is regenerated."""
        tokens = ProgressTokenRegistry(factory=iter(["token-1", "token-1", "token-2"]).__next__)

        assert tokens.issue() == "token-1"
        assert tokens.issue() == "token-2"
        assert tokens.is_active("token-1")

        tokens.release("token-1")
        assert not tokens.is_active("token-1")

    def test_gives_up_after_max_attempts(self):
        """Test gives up after max attempts."""
        tokens = ProgressTokenRegistry(factory=itertools.repeat("same").__next__, max_attempts=3)
        tokens.issue()

        with pytest.raises(RuntimeError):
            tokens.issue()

    def test_default_tokens_are_unique(self):
        """Test default tokens are unique."""
        tokens = ProgressTokenRegistry()

        assert len({tokens.issue() for _ in range(100)}) == 100
