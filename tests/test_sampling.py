import asyncio

from mcp_bridge.sampling import ModelSamplingHandler, SamplingBridge
from mcp_bridge.types import SamplingRequest

from conftest import ScriptedLLM, text


class RecordingSampler:
    def __init__(self, reply="A poem", *, error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.requests: list[SamplingRequest] = []

    async def __call__(self, request):
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class TestSamplingBridge:
    """Test sampling requests sent from the tool host."""

    def test_declines_without_contacting_caller(self):
        """Test declines without contacting caller."""
        sampler = RecordingSampler()
        bridge = SamplingBridge(sampler, supports_sampling=False)

        result = asyncio.run(bridge.request_sampling("You are a poet!", "Rain", token="t"))

        assert result.declined is True
        assert result.error is None
        assert not result.ok
        assert sampler.requests == []

    def test_missing_handler_declines(self):
        """Test missing handler declines."""
        result = asyncio.run(SamplingBridge(None).request_sampling("s", "u"))

        assert result.declined is True

    def test_capability_is_queried_per_request(self):
        """Test capability is queried per request."""
        flags = iter([True, False])
        sampler = RecordingSampler()
        bridge = SamplingBridge(sampler, supports_sampling=lambda: next(flags))

        first = asyncio.run(bridge.request_sampling("s", "u"))
        second = asyncio.run(bridge.request_sampling("s", "u"))

        assert first.ok and first.text == "A poem"
        assert second.declined
        assert len(sampler.requests) == 1

    def test_success_carries_request_fields(self):
        """Test a successful request passes its fields to the handler."""
        sampler = RecordingSampler("Rain on the Thermaic gulf")
        bridge = SamplingBridge(sampler)

        result = asyncio.run(bridge.request_sampling("You are a poet!", "Rain", token="token-1", max_tokens=50))

        assert result.text == "Rain on the Thermaic gulf"
        assert sampler.requests == [SamplingRequest("You are a poet!", "Rain", "token-1", 50)]

    def test_handler_error_is_failure_not_decline(self):
        """Test handler error is failure not decline."""
        bridge = SamplingBridge(RecordingSampler(error=ConnectionError("reset by peer")))

        result = asyncio.run(bridge.request_sampling("s", "u"))

        assert result.declined is False
        assert result.error == "reset by peer"
        assert not result.ok

    def test_timeout_is_failure(self):
        """Test a timed out request counts as failed."""
        bridge = SamplingBridge(RecordingSampler(delay=1.0), timeout=0.01)

        result = asyncio.run(bridge.request_sampling("s", "u"))

        assert result.declined is False
        assert "timed out" in result.error


class TestModelSamplingHandler:
    """Test caller-side sampling with the caller's model."""

    def test_nested_call_has_no_tools(self):
        """Test nested call has no tools."""
        llm = ScriptedLLM(text("Thou art a mild day"))
        handler = ModelSamplingHandler(llm, max_tokens=100)

        reply = asyncio.run(handler(SamplingRequest("You are a poet!", "10.4C", token="t")))

        assert reply == "Thou art a mild day"
        request = llm.requests[0]
        assert request["messages"] == [
            {"role": "system", "content": "You are a poet!"},
            {"role": "user", "content": "10.4C"},
        ]
        assert request["params"]["max_tokens"] == 100
        assert "tools" not in request["params"]

    def test_model_error_raises_sampling_failure(self):
        """Test model error raises sampling failure."""
        llm = ScriptedLLM(ConnectionError("refused"))
        bridge = SamplingBridge(ModelSamplingHandler(llm))

        result = asyncio.run(bridge.request_sampling("s", "u"))

        assert result.error is not None
        assert "Caller model failed to sample" in result.error
