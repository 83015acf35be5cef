"""Tests for the OpenAI and Anthropic request adapters."""

import json

import pytest
from anthropic.types import Message, TextBlock, ToolUseBlock, Usage
from openai.types.chat import ChatCompletion, ChatCompletionMessage
from openai.types.chat.chat_completion import Choice
from openai.types.chat.chat_completion_message_tool_call import (
    ChatCompletionMessageToolCall,
    Function as ToolCallFunction,
)

from mcp_bridge.adapters import AnthropicRequestAdapter, OpenAIRequestAdapter
from mcp_bridge.params import normalize_params

WEATHER_TOOL = {
    "type": "function",
    "function": {
        "name": "getTemperature",
        "description": "Get the temperature (in celsius) for a specific location",
        "parameters": {
            "type": "object",
            "properties": {"latitude": {"type": "number"}, "longitude": {"type": "number"}},
            "required": ["latitude", "longitude"],
        },
    },
}

HISTORY = [
    {"role": "user", "content": "Weather in Thessaloniki?"},
    {
        "role": "assistant",
        "content": None,
        "tool_calls": [
            {
                "id": "call_1",
                "type": "function",
                "function": {"name": "getTemperature", "arguments": {"latitude": 40.6317, "longitude": 22.9353}},
            }
        ],
    },
    {"role": "tool", "tool_call_id": "call_1", "name": "getTemperature", "content": "Weather details: 10.40°C"},
]


def _completion(message: ChatCompletionMessage) -> ChatCompletion:
    return ChatCompletion(
        id="cmpl-1",
        choices=[Choice(finish_reason="tool_calls", index=0, message=message)],
        created=0,
        model="gpt-4o-mini",
        object="chat.completion",
    )


class TestOpenAIRequestAdapter:
    """Test conversion between neutral history and OpenAI requests."""

    @pytest.fixture
    def adapter(self):
        return OpenAIRequestAdapter()

    def test_to_provider_basic(self, adapter):
        """Test basic request conversion with tools and params."""
        result = adapter.to_provider(
            [{"role": "user", "content": "Hello"}],
            normalize_params({"temperature": 0.7, "max_tokens": 100}),
        )

        assert result["messages"] == [{"role": "user", "content": "Hello"}]
        assert result["temperature"] == 0.7
        assert result["max_tokens"] == 100
        assert "extra" not in result
        assert "tools" not in result

    def test_tool_call_arguments_are_serialized(self, adapter):
        """Test tool call arguments are serialized."""
        result = adapter.to_provider(HISTORY, normalize_params({"tools": [WEATHER_TOOL]}))

        assistant = result["messages"][1]
        assert assistant["content"] is None
        arguments = assistant["tool_calls"][0]["function"]["arguments"]
        assert json.loads(arguments) == {"latitude": 40.6317, "longitude": 22.9353}
        assert result["messages"][2]["tool_call_id"] == "call_1"
        assert result["tools"] == [WEATHER_TOOL]

    def test_extra_params_are_flattened(self, adapter):
        """Test extra params are flattened."""
        result = adapter.to_provider([{"role": "user", "content": "x"}], normalize_params({"reasoning_effort": "low"}))

        assert result["reasoning_effort"] == "low"

    def test_from_provider_reads_tool_calls(self, adapter):
        """Test tool calls are read from an OpenAI completion."""
        call = ChatCompletionMessageToolCall(
            id="call_1",
            type="function",
            function=ToolCallFunction(name="getTemperature", arguments='{"latitude": 40.6, "longitude": 22.9}'),
        )
        response = adapter.from_provider(_completion(ChatCompletionMessage(role="assistant", tool_calls=[call])))

        assert response.content == ""
        assert len(response.tool_calls) == 1
        assert response.tool_calls[0].name == "getTemperature"
        assert response.tool_calls[0].arguments == {"latitude": 40.6, "longitude": 22.9}

    def test_invalid_tool_call_arguments_become_empty_dict(self, adapter):
        """Test invalid tool call arguments become empty dict."""
        call = ChatCompletionMessageToolCall(
            id="id1", type="function", function=ToolCallFunction(name="test", arguments="{not valid json")
        )
        response = adapter.from_provider(_completion(ChatCompletionMessage(role="assistant", tool_calls=[call])))

        assert response.tool_calls is not None
        assert response.tool_calls[0].id == "id1"
        assert response.tool_calls[0].arguments == {}

    def test_from_provider_plain_text(self, adapter):
        """Test a plain text completion has no tool calls."""
        response = adapter.from_provider(_completion(ChatCompletionMessage(role="assistant", content="Sunny.")))

        assert response.content == "Sunny."
        assert response.tool_calls is None


class TestAnthropicRequestAdapter:
    """Test conversion between neutral history and Anthropic requests."""

    @pytest.fixture
    def adapter(self):
        return AnthropicRequestAdapter()

    def test_system_prompt_is_hoisted(self, adapter):
        """Test system prompt is hoisted."""
        result = adapter.to_provider(
            [{"role": "system", "content": "You are a poet!"}, {"role": "user", "content": "Rain"}],
            normalize_params({"max_tokens": 100}),
        )

        assert result["system"] == "You are a poet!"
        assert result["messages"] == [{"role": "user", "content": "Rain"}]
        assert result["max_tokens"] == 100

    def test_tool_round_trip_shapes(self, adapter):
        """Test tool_use and tool_result block shapes."""
        result = adapter.to_provider(HISTORY, normalize_params({"tools": [WEATHER_TOOL], "stop": "END"}))

        assistant, tool_result = result["messages"][1], result["messages"][2]
        assert assistant["role"] == "assistant"
        assert assistant["content"] == [
            {
                "type": "tool_use",
                "id": "call_1",
                "name": "getTemperature",
                "input": {"latitude": 40.6317, "longitude": 22.9353},
            }
        ]
        assert tool_result["role"] == "user"
        assert tool_result["content"][0]["type"] == "tool_result"
        assert tool_result["content"][0]["tool_use_id"] == "call_1"
        assert result["tools"][0]["name"] == "getTemperature"
        assert result["tools"][0]["input_schema"]["required"] == ["latitude", "longitude"]
        assert result["stop_sequences"] == ["END"]
        assert result["max_tokens"] == 4096
        assert "system" not in result

    def test_consecutive_tool_results_share_one_message(self, adapter):
        """Test consecutive tool results share one message."""
        history = HISTORY + [{"role": "tool", "tool_call_id": "call_2", "content": "second"}]

        result = adapter.to_provider(history, normalize_params({}))

        assert len(result["messages"]) == 3
        assert [b["tool_use_id"] for b in result["messages"][2]["content"]] == ["call_1", "call_2"]

    def test_from_provider(self, adapter):
        """Test text and tool_use blocks are read from an Anthropic message."""
        raw = Message(
            id="msg_1",
            type="message",
            role="assistant",
            model="claude-3-5-haiku-20241022",
            content=[
                TextBlock(type="text", text="Let me check."),
                ToolUseBlock(type="tool_use", id="tu_1", name="getTemperature", input={"latitude": 1, "longitude": 2}),
            ],
            stop_reason="tool_use",
            usage=Usage(input_tokens=1, output_tokens=1),
        )

        response = adapter.from_provider(raw)

        assert response.content == "Let me check."
        assert response.tool_calls[0].id == "tu_1"
        assert response.tool_calls[0].arguments == {"latitude": 1, "longitude": 2}
