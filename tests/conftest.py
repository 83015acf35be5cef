"""Shared fakes: a scripted model, a canned weather gateway, an event recorder."""

from __future__ import annotations

import copy
from typing import Any, Sequence

import pytest

from mcp_bridge.errors import UpstreamUnavailableError
from mcp_bridge.notifications import NotificationChannel
from mcp_bridge.providers.base import BaseAsyncLLM
from mcp_bridge.types import ChatMessage, ChatResponse, NotificationEvent, ToolCallRequest
from mcp_bridge.weather import WeatherInfo


class _PassthroughAdapter:
    def to_provider(self, messages: Sequence[ChatMessage], params: dict[str, Any]) -> dict[str, Any]:
        return {"messages": list(messages), **params}

    def from_provider(self, raw: Any) -> ChatResponse:
        return raw


class ScriptedLLM(BaseAsyncLLM):
    """Returns queued responses in order and records every request it saw."""

    def __init__(self, *responses: ChatResponse | Exception) -> None:
        super().__init__(model="scripted")
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self._adapter = _PassthroughAdapter()

    @property
    def adapter(self) -> _PassthroughAdapter:
        return self._adapter

    async def _chat_impl(self, messages: Sequence[ChatMessage], params: dict[str, Any]) -> Any:
        self.requests.append({"messages": copy.deepcopy(list(messages)), "params": params})
        if not self.responses:
            raise AssertionError("ScriptedLLM ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def text(content: str) -> ChatResponse:
    return ChatResponse(content=content)


def tool_call(name: str = "getTemperature", call_id: str = "call_1", **arguments: Any) -> ChatResponse:
    return ChatResponse(content="", tool_calls=[ToolCallRequest(id=call_id, name=name, arguments=arguments)])


class FakeGateway:
    def __init__(self, temperature: float = 10.4, *, error: Exception | None = None) -> None:
        self.temperature = temperature
        self.error = error
        self.calls: list[tuple[float, float]] = []

    async def get_weather(self, latitude: float, longitude: float) -> WeatherInfo:
        self.calls.append((latitude, longitude))
        if self.error is not None:
            raise self.error
        return WeatherInfo(latitude, longitude, self.temperature)


class RecordingHandler:
    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    def __call__(self, event: NotificationEvent) -> None:
        self.events.append(event)

    @property
    def progress(self) -> list[float]:
        return [e.progress for e in self.events if e.progress is not None]


@pytest.fixture
def channel() -> NotificationChannel:
    return NotificationChannel()


@pytest.fixture
def recorder(channel: NotificationChannel) -> RecordingHandler:
    handler = RecordingHandler()
    channel.subscribe(handler)
    return handler


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def failing_gateway() -> FakeGateway:
    return FakeGateway(error=UpstreamUnavailableError("Open-Meteo request failed: 503"))
