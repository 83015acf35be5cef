"""OpenAI adapter for pure request/response transformations."""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from openai.types.chat import ChatCompletion

from mcp_bridge.types import ChatMessage, ChatResponse, ToolCallRequest

_logger = logging.getLogger(__name__)


class OpenAIRequestAdapter:
    """Adapter for converting between the neutral history and OpenAI format."""

    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]:
        """Convert neutral messages and normalized params to an OpenAI request."""
        openai_messages: list[dict[str, Any]] = []
        for msg in messages:
            openai_msg: dict[str, Any] = {"role": msg["role"]}

            if msg.get("content") is not None:
                openai_msg["content"] = msg["content"]

            # Assistant messages carrying tool calls
            if msg.get("tool_calls"):
                openai_msg["tool_calls"] = [
                    self._serialize_tool_call(tc) for tc in msg["tool_calls"]
                ]
                # OpenAI spec: content should be null when tool_calls is present
                openai_msg.setdefault("content", None)

            # Tool response messages
            if msg.get("tool_call_id"):
                openai_msg["tool_call_id"] = msg["tool_call_id"]

            if "content" not in openai_msg:
                openai_msg["content"] = ""

            openai_messages.append(openai_msg)

        base_params = {k: v for k, v in params.items() if v is not None}
        extras = base_params.pop("extra", {})
        if not base_params.get("tools"):
            base_params.pop("tools", None)
            base_params.pop("tool_choice", None)
            base_params.pop("parallel_tool_calls", None)
        for k, v in extras.items():
            base_params.setdefault(k, v)

        return {"messages": openai_messages, **base_params}

    @staticmethod
    def _serialize_tool_call(tool_call: dict[str, Any]) -> dict[str, Any]:
        function = tool_call["function"]
        arguments = function.get("arguments", {})
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)
        return {
            "id": tool_call["id"],
            "type": tool_call.get("type", "function"),
            "function": {"name": function["name"], "arguments": arguments},
        }

    def from_provider(self, raw: ChatCompletion) -> ChatResponse:
        """Convert an OpenAI completion to a unified ChatResponse."""
        content = ""
        tool_calls = None

        if raw.choices and raw.choices[0].message:
            message = raw.choices[0].message
            content = message.content or ""

            if message.tool_calls:
                tool_calls = []
                for tc in message.tool_calls:
                    tool_calls.append(
                        ToolCallRequest(
                            id=tc.id,
                            name=tc.function.name,
                            arguments=self._parse_arguments(tc.function.arguments),
                        )
                    )

        return ChatResponse(content=content, tool_calls=tool_calls, raw=raw)

    @staticmethod
    def _parse_arguments(raw_args: Any) -> dict[str, Any]:
        # Malformed JSON becomes {} so schema validation reports it; dropping
        # the call would leave the history without a result for it.
        if isinstance(raw_args, dict):
            return raw_args
        if isinstance(raw_args, str) and raw_args.strip():
            try:
                parsed = json.loads(raw_args)
            except json.JSONDecodeError as exc:
                _logger.warning(f"Bad JSON in tool call: {raw_args}", exc_info=exc)
                return {}
            if isinstance(parsed, dict):
                return parsed
        return {}
