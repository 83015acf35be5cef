"""Anthropic adapter for pure request/response transformations."""

from __future__ import annotations

from typing import Any, Sequence

from anthropic.types import Message

from mcp_bridge.types import ChatMessage, ChatResponse, ToolCallRequest

DEFAULT_MAX_TOKENS = 4096


class AnthropicRequestAdapter:
    """Adapter for converting between the neutral history and Anthropic format."""

    def to_provider(
        self, messages: Sequence[ChatMessage], params: dict[str, Any]
    ) -> dict[str, Any]:
        """Convert neutral messages and normalized params to an Anthropic request."""
        anthropic_messages: list[dict[str, Any]] = []
        system_prompt: str | list[Any] = ""

        for msg in messages:
            role = msg["role"]

            if role == "system":
                content = msg.get("content", "")
                system_prompt = content if isinstance(content, (str, list)) else str(content)
                continue

            if role == "tool":
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg["tool_call_id"],
                    "content": msg.get("content", ""),
                }
                # Results for one assistant turn travel in a single user message
                previous = anthropic_messages[-1] if anthropic_messages else None
                if previous and previous["role"] == "user" and self._is_tool_result_list(previous["content"]):
                    previous["content"].append(block)
                else:
                    anthropic_messages.append({"role": "user", "content": [block]})
                continue

            if role == "assistant" and msg.get("tool_calls"):
                blocks: list[dict[str, Any]] = []
                if msg.get("content"):
                    blocks.append({"type": "text", "text": msg["content"]})
                for tc in msg["tool_calls"]:
                    blocks.append(
                        {
                            "type": "tool_use",
                            "id": tc["id"],
                            "name": tc["function"]["name"],
                            "input": dict(tc["function"].get("arguments") or {}),
                        }
                    )
                anthropic_messages.append({"role": "assistant", "content": blocks})
                continue

            content = msg.get("content")
            if content is None:
                content = ""
            elif not isinstance(content, (str, list)):
                content = str(content)
            anthropic_messages.append({"role": role, "content": content})

        base_params = {k: v for k, v in params.items() if v is not None}
        extras = base_params.pop("extra", {})
        base_params.pop("parallel_tool_calls", None)

        # Anthropic requires max_tokens
        base_params.setdefault("max_tokens", DEFAULT_MAX_TOKENS)

        if "stop" in base_params:
            stop = base_params.pop("stop")
            base_params["stop_sequences"] = stop if isinstance(stop, list) else [stop]

        if base_params.get("tools"):
            base_params["tools"] = [self._convert_tool(tool) for tool in base_params["tools"]]
        else:
            base_params.pop("tools", None)
            base_params.pop("tool_choice", None)

        for k, v in extras.items():
            base_params.setdefault(k, v)

        request: dict[str, Any] = {"messages": anthropic_messages, **base_params}
        if system_prompt:
            request["system"] = system_prompt
        return request

    @staticmethod
    def _is_tool_result_list(content: Any) -> bool:
        return isinstance(content, list) and all(
            isinstance(block, dict) and block.get("type") == "tool_result" for block in content
        )

    @staticmethod
    def _convert_tool(tool: dict[str, Any]) -> dict[str, Any]:
        if tool.get("type") != "function":
            return tool
        func = tool["function"]
        return {
            "name": func["name"],
            "description": func.get("description", ""),
            "input_schema": func.get("parameters", {"type": "object", "properties": {}}),
        }

    def from_provider(self, raw: Message) -> ChatResponse:
        """Convert an Anthropic message to a unified ChatResponse."""
        text_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []

        for block in raw.content or []:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                tool_calls.append(
                    ToolCallRequest(
                        id=block.id,
                        name=block.name,
                        arguments=dict(block.input) if hasattr(block.input, "items") else {},
                    )
                )

        return ChatResponse(content="".join(text_parts), tool_calls=tool_calls or None, raw=raw)
