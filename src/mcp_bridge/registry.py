"""
The tool catalog: an explicit mapping from tool name to its parameter schema
and the coroutine that runs it.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterator, Literal

from mcp_bridge.errors import InvalidArgumentsError, UnknownToolError

if TYPE_CHECKING:
    from mcp_bridge.executor import ToolContext

__all__ = ["ToolParam", "ToolSpec", "ToolRegistry", "ToolHandler"]

ParamType = Literal["number", "integer", "string", "boolean"]
ToolHandler = Callable[[dict[str, Any], "ToolContext"], Awaitable[str]]


@dataclass(frozen=True, slots=True)
class ToolParam:
    type: ParamType
    description: str = ""
    required: bool = True

    def schema(self) -> dict[str, Any]:
        return {"type": self.type, "description": self.description}


@dataclass(frozen=True)
class ToolSpec:
    """A named, schema-described tool and its handler."""

    name: str
    description: str
    handler: ToolHandler
    parameters: dict[str, ToolParam] = field(default_factory=dict)

    def declaration(self) -> dict[str, Any]:
        """OpenAI-style function tool declaration."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {name: p.schema() for name, p in self.parameters.items()},
                    "required": [name for name, p in self.parameters.items() if p.required],
                },
            },
        }

    def validate(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Check *arguments* against the parameter schema and return coerced values."""
        if not isinstance(arguments, dict):
            raise InvalidArgumentsError(f"{self.name}: arguments must be an object")

        unknown = sorted(set(arguments) - set(self.parameters))
        if unknown:
            raise InvalidArgumentsError(f"{self.name}: unexpected argument(s) {', '.join(unknown)}")

        missing = [n for n, p in self.parameters.items() if p.required and arguments.get(n) is None]
        if missing:
            raise InvalidArgumentsError(f"{self.name}: missing required argument(s) {', '.join(missing)}")

        coerced: dict[str, Any] = {}
        for name, value in arguments.items():
            if value is None:
                continue
            coerced[name] = _coerce(self.name, name, self.parameters[name].type, value)
        return coerced


def _coerce(tool: str, name: str, kind: ParamType, value: Any) -> Any:
    def mismatch() -> InvalidArgumentsError:
        return InvalidArgumentsError(f"{tool}: argument {name!r} must be a {kind}, got {value!r}")

    if kind == "boolean":
        if isinstance(value, bool):
            return value
        raise mismatch()

    if kind == "string":
        if isinstance(value, str):
            return value
        raise mismatch()

    # bool is an int subclass but never a number here
    if isinstance(value, bool):
        raise mismatch()
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise mismatch() from None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise mismatch()

    if kind == "integer":
        if float(value).is_integer():
            return int(value)
        raise mismatch()
    return float(value)


class ToolRegistry:
    """Ordered catalog of tools, resolved by name."""

    def __init__(self, specs: list[ToolSpec] | None = None) -> None:
        self._tools: dict[str, ToolSpec] = {}
        for spec in specs or []:
            self.register(spec)

    def register(self, spec: ToolSpec) -> ToolSpec:
        if spec.name in self._tools:
            raise ValueError(f"Tool {spec.name!r} is already registered")
        self._tools[spec.name] = spec
        return spec

    def resolve(self, name: str) -> ToolSpec:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(f"Unknown tool {name!r}") from None

    def validate(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        return self.resolve(name).validate(arguments)

    def catalog(self) -> list[dict[str, Any]]:
        return [spec.declaration() for spec in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
