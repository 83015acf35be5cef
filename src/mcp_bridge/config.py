"""
Settings for a bridge instance, read from the environment (and a ``.env``
file when present).

  MCP_BRIDGE_PROVIDER              openai | anthropic         (openai)
  MCP_BRIDGE_MODEL                 model identifier           (gpt-4o-mini)
  MCP_BRIDGE_BASE_URL              override the provider URL  (unset)
  MCP_BRIDGE_MAX_ROUNDS            model calls per Turn       (10)
  MCP_BRIDGE_MODEL_TIMEOUT         seconds per model call     (60)
  MCP_BRIDGE_SAMPLING              caller supports sampling   (true)
  MCP_BRIDGE_SAMPLING_TIMEOUT      seconds per sampling call  (30)
  MCP_BRIDGE_SAMPLING_MAX_TOKENS   sampling token budget      (100)
  MCP_BRIDGE_CREATIVE              add a poem to tool results (true)
  MCP_BRIDGE_STRICT_ARGUMENTS      bad tool arguments end the Turn (false)
  OPEN_METEO_URL                   forecast endpoint
  OPEN_METEO_TIMEOUT               seconds per weather lookup (10)
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv

from mcp_bridge.driver import DEFAULT_MAX_ROUNDS
from mcp_bridge.provider import Provider
from mcp_bridge.weather.gateway import OPEN_METEO_FORECAST_URL

__all__ = ["BridgeSettings", "positive_int"]

T = TypeVar("T")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _positive(cast: Callable[[str], T]) -> Callable[[str], T]:
    def parse(value: str) -> T:
        parsed = cast(value)
        if parsed <= 0:  # type: ignore[operator]
            raise ValueError(f"must be positive, got {value!r}")
        return parsed

    return parse


positive_int = _positive(int)


@dataclass(frozen=True)
class BridgeSettings:
    provider: Provider = Provider.OPENAI
    model: str = "gpt-4o-mini"
    base_url: Optional[str] = None
    max_rounds: int = DEFAULT_MAX_ROUNDS
    model_timeout: float = 60.0
    sampling_enabled: bool = True
    sampling_timeout: float = 30.0
    sampling_max_tokens: int = 100
    creative: bool = True
    strict_arguments: bool = False
    open_meteo_url: str = OPEN_METEO_FORECAST_URL
    open_meteo_timeout: float = 10.0

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None, *, dotenv: bool = True
    ) -> "BridgeSettings":
        """Build settings from *environ* (``os.environ`` by default)."""
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        values: dict[str, Any] = {}
        for field_name, (var, parse) in _ENV_FIELDS.items():
            raw = environ.get(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field_name] = parse(raw.strip())
            except ValueError as exc:
                raise ValueError(f"Invalid value for {var}: {exc}") from exc
        return cls(**values)

    def with_overrides(self, **changes: Any) -> "BridgeSettings":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


_ENV_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "provider": ("MCP_BRIDGE_PROVIDER", lambda v: Provider(v.lower())),
    "model": ("MCP_BRIDGE_MODEL", str),
    "base_url": ("MCP_BRIDGE_BASE_URL", str),
    "max_rounds": ("MCP_BRIDGE_MAX_ROUNDS", positive_int),
    "model_timeout": ("MCP_BRIDGE_MODEL_TIMEOUT", _positive(float)),
    "sampling_enabled": ("MCP_BRIDGE_SAMPLING", _parse_bool),
    "sampling_timeout": ("MCP_BRIDGE_SAMPLING_TIMEOUT", _positive(float)),
    "sampling_max_tokens": ("MCP_BRIDGE_SAMPLING_MAX_TOKENS", positive_int),
    "creative": ("MCP_BRIDGE_CREATIVE", _parse_bool),
    "strict_arguments": ("MCP_BRIDGE_STRICT_ARGUMENTS", _parse_bool),
    "open_meteo_url": ("OPEN_METEO_URL", str),
    "open_meteo_timeout": ("OPEN_METEO_TIMEOUT", _positive(float)),
}
