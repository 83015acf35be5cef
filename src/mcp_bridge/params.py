"""
Model request parameter normalization.

Contract
- Standard keys work across providers:
  temperature: float
  max_tokens: int
  top_p: float
  tools: list            (set by the driver from the tool catalog)
  tool_choice: str | dict
  stop: str | list[str]
  seed: int

- Provider specific keys go under `extra` and pass through unchanged,
  e.g. extra.reasoning_effort or extra.logit_bias.

Unknown top-level keys are moved into extra.
"""

from __future__ import annotations

from typing import Any

STANDARD_KEYS = frozenset(
    {
        "temperature",
        "max_tokens",
        "top_p",
        "tools",
        "tool_choice",
        "stop",
        "seed",
        "user",
        "parallel_tool_calls",
    }
)


def normalize_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """
    Normalize a params dict to a single internal shape: standard keys plus an
    ``extra`` dict.

    - Keys not in STANDARD_KEYS are moved into extra
    - A caller-supplied ``extra`` dict is merged last and wins
    - None values are kept so adapters can decide to drop them

    >>> normalize_params({"max_tokens": 100, "reasoning_effort": "low"})
    {'max_tokens': 100, 'extra': {'reasoning_effort': 'low'}}
    """
    if params is None:
        return {"extra": {}}
    if not isinstance(params, dict):
        raise TypeError(f"params must be a dict, got {type(params).__name__}")

    user_extra = params.get("extra") or {}
    if not isinstance(user_extra, dict):
        raise TypeError("params['extra'] must be a dict")

    std: dict[str, Any] = {}
    moved: dict[str, Any] = {}
    for key, value in params.items():
        if key == "extra":
            continue
        if key in STANDARD_KEYS:
            std[key] = value
        else:
            moved[key] = value

    std["extra"] = {**moved, **user_extra}
    return std


def merge_params(defaults: dict[str, Any] | None, overrides: dict[str, Any] | None) -> dict[str, Any]:
    """
    Shallow-merge default params with per-call overrides, then normalize.

    Top-level keys are overwritten by overrides; ``extra`` is merged per key.
    """
    base = normalize_params(defaults)
    if overrides:
        over = normalize_params(overrides)
        extra = {**base["extra"], **over.pop("extra")}
        base.update(over)
        base["extra"] = extra
    return base
