"""Labeled examples, predictions and token usage."""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

InputValue = Union[str, Mapping[str, Any]]


def format_value(value: Any) -> str:
    """Render an input or output value as prompt text."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return json.dumps(dict(value), default=str)
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value), default=str)
    return str(value)


@dataclass(frozen=True)
class UsageMetadata:
    """Token counters reported by a module or accumulated over a run."""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: "UsageMetadata") -> "UsageMetadata":
        if not isinstance(other, UsageMetadata):
            return NotImplemented
        return UsageMetadata(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )

    @classmethod
    def from_mapping(cls, usage: Optional[Mapping[str, Any]]) -> "UsageMetadata":
        """Build usage from a ``{"input_tokens", "output_tokens"}`` mapping."""
        if not usage:
            return cls()
        return cls(
            input_tokens=int(usage.get("input_tokens") or 0),
            output_tokens=int(usage.get("output_tokens") or 0),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class Example:
    """Ground truth for one training or validation instance.

    ``output`` is either a single expected answer or a sequence of acceptable
    answers. Sequences are stored as tuples and mapping inputs are copied, so an
    example cannot change after creation.
    """
    input: InputValue
    output: Any
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.input, Mapping):
            object.__setattr__(self, "input", dict(self.input))
        if isinstance(self.output, list):
            object.__setattr__(self, "output", tuple(self.output))
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    @property
    def acceptable_outputs(self) -> Tuple[Any, ...]:
        """All answers that count as correct for this example."""
        if isinstance(self.output, tuple):
            return self.output
        return (self.output,)

    def with_output(self, output: Any, **metadata: Any) -> "Example":
        """Copy of this example with another expected output."""
        return Example(self.input, output, {**self.metadata, **metadata})


@dataclass(frozen=True)
class Prediction:
    """Output produced by a module for one input."""
    output: Any
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "metadata", dict(self.metadata or {}))

    @property
    def usage(self) -> UsageMetadata:
        return UsageMetadata.from_mapping(self.metadata.get("usage"))

    @property
    def confidence(self) -> Optional[float]:
        """Self-reported confidence, or None when missing or not a finite number."""
        value = self.metadata.get("confidence")
        if value is None or isinstance(value, bool):
            return None
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            return None
        return confidence if math.isfinite(confidence) else None
