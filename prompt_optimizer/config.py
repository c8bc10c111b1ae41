"""Configuration objects for the optimizers.

Every config validates itself on construction and raises
:class:`~prompt_optimizer.exceptions.ConfigurationError` for invalid values,
so a misconfigured optimizer fails before issuing any model call.

Usage:
    config = COPROConfig(breadth=4, depth=2, seed=7)
    config = RandomSearchConfig.from_dict({"strategy": "crossover", "budget": 20})
"""

import statistics
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .exceptions import ConfigurationError


class SearchStrategy(str, Enum):
    """How RandomSearch proposes candidate prompts."""
    MUTATION = "mutation"
    CROSSOVER = "crossover"
    RANDOM = "random"


class VotingMode(str, Enum):
    """How an ensemble combines non-numeric outputs."""
    HARD = "hard"
    SOFT = "soft"


def _coerce_enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"{field_name} must be one of {choices}, got {value!r}") from None


def _require_int(name: str, value, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")


def _require_number(name: str, value, low: float, high: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not low <= value <= high:
        raise ConfigurationError(f"{name} must be in [{low:g}, {high:g}], got {value}")


@dataclass
class OptimizerConfig:
    """Settings shared by every optimizer."""

    max_concurrency: int = 8
    """Maximum number of model calls or candidate evaluations in flight."""

    early_stopping_threshold: Optional[float] = 0.95
    """Stop once the best score reaches this value (None disables early stopping)."""

    seed: Optional[int] = None
    """Seed of the optimizer's random source; a fixed seed reproduces the run."""

    verbose: bool = False
    """Log a per-round trace. Never changes the search itself."""

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        _require_int("max_concurrency", self.max_concurrency, 1)
        if self.early_stopping_threshold is not None:
            _require_number("early_stopping_threshold", self.early_stopping_threshold, 0.0, 1.0)
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise ConfigurationError("seed must be an integer or None")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]):
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown {cls.__name__} options: {', '.join(unknown)}")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def should_stop(self, score: float) -> bool:
        return self.early_stopping_threshold is not None and score >= self.early_stopping_threshold


@dataclass
class BootstrapConfig(OptimizerConfig):
    """Few-shot demonstration bootstrapping."""

    max_labeled: int = 16
    """Ground-truth demonstrations taken directly from the trainset."""

    max_bootstrapped: int = 4
    """Teacher-generated demonstrations accepted per round."""

    max_rounds: int = 1

    acceptance_threshold: float = 0.7
    """Minimum metric score for a teacher output to become a demonstration."""

    def validate(self) -> None:
        super().validate()
        _require_int("max_labeled", self.max_labeled, 0)
        _require_int("max_bootstrapped", self.max_bootstrapped, 0)
        _require_int("max_rounds", self.max_rounds, 1)
        _require_number("acceptance_threshold", self.acceptance_threshold, 0.0, 1.0)


@dataclass
class COPROConfig(OptimizerConfig):
    """Coordinate-ascent instruction search."""

    breadth: int = 10
    """Beam size kept between iterations."""

    depth: int = 3
    """Number of refinement iterations."""

    num_variations: int = 5
    """Rewrites requested per beam prompt and iteration."""

    temperature: float = 0.7

    num_context_examples: int = 3
    """Training examples shown to the language model in each rewrite request."""

    def validate(self) -> None:
        super().validate()
        _require_int("breadth", self.breadth, 1)
        _require_int("depth", self.depth, 0)
        _require_int("num_variations", self.num_variations, 1)
        _require_number("temperature", self.temperature, 0.0, 2.0)
        _require_int("num_context_examples", self.num_context_examples, 0)


@dataclass
class RandomSearchConfig(OptimizerConfig):
    """Budgeted random exploration of prompts and demonstration sets."""

    num_candidates: int = 16

    budget: int = 100
    """Maximum number of candidate evaluations."""

    strategy: SearchStrategy = SearchStrategy.MUTATION

    max_demonstrations: int = 8

    mutation_temperature: float = 0.8
    """Sampling temperature of the rewrite requests sent by the mutation strategy."""

    mutation_max_tokens: int = 400

    def validate(self) -> None:
        super().validate()
        self.strategy = _coerce_enum(SearchStrategy, self.strategy, "strategy")
        _require_int("num_candidates", self.num_candidates, 1)
        _require_int("budget", self.budget, 0)
        _require_int("max_demonstrations", self.max_demonstrations, 1)
        _require_number("mutation_temperature", self.mutation_temperature, 0.0, 2.0)
        _require_int("mutation_max_tokens", self.mutation_max_tokens, 1)


@dataclass
class EnsembleConfig:
    """How ensemble members are combined."""

    reducer: Optional[Callable[[Sequence[float]], float]] = statistics.mean
    """Reduction for numeric outputs (None votes on them like labels)."""

    voting_mode: VotingMode = VotingMode.HARD

    size: Optional[int] = None
    """Maximum number of members (None for no limit)."""

    max_concurrency: int = 8

    def __post_init__(self):
        self.voting_mode = _coerce_enum(VotingMode, self.voting_mode, "voting_mode")
        if self.reducer is not None and not callable(self.reducer):
            raise ConfigurationError("reducer must be callable or None")
        if self.size is not None:
            _require_int("size", self.size, 1)
        _require_int("max_concurrency", self.max_concurrency, 1)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "EnsembleConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown EnsembleConfig options: {', '.join(unknown)}")
        return cls(**values)
