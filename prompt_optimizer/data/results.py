"""Evaluation and optimization result records."""

from dataclasses import dataclass, field
from functools import reduce
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple

from .example import Prediction, UsageMetadata

if TYPE_CHECKING:
    from ..modules.base import Module


@dataclass(frozen=True)
class ExampleFailure:
    """An example whose prediction or scoring raised during evaluation."""
    index: int
    error: str


@dataclass(frozen=True)
class ExampleOutcome:
    """Result of running and scoring a module on one example."""
    index: int
    score: float
    prediction: Optional[Prediction] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def usage(self) -> UsageMetadata:
        if self.prediction is None:
            return UsageMetadata()
        return self.prediction.usage


@dataclass(frozen=True)
class EvaluationResult:
    """Aggregate of one module evaluated on one dataset.

    ``individual_scores`` follows the order of the evaluated dataset and
    ``score`` is their arithmetic mean (0 for an empty dataset).
    """
    score: float
    individual_scores: Tuple[float, ...]
    usage: UsageMetadata = field(default_factory=UsageMetadata)
    evaluation_time_ms: float = 0.0
    failures: Tuple[ExampleFailure, ...] = ()

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[ExampleOutcome], evaluation_time_ms: float = 0.0) -> "EvaluationResult":
        ordered = sorted(outcomes, key=lambda outcome: outcome.index)
        scores = tuple(outcome.score for outcome in ordered)
        usage = reduce(lambda total, outcome: total + outcome.usage, ordered, UsageMetadata())
        failures = tuple(
            ExampleFailure(outcome.index, outcome.error) for outcome in ordered if outcome.failed
        )
        return cls(
            score=sum(scores) / len(scores) if scores else 0.0,
            individual_scores=scores,
            usage=usage,
            evaluation_time_ms=evaluation_time_ms,
            failures=failures,
        )

    @property
    def size(self) -> int:
        return len(self.individual_scores)

    @property
    def all_failed(self) -> bool:
        """True when the dataset was not empty and no example could be scored."""
        return bool(self.individual_scores) and len(self.failures) == len(self.individual_scores)


@dataclass(frozen=True)
class OptimizationRound:
    """One step of a search: the score reached and the prompt that reached it."""
    round: int
    score: float
    prompt: str
    description: str = ""
    time_ms: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OptimizationResult:
    """What an optimizer hands back to its caller.

    ``best_module`` is a clone owned by the caller; mutating it does not affect
    the optimizer.
    """
    best_module: "Module"
    final_score: float
    rounds: List[OptimizationRound] = field(default_factory=list)
    usage: UsageMetadata = field(default_factory=UsageMetadata)
    optimization_time_ms: float = 0.0

    @property
    def rounds_completed(self) -> int:
        """Search rounds run, not counting the baseline recorded as round 0."""
        return sum(1 for round in self.rounds if round.round > 0)

    @property
    def best_prompt(self) -> str:
        return self.best_module.get_prompt()
