"""Lifecycle observers notified while an optimizer runs."""

import logging
from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from .data.example import Example
    from .data.results import OptimizationResult, OptimizationRound
    from .modules.base import Module

logger = logging.getLogger(__name__)


class OptimizationObserver(Protocol):
    """Base class for components that observe optimization lifecycle events.

    Provides default no-op implementations so components can opt into
    only the lifecycle events they care about.
    """

    def start_optimization(self, module: "Module",
                           trainset: List["Example"],
                           valset: Optional[List["Example"]]) -> None:
        """Called when optimization begins.

        Args:
            module: The module being optimized
            trainset: Examples candidates are built from
            valset: Examples candidates are scored on (None when the trainset is reused)
        """
        pass

    def start_round(self, round_number: int) -> None:
        """Called before a round starts issuing generations or evaluations (1-based)."""
        pass

    def finish_round(self, round: "OptimizationRound") -> None:
        """Called once a round has been scored and recorded."""
        pass

    def finish_optimization(self, result: "OptimizationResult") -> None:
        """Called with the final result before it is returned to the caller."""
        pass


class VerboseObserver(OptimizationObserver):
    """Emits a human-readable per-round trace at ``info`` level."""

    def __init__(self, name: str = "optimizer", preview_length: int = 80):
        self.name = name
        self.preview_length = preview_length

    def _preview(self, prompt: str) -> str:
        prompt = " ".join(prompt.split())
        if len(prompt) <= self.preview_length:
            return prompt
        return prompt[:self.preview_length - 3] + "..."

    def start_optimization(self, module, trainset, valset) -> None:
        eval_size = len(valset) if valset is not None else len(trainset)
        logger.info(f"[{self.name}] Starting: {len(trainset)} training examples, {eval_size} evaluation examples")

    def start_round(self, round_number: int) -> None:
        logger.info(f"[{self.name}] Round {round_number} started")

    def finish_round(self, round) -> None:
        logger.info(f"[{self.name}] Round {round.round}: score={round.score:.4f} "
                    f"{round.description} | {self._preview(round.prompt)}")

    def finish_optimization(self, result) -> None:
        logger.info(f"[{self.name}] Finished after {result.rounds_completed} rounds: "
                    f"score={result.final_score:.4f}, tokens={result.usage.total_tokens}, "
                    f"time={result.optimization_time_ms:.0f}ms")
