"""Evaluation calls budget implementation."""

import logging
from typing import Any, Dict, List, Optional

from ..exceptions import BudgetExhaustedError, ConfigurationError
from .budget import Budget

logger = logging.getLogger(__name__)


class EvaluationBudget(Budget):
    """Budget that counts candidate evaluations.

    An evaluation is charged before it is issued, so no more than
    ``max_evaluations`` evaluations ever start.
    """

    def __init__(self, max_evaluations: int):
        if max_evaluations < 0:
            raise ConfigurationError("max_evaluations must be non-negative")
        self.max_evaluations = max_evaluations
        self.consumed = 0
        self.round_costs: List[int] = []
        self._round_start = 0

    def has_budget(self) -> bool:
        return self.consumed < self.max_evaluations

    def spend_on_evaluation(self, module: Any = None, metadata: Optional[Dict[str, Any]] = None) -> None:
        if not self.has_budget():
            raise BudgetExhaustedError(f"Evaluation budget of {self.max_evaluations} calls exhausted")
        self.consumed += 1
        if metadata:
            logger.debug(f"Evaluation {self.consumed}/{self.max_evaluations} - {metadata}")

    def get_remaining(self) -> Dict[str, float]:
        remaining = max(0, self.max_evaluations - self.consumed)
        return {
            "evaluations": remaining,
            "percentage": (remaining / self.max_evaluations) * 100 if self.max_evaluations > 0 else 0,
        }

    # OptimizationObserver lifecycle methods

    def start_optimization(self, module, trainset, valset) -> None:
        logger.info(f"Starting optimization with budget of {self.max_evaluations} evaluations")
        self.consumed = 0
        self.round_costs = []

    def start_round(self, round_number: int) -> None:
        self._round_start = self.consumed

    def finish_round(self, round) -> None:
        cost = self.consumed - self._round_start
        self.round_costs.append(cost)
        logger.debug(f"Round {round.round}: used {cost} evaluations, {self.get_remaining()} remaining")

    def finish_optimization(self, result) -> None:
        usage_percentage = (self.consumed / self.max_evaluations) * 100 if self.max_evaluations else 0.0
        logger.info(f"Optimization complete - Used {self.consumed}/{self.max_evaluations} "
                    f"evaluations ({usage_percentage:.1f}%)")
