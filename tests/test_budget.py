"""Test budget magic methods and evaluation counting."""

import pytest

from prompt_optimizer import OptimizationResult, OptimizationRound
from prompt_optimizer.budget import EvaluationBudget
from prompt_optimizer.exceptions import BudgetExhaustedError, ConfigurationError
from prompt_optimizer.testing import MockModule


class TestBudgetMagicMethods:
    """Test budget magic methods for type conversion and comparisons."""

    def test_evaluation_budget_conversion(self):
        budget = EvaluationBudget(100)

        assert int(budget) == 100
        assert float(budget) == 100.0
        assert budget.get_remaining()["evaluations"] == 100

        budget.consumed = 30
        assert int(budget) == 70
        assert float(budget) == 70.0
        assert budget.get_remaining()["percentage"] == 70.0

    def test_budget_comparisons(self):
        budget = EvaluationBudget(10)

        assert budget > 0
        assert budget >= 10
        assert budget <= 10
        assert budget < 11
        assert budget == 10
        assert budget != 9
        assert budget > 9.5

    def test_comparison_with_other_types(self):
        budget = EvaluationBudget(10)
        assert (budget == "10") is False
        assert budget != "10"

    def test_zero_budget(self):
        budget = EvaluationBudget(0)
        assert not budget.has_budget()
        assert budget.get_remaining() == {"evaluations": 0, "percentage": 0}


class TestEvaluationBudget:
    """Test charging evaluations against the budget."""

    def test_spend_until_exhausted(self):
        budget = EvaluationBudget(2)
        budget.spend_on_evaluation(MockModule(), {"candidate": 0})
        budget.spend_on_evaluation(MockModule())

        assert budget.consumed == 2
        assert not budget.has_budget()
        with pytest.raises(BudgetExhaustedError):
            budget.spend_on_evaluation(MockModule())
        assert budget.consumed == 2

    def test_negative_budget_rejected(self):
        with pytest.raises(ConfigurationError):
            EvaluationBudget(-1)

    def test_lifecycle_tracks_round_costs(self):
        budget = EvaluationBudget(5)
        budget.consumed = 4
        budget.start_optimization(MockModule(), [], None)
        assert budget.consumed == 0

        budget.start_round(1)
        budget.spend_on_evaluation()
        budget.spend_on_evaluation()
        budget.finish_round(OptimizationRound(1, 0.5, "prompt"))
        budget.start_round(2)
        budget.spend_on_evaluation()
        budget.finish_round(OptimizationRound(2, 0.5, "prompt"))

        assert budget.round_costs == [2, 1]
        budget.finish_optimization(OptimizationResult(MockModule(), 0.5))
