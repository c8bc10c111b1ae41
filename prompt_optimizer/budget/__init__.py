"""Budget tracking for prompt optimization."""

from .budget import Budget
from .evaluation_calls import EvaluationBudget

__all__ = ['Budget', 'EvaluationBudget']
