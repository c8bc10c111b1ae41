"""Data records shared by the optimizers."""

from .example import Example, Prediction, UsageMetadata, format_value
from .results import (
    EvaluationResult,
    ExampleFailure,
    ExampleOutcome,
    OptimizationResult,
    OptimizationRound,
)
from .candidate import Candidate
from .beam import Beam

__all__ = [
    'Example',
    'Prediction',
    'UsageMetadata',
    'format_value',
    'EvaluationResult',
    'ExampleFailure',
    'ExampleOutcome',
    'OptimizationResult',
    'OptimizationRound',
    'Candidate',
    'Beam',
]
