"""Prompt optimization: search algorithms that improve prompts and few-shot demonstrations."""

__version__ = "0.1.0"

from .exceptions import (
    BudgetExhaustedError,
    ConfigurationError,
    EnsembleError,
    GenerationError,
    OptimizerError,
)
from .data import (
    Beam,
    Candidate,
    EvaluationResult,
    Example,
    ExampleFailure,
    OptimizationResult,
    OptimizationRound,
    Prediction,
    UsageMetadata,
)
from .modules import (
    DemonstrationModule,
    DSPyLanguageModel,
    GenerationOptions,
    LanguageModel,
    Module,
    PromptModule,
    from_dspy_example,
)
from .metrics import (
    ContainsMatch,
    ExactMatch,
    FuzzyMatch,
    Metric,
    NumericMatch,
    PassageMatch,
    answer_contains_match,
    answer_exact_match,
    answer_fuzzy_match,
    answer_numeric_match,
    answer_passage_match,
    composite_metric,
    exact_match_metric,
    fuzzy_match_metric,
    numeric_match_metric,
)
from .evaluation import Evaluator
from .budget import Budget, EvaluationBudget
from .config import (
    BootstrapConfig,
    COPROConfig,
    EnsembleConfig,
    OptimizerConfig,
    RandomSearchConfig,
    SearchStrategy,
    VotingMode,
)
from .observer import OptimizationObserver, VerboseObserver
from .random_source import RandomSource
from .optimizers import (
    BaseOptimizer,
    BootstrapOptimizer,
    COPROOptimizer,
    EnsembleOptimizer,
    RandomSearchOptimizer,
)
