"""Error hierarchy for prompt optimization."""


class OptimizerError(Exception):
    """Base class for every error raised by the optimization core."""


class ConfigurationError(OptimizerError, ValueError):
    """An optimizer or metric was configured with invalid values."""


class GenerationError(OptimizerError):
    """A language model call failed or returned unusable text."""


class BudgetExhaustedError(OptimizerError):
    """The evaluation budget ran out before any candidate could be scored."""


class EnsembleError(OptimizerError):
    """No ensemble member could produce a prediction."""
