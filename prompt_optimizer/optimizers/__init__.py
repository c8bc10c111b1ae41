"""Prompt optimizers."""

from .base import BaseOptimizer
from .bootstrap import BootstrapOptimizer
from .copro import COPROOptimizer
from .random_search import RandomSearchOptimizer
from .ensemble import EnsembleOptimizer

__all__ = [
    'BaseOptimizer',
    'BootstrapOptimizer',
    'COPROOptimizer',
    'RandomSearchOptimizer',
    'EnsembleOptimizer',
]
