"""Scoring functions for prompt optimization."""

from .base import Metric, extract_answer, normalize_text
from .matching import (
    ContainsMatch,
    ExactMatch,
    FuzzyMatch,
    NumericMatch,
    PassageMatch,
    answer_contains_match,
    answer_exact_match,
    answer_fuzzy_match,
    answer_numeric_match,
    answer_passage_match,
    exact_match_metric,
    fuzzy_match_metric,
    numeric_match_metric,
)
from .composite import composite_metric

__all__ = [
    'Metric',
    'extract_answer',
    'normalize_text',
    'ExactMatch',
    'FuzzyMatch',
    'PassageMatch',
    'ContainsMatch',
    'NumericMatch',
    'answer_exact_match',
    'answer_fuzzy_match',
    'answer_passage_match',
    'answer_contains_match',
    'answer_numeric_match',
    'exact_match_metric',
    'fuzzy_match_metric',
    'numeric_match_metric',
    'composite_metric',
]
