"""Evaluation engine."""

from .evaluator import Evaluator, score_prediction

__all__ = ['Evaluator', 'score_prediction']
