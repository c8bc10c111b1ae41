"""Answer matching metrics.

Every function scores in ``[0, 1]`` and is deterministic for identical inputs.
"""

import math
import re
from typing import Any, List, Optional

import Levenshtein

from ..data.example import Example, Prediction
from ..exceptions import ConfigurationError
from .base import Metric, extract_answer, normalize_text, normalized_answers, normalized_prediction

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _token_overlap(answer: str, predicted_tokens: set) -> float:
    answer_tokens = answer.split()
    if not answer_tokens:
        return 0.0
    return sum(1 for token in answer_tokens if token in predicted_tokens) / len(answer_tokens)


def answer_exact_match(example: Example, prediction: Prediction, trace: Optional[Any] = None,
                       frac: Optional[float] = None) -> float:
    """1.0 when the prediction equals the expected answer (or any acceptable one).

    With ``frac``, a partial match scores the best share of an acceptable
    answer's tokens found in the prediction, divided by ``frac`` and capped at
    1.0, so an overlap of at least ``frac`` counts as a full match.
    """
    if frac is not None and not 0.0 < frac <= 1.0:
        raise ConfigurationError(f"frac must be in (0, 1], got {frac}")

    answers = normalized_answers(example)
    if not answers:
        return 0.0
    predicted = normalized_prediction(prediction)
    if predicted in answers:
        return 1.0
    if frac is None:
        return 0.0

    predicted_tokens = set(predicted.split())
    best_overlap = max(_token_overlap(answer, predicted_tokens) for answer in answers)
    return min(best_overlap / frac, 1.0)


def similarity(first: str, second: str) -> float:
    """Normalized edit similarity ``1 - distance / max_length``."""
    max_length = max(len(first), len(second))
    if max_length == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(first, second) / max_length


def answer_fuzzy_match(example: Example, prediction: Prediction, trace: Optional[Any] = None,
                       threshold: float = 0.8) -> float:
    """1.0 when some acceptable answer is at least ``threshold`` similar to the prediction."""
    predicted = normalized_prediction(prediction)
    for answer in normalized_answers(example):
        if similarity(answer, predicted) >= threshold:
            return 1.0
    return 0.0


def _context_passages(example: Example, prediction: Prediction) -> List[str]:
    context = prediction.metadata.get("context")
    if context is None:
        context = example.metadata.get("context")
    if context is None and isinstance(example.input, dict):
        context = example.input.get("context")
    if context is None:
        return []
    if isinstance(context, str):
        return [context]
    return [str(passage) for passage in context]


def answer_passage_match(example: Example, prediction: Prediction, trace: Optional[Any] = None) -> float:
    """1.0 when an expected answer appears in one of the context passages."""
    passages = [normalize_text(passage) for passage in _context_passages(example, prediction)]
    for answer in normalized_answers(example):
        if answer and any(answer in passage for passage in passages):
            return 1.0
    return 0.0


def answer_contains_match(example: Example, prediction: Prediction, trace: Optional[Any] = None) -> float:
    """1.0 when the prediction contains an expected answer as a substring."""
    predicted = normalized_prediction(prediction)
    for answer in normalized_answers(example):
        if answer and answer in predicted:
            return 1.0
    return 0.0


def parse_number(value: Any) -> Optional[float]:
    """Leading number of ``value``, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_NUMBER.match(extract_answer(value).strip())
        if match is None:
            return None
        number = float(match.group(0))
    return number if math.isfinite(number) else None


def answer_numeric_match(example: Example, prediction: Prediction, trace: Optional[Any] = None,
                         tolerance: float = 0.01) -> float:
    """1.0 when the predicted number is within ``tolerance`` of an expected number."""
    predicted = parse_number(prediction.output)
    if predicted is None:
        return 0.0
    for answer in example.acceptable_outputs:
        expected = parse_number(answer)
        if expected is not None and abs(expected - predicted) <= tolerance:
            return 1.0
    return 0.0


def exact_match_metric(frac: Optional[float] = None) -> Metric:
    if frac is not None and not 0.0 < frac <= 1.0:
        raise ConfigurationError(f"frac must be in (0, 1], got {frac}")
    name = "exact_match" if frac is None else f"exact_match_{frac}"
    return Metric(name, lambda example, prediction, trace=None: answer_exact_match(example, prediction, trace, frac))


def fuzzy_match_metric(threshold: float = 0.8) -> Metric:
    if not 0.0 <= threshold <= 1.0:
        raise ConfigurationError(f"threshold must be in [0, 1], got {threshold}")
    return Metric(f"fuzzy_match_{threshold}",
                  lambda example, prediction, trace=None: answer_fuzzy_match(example, prediction, trace, threshold))


def numeric_match_metric(tolerance: float = 0.01) -> Metric:
    if tolerance < 0:
        raise ConfigurationError(f"tolerance must be non-negative, got {tolerance}")
    return Metric(f"numeric_match_{tolerance}",
                  lambda example, prediction, trace=None: answer_numeric_match(example, prediction, trace, tolerance))


ExactMatch = Metric("exact_match", answer_exact_match)
FuzzyMatch = Metric("fuzzy_match", answer_fuzzy_match)
PassageMatch = Metric("passage_match", answer_passage_match)
ContainsMatch = Metric("contains_match", answer_contains_match)
NumericMatch = Metric("numeric_match", answer_numeric_match)
