"""Metric wrapper and text normalization helpers."""

import re
from typing import Any, Callable, List, Mapping, Optional

from ..data.example import Example, Prediction

MetricFunction = Callable[[Example, Prediction, Optional[Any]], float]

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Case-fold, trim and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", text.strip().casefold())


def extract_answer(value: Any) -> str:
    """Reduce an output value to the text that should be compared."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        for key in ("answer", "output", "response"):
            if value.get(key) is not None:
                return str(value[key])
    return "" if value is None else str(value)


def normalized_answers(example: Example) -> List[str]:
    """Normalized text of every acceptable answer of ``example``."""
    return [normalize_text(extract_answer(answer)) for answer in example.acceptable_outputs]


def normalized_prediction(prediction: Prediction) -> str:
    return normalize_text(extract_answer(prediction.output))


class Metric:
    """A named scoring function ``(example, prediction, trace=None) -> float``.

    Plain functions with that signature are accepted everywhere a metric is;
    this wrapper only adds a name for traces and reports.
    """

    def __init__(self, name: str, fn: MetricFunction):
        self.name = name
        self.fn = fn

    def __call__(self, example: Example, prediction: Prediction, trace: Optional[Any] = None) -> float:
        return float(self.fn(example, prediction, trace))

    def __repr__(self) -> str:
        return f"Metric({self.name!r})"


def metric_name(metric: Callable) -> str:
    return getattr(metric, "name", None) or getattr(metric, "__name__", type(metric).__name__)
