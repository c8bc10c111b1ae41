"""Weighted combination of metrics."""

from typing import Any, Callable, Optional, Sequence, Tuple

from ..data.example import Example, Prediction
from ..exceptions import ConfigurationError
from .base import Metric, metric_name


def composite_metric(weighted_metrics: Sequence[Tuple[Callable, float]]) -> Metric:
    """Score ``Σ(weight_i * score_i) / Σ(weight_i)``; weights need not sum to 1."""
    weighted_metrics = list(weighted_metrics)
    if not weighted_metrics:
        raise ConfigurationError("composite_metric requires at least one metric")
    if any(weight < 0 for _, weight in weighted_metrics):
        raise ConfigurationError("composite_metric weights must be non-negative")
    total_weight = sum(weight for _, weight in weighted_metrics)
    if total_weight <= 0:
        raise ConfigurationError("composite_metric weights must have a positive sum")

    def evaluate(example: Example, prediction: Prediction, trace: Optional[Any] = None) -> float:
        weighted = sum(weight * float(metric(example, prediction, trace)) for metric, weight in weighted_metrics)
        return weighted / total_weight

    name = "composite_" + "_".join(metric_name(metric) for metric, _ in weighted_metrics)
    return Metric(name, evaluate)
