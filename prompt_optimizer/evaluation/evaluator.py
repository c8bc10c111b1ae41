"""Bounded-concurrency evaluation of a module over a dataset."""

import asyncio
import logging
import time
from typing import Callable, List, Optional, Sequence

from ..data.example import Example, Prediction
from ..data.results import EvaluationResult, ExampleOutcome
from ..exceptions import ConfigurationError
from ..modules.base import Module

logger = logging.getLogger(__name__)


def describe_error(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


def score_prediction(index: int, example: Example, prediction: Prediction, metric: Callable) -> ExampleOutcome:
    """Score one prediction; a raising metric yields a recorded failure scored 0."""
    try:
        score = float(metric(example, prediction))
    except Exception as e:
        logger.warning(f"Metric failed on example {index}: {e}")
        return ExampleOutcome(index, 0.0, prediction, describe_error(e))
    return ExampleOutcome(index, score, prediction)


class Evaluator:
    """Runs a module over every example and scores it with a metric.

    All evaluations issued through one evaluator on the same event loop share
    a single semaphore, so at most ``max_concurrency`` predictions are in
    flight at any time.
    """

    def __init__(self, metric: Callable, max_concurrency: int = 8):
        if max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")
        self.metric = metric
        self.max_concurrency = max_concurrency
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

    def _get_semaphore(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._loop is not loop:
            self._loop = loop
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        return self._semaphore

    async def predict(self, module: Module, example: Example) -> Prediction:
        """Run ``module`` on one example under the shared concurrency limit."""
        async with self._get_semaphore():
            return await module.predict(example.input)

    async def _evaluate_example(self, module: Module, index: int, example: Example,
                                metric: Callable) -> ExampleOutcome:
        try:
            prediction = await self.predict(module, example)
        except Exception as e:
            logger.debug(f"Prediction failed on example {index}: {e}")
            return ExampleOutcome(index, 0.0, error=describe_error(e))
        return score_prediction(index, example, prediction, metric)

    async def evaluate(self, module: Module, dataset: Sequence[Example],
                       metric: Optional[Callable] = None) -> EvaluationResult:
        """Evaluate ``module`` on ``dataset``; never raises for per-example failures."""
        metric = metric or self.metric
        start = time.perf_counter()
        outcomes: List[ExampleOutcome] = await asyncio.gather(*(
            self._evaluate_example(module, index, example, metric)
            for index, example in enumerate(dataset)
        ))
        result = EvaluationResult.from_outcomes(outcomes, (time.perf_counter() - start) * 1000)
        if result.failures:
            logger.warning(f"{len(result.failures)}/{result.size} examples failed during evaluation")
        logger.debug(f"Evaluated {result.size} examples: score={result.score:.4f}")
        return result
