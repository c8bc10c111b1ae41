"""Shared plumbing of the search optimizers."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, Sequence

from ..config import OptimizerConfig
from ..data.candidate import Candidate
from ..data.example import Example, UsageMetadata
from ..data.results import EvaluationResult, OptimizationResult, OptimizationRound
from ..evaluation.evaluator import Evaluator
from ..metrics import ExactMatch
from ..modules.base import Module
from ..observer import OptimizationObserver, VerboseObserver
from ..random_source import RandomSource

logger = logging.getLogger(__name__)


class BaseOptimizer(ABC):
    """Owns the config, metric, evaluator, random source and observers of a search.

    One ``optimize`` call may run at a time per instance; every call returns a
    result whose ``best_module`` is a clone owned by the caller.
    """

    config_class = OptimizerConfig

    def __init__(self,
                 metric: Callable = ExactMatch,
                 config: Optional[OptimizerConfig] = None,
                 rng: Optional[RandomSource] = None,
                 observers: Optional[Iterable[OptimizationObserver]] = None,
                 evaluator: Optional[Evaluator] = None):
        self.config = config if config is not None else self.config_class()
        self.metric = metric
        self.evaluator = evaluator or Evaluator(metric, self.config.max_concurrency)
        self._owns_rng = rng is None
        self.rng = rng or RandomSource(self.config.seed)
        self.observers: List[OptimizationObserver] = list(observers or [])
        if self.config.verbose:
            self.observers.append(VerboseObserver(type(self).__name__))

        self.usage = UsageMetadata()
        self.rounds: List[OptimizationRound] = []
        self._run_observers: List[OptimizationObserver] = []
        self._started_at = 0.0

    @abstractmethod
    async def optimize(self, module: Module, trainset: Sequence[Example],
                       valset: Optional[Sequence[Example]] = None) -> OptimizationResult:
        """Search for a better configuration of ``module``."""
        ...

    async def evaluate(self, module: Module, dataset: Sequence[Example]) -> EvaluationResult:
        """Evaluate with the optimizer's metric and add the token usage to the run."""
        result = await self.evaluator.evaluate(module, dataset, self.metric)
        self.usage = self.usage + result.usage
        return result

    async def evaluate_candidates(self, candidates: Sequence[Candidate],
                                  dataset: Sequence[Example]) -> None:
        """Score candidates concurrently; returns once every evaluation finished."""
        results = await asyncio.gather(*(self.evaluate(c.module, dataset) for c in candidates))
        for candidate, result in zip(candidates, results):
            candidate.evaluation = result

    @staticmethod
    def evaluation_set(trainset: Sequence[Example], valset: Optional[Sequence[Example]]) -> List[Example]:
        return list(valset) if valset else list(trainset)

    def should_stop(self, score: float) -> bool:
        return self.config.should_stop(score)

    def _start(self, module: Module, trainset: Sequence[Example],
               valset: Optional[Sequence[Example]],
               extra_observers: Iterable[OptimizationObserver] = ()) -> None:
        if self._owns_rng and self.config.seed is not None:
            self.rng = RandomSource(self.config.seed)
        self.usage = UsageMetadata()
        self.rounds = []
        self._run_observers = self.observers + list(extra_observers)
        self._started_at = time.perf_counter()
        logger.info(f"{type(self).__name__}: optimizing over {len(trainset)} training examples")
        for observer in self._run_observers:
            observer.start_optimization(module, list(trainset), list(valset) if valset is not None else None)

    def _start_round(self, round_number: int) -> None:
        for observer in self._run_observers:
            observer.start_round(round_number)

    def _record_round(self, round_number: int, score: float, prompt: str,
                      description: str = "", round_started: Optional[float] = None,
                      **metadata) -> OptimizationRound:
        elapsed = (time.perf_counter() - round_started) * 1000 if round_started is not None else 0.0
        record = OptimizationRound(round_number, score, prompt, description, elapsed, metadata)
        self.rounds.append(record)
        for observer in self._run_observers:
            observer.finish_round(record)
        return record

    def _finish(self, best_module: Module, score: float) -> OptimizationResult:
        result = OptimizationResult(
            best_module=best_module.clone(),
            final_score=score,
            rounds=list(self.rounds),
            usage=self.usage,
            optimization_time_ms=(time.perf_counter() - self._started_at) * 1000,
        )
        logger.info(f"{type(self).__name__}: finished with score {score:.4f} "
                    f"after {result.rounds_completed} rounds")
        for observer in self._run_observers:
            observer.finish_optimization(result)
        return result
