"""Combining several optimized modules into one predictor."""

import asyncio
import json
import logging
from functools import reduce
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..config import EnsembleConfig, VotingMode
from ..data.example import Example, InputValue, Prediction, UsageMetadata
from ..data.results import EvaluationResult, ExampleOutcome, OptimizationResult
from ..evaluation.evaluator import describe_error, score_prediction
from ..exceptions import EnsembleError
from ..modules.base import Module
from .base import BaseOptimizer

logger = logging.getLogger(__name__)

MemberOutcome = Union[Prediction, Exception]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _label_key(value: Any) -> Any:
    try:
        hash(value)
        return value
    except TypeError:
        return json.dumps(value, sort_keys=True, default=str)


class EnsembleOptimizer:
    """Static combination of member modules.

    ``predict`` asks every member concurrently. Failing members abstain.
    Numeric outputs are reduced with ``config.reducer``; anything else is
    decided by a vote where ties go to the label seen first in member order.
    """

    def __init__(self, modules: Iterable[Module] = (), config: Optional[EnsembleConfig] = None):
        self.config = config if config is not None else EnsembleConfig()
        self.modules: List[Module] = []
        for module in modules:
            self.add_module(module)

    @classmethod
    def from_results(cls, results: Iterable[OptimizationResult],
                     config: Optional[EnsembleConfig] = None) -> "EnsembleOptimizer":
        """Ensemble of the best modules of ``results``, highest final score first."""
        config = config if config is not None else EnsembleConfig()
        ranked = sorted(results, key=lambda result: -result.final_score)
        if config.size is not None:
            ranked = ranked[:config.size]
        return cls([result.best_module for result in ranked], config)

    @classmethod
    async def from_optimizers(cls,
                              base_module: Module,
                              trainset: Sequence[Example],
                              optimizers: Sequence[BaseOptimizer],
                              valset: Optional[Sequence[Example]] = None,
                              config: Optional[EnsembleConfig] = None) -> "EnsembleOptimizer":
        """Run ``optimizers`` concurrently on clones of ``base_module`` and ensemble the results."""
        outcomes = await asyncio.gather(
            *(optimizer.optimize(base_module.clone(), trainset, valset) for optimizer in optimizers),
            return_exceptions=True,
        )
        results = []
        for optimizer, outcome in zip(optimizers, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning(f"{type(optimizer).__name__} failed and is left out of the ensemble: {outcome}")
                continue
            results.append(outcome)
        if not results:
            raise EnsembleError(f"All {len(optimizers)} optimizers failed")
        return cls.from_results(results, config)

    def add_module(self, module: Module) -> None:
        if self.config.size is not None and len(self.modules) >= self.config.size:
            raise EnsembleError(f"Ensemble is limited to {self.config.size} members")
        self.modules.append(module)

    @property
    def size(self) -> int:
        return len(self.modules)

    async def _member_outcomes(self, input: InputValue, semaphore: asyncio.Semaphore) -> List[MemberOutcome]:
        async def run(module: Module):
            async with semaphore:
                return await module.predict(input)

        outcomes = await asyncio.gather(*(run(module) for module in self.modules), return_exceptions=True)
        for index, outcome in enumerate(outcomes):
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome
            if isinstance(outcome, Exception):
                logger.debug(f"Ensemble member {index} abstained: {outcome}")
        return list(outcomes)

    async def predict(self, input: InputValue) -> Prediction:
        outcomes = await self._member_outcomes(input, asyncio.Semaphore(self.config.max_concurrency))
        return self.combine(outcomes)

    def combine(self, outcomes: Sequence[MemberOutcome]) -> Prediction:
        """Reduce member predictions; exceptions in ``outcomes`` count as abstentions."""
        answered = [outcome for outcome in outcomes if isinstance(outcome, Prediction)]
        if not answered:
            raise EnsembleError(f"All {len(outcomes)} ensemble members failed")
        if len(answered) == 1:
            return answered[0]

        outputs = [prediction.output for prediction in answered]
        if self.config.reducer is not None and all(_is_number(output) for output in outputs):
            output = self.config.reducer(outputs)
            metadata: Dict[str, Any] = {"method": "reduce"}
        else:
            output, votes = self.vote(answered)
            metadata = {"method": f"{self.config.voting_mode.value}_vote", "votes": votes}

        usage = reduce(lambda total, prediction: total + prediction.usage, answered, UsageMetadata())
        metadata.update(members=len(answered), abstained=len(outcomes) - len(answered), usage=usage.to_dict())
        return Prediction(output, metadata)

    def vote(self, predictions: Sequence[Prediction]) -> Tuple[Any, float]:
        """Winning output and its tally; ties go to the label encountered first."""
        tallies: Dict[Any, float] = {}
        labels: Dict[Any, Any] = {}
        for prediction in predictions:
            key = _label_key(prediction.output)
            labels.setdefault(key, prediction.output)
            if self.config.voting_mode is VotingMode.SOFT:
                confidence = prediction.confidence
                weight = confidence if confidence is not None else 1.0
            else:
                weight = 1.0
            tallies[key] = tallies.get(key, 0.0) + weight

        winner = None
        for key, tally in tallies.items():
            if winner is None or tally > tallies[winner]:
                winner = key
        return labels[winner], tallies[winner]

    async def evaluate(self, dataset: Sequence[Example],
                       metric: Callable) -> Tuple[EvaluationResult, List[EvaluationResult]]:
        """Score the ensemble and every member on ``dataset``.

        Member scores reuse the predictions gathered for the ensemble, so each
        member is called once per example.
        """
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        all_outcomes = await asyncio.gather(
            *(self._member_outcomes(example.input, semaphore) for example in dataset))

        ensemble_outcomes = []
        member_outcomes: List[List[ExampleOutcome]] = [[] for _ in self.modules]
        for index, (example, outcomes) in enumerate(zip(dataset, all_outcomes)):
            try:
                prediction = self.combine(outcomes)
            except EnsembleError as e:
                ensemble_outcomes.append(ExampleOutcome(index, 0.0, error=describe_error(e)))
            else:
                ensemble_outcomes.append(score_prediction(index, example, prediction, metric))

            for member, outcome in enumerate(outcomes):
                if isinstance(outcome, Exception):
                    member_outcomes[member].append(ExampleOutcome(index, 0.0, error=describe_error(outcome)))
                else:
                    member_outcomes[member].append(score_prediction(index, example, outcome, metric))

        ensemble_result = EvaluationResult.from_outcomes(ensemble_outcomes)
        member_results = [EvaluationResult.from_outcomes(outcomes) for outcomes in member_outcomes]
        member_scores = ", ".join(f"{result.score:.4f}" for result in member_results)
        logger.info(f"Ensemble score {ensemble_result.score:.4f}; members: {member_scores}")
        return ensemble_result, member_results

    def clone(self) -> "EnsembleOptimizer":
        return EnsembleOptimizer([module.clone() for module in self.modules], self.config)
