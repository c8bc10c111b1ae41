"""Budgeted random search over prompts and demonstration sets."""

import logging
import time
from typing import Callable, Optional, Sequence

from ..budget import EvaluationBudget
from ..config import RandomSearchConfig
from ..data.candidate import Candidate
from ..data.example import Example
from ..data.results import OptimizationResult
from ..exceptions import BudgetExhaustedError
from ..generators import create_generator
from ..metrics import ExactMatch
from ..modules.base import GenerationOptions, LanguageModel, Module
from .base import BaseOptimizer

logger = logging.getLogger(__name__)


class RandomSearchOptimizer(BaseOptimizer):
    """Generates candidates with one strategy and scores them within a budget.

    Candidates are scored in waves of ``max_concurrency``. Each evaluation is
    charged to the budget before it starts; candidates left unevaluated when
    the budget runs out are not eligible as the best one.
    """

    config_class = RandomSearchConfig

    def __init__(self,
                 metric: Callable = ExactMatch,
                 lm: Optional[LanguageModel] = None,
                 config: Optional[RandomSearchConfig] = None,
                 seed_prompts: Optional[Sequence[str]] = None,
                 **kwargs):
        super().__init__(metric, config, **kwargs)
        self.lm = lm
        self.seed_prompts = list(seed_prompts or [])
        self.generator = create_generator(
            self.config.strategy,
            lm=lm,
            max_demonstrations=self.config.max_demonstrations,
            max_concurrency=self.config.max_concurrency,
            seed_prompts=self.seed_prompts,
            options=GenerationOptions(temperature=self.config.mutation_temperature,
                                      max_tokens=self.config.mutation_max_tokens),
        )

    async def optimize(self, module: Module, trainset: Sequence[Example],
                       valset: Optional[Sequence[Example]] = None) -> OptimizationResult:
        trainset = list(trainset)
        evalset = self.evaluation_set(trainset, valset)
        budget = EvaluationBudget(self.config.budget)
        self._start(module, trainset, valset, extra_observers=[budget])

        candidates = await self.generator.generate(module, trainset, self.config.num_candidates, self.rng)
        logger.info(f"Generated {len(candidates)} {self.config.strategy.value} candidates")

        best: Optional[Candidate] = None
        wave_size = self.config.max_concurrency
        for round_number, wave_start in enumerate(range(0, len(candidates), wave_size), start=1):
            if not budget > 0:
                logger.info(f"Budget exhausted after {budget.consumed} evaluations")
                break
            self._start_round(round_number)
            round_started = time.perf_counter()

            wave = []
            for candidate in candidates[wave_start:wave_start + wave_size]:
                if not budget > 0:
                    break
                budget.spend_on_evaluation(candidate.module, {"candidate": candidate.order})
                wave.append(candidate)
            await self.evaluate_candidates(wave, evalset)

            scored = [candidate for candidate in wave if candidate.is_scored]
            for candidate in scored:
                best = candidate if best is None else best.best_overall(candidate)
            self._record_round(
                round_number,
                best.score if best else 0.0,
                best.prompt if best else module.get_prompt(),
                f"{len(scored)}/{len(wave)} candidates scored",
                round_started,
                evaluated=len(wave),
                scored=len(scored),
                scores=[candidate.score for candidate in wave],
                remaining_budget=int(budget),
            )
            if best is not None and self.should_stop(best.score):
                logger.info(f"Early stopping: score {best.score:.4f} reached the threshold")
                break

        if best is None:
            raise BudgetExhaustedError(
                f"No candidate could be scored with a budget of {self.config.budget} evaluations")
        logger.info(f"Best candidate: {best.describe()} with score {best.score:.4f}")
        return self._finish(best.module, best.score)
