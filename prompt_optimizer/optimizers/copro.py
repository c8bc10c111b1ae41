"""Coordinate-ascent prompt optimization with a beam of candidates."""

import logging
import time
from typing import Callable, List, Optional, Sequence

from ..config import COPROConfig
from ..data.beam import Beam
from ..data.candidate import Candidate
from ..data.example import Example
from ..data.results import OptimizationResult
from ..exceptions import GenerationError
from ..generators.base import gather_limited
from ..generators.mutation import PromptMutator
from ..generators.templates import VARIATION_TEMPLATE
from ..metrics import ExactMatch
from ..modules.base import GenerationOptions, LanguageModel, Module
from .base import BaseOptimizer

logger = logging.getLogger(__name__)


class COPROOptimizer(BaseOptimizer):
    """Iteratively rewrites the best prompts found so far.

    The beam starts with the module's own prompt. Each iteration asks the
    language model for ``num_variations`` rewrites of every beam prompt, shows
    it one shared random sample of training examples, scores the rewrites and
    keeps the ``breadth`` best prompts overall.
    """

    config_class = COPROConfig

    def __init__(self,
                 lm: LanguageModel,
                 metric: Callable = ExactMatch,
                 config: Optional[COPROConfig] = None,
                 **kwargs):
        super().__init__(metric, config, **kwargs)
        self.lm = lm
        self.mutator = PromptMutator(
            lm, GenerationOptions(temperature=self.config.temperature), VARIATION_TEMPLATE)

    async def optimize(self, module: Module, trainset: Sequence[Example],
                       valset: Optional[Sequence[Example]] = None) -> OptimizationResult:
        trainset = list(trainset)
        evalset = self.evaluation_set(trainset, valset)
        self._start(module, trainset, valset)

        baseline = Candidate(module.clone(), order=0, creation_metadata={"strategy": "baseline"})
        baseline.evaluation = await self.evaluate(baseline.module, evalset)
        self._record_round(0, baseline.score, baseline.prompt, "baseline",
                           evaluation_failures=len(baseline.evaluation.failures))

        beam = Beam(self.config.breadth)
        beam.seed(baseline)
        known_prompts = {baseline.prompt}
        next_order = 1

        for depth in range(1, self.config.depth + 1):
            if self.should_stop(beam.best().score):
                logger.info(f"Early stopping: score {beam.best().score:.4f} reached the threshold")
                break
            self._start_round(depth)
            round_started = time.perf_counter()

            context = self.rng.sample(trainset, self.config.num_context_examples)
            parents = [parent for parent in beam for _ in range(self.config.num_variations)]
            rewrites = await gather_limited(
                (self.mutator.mutate(parent.prompt, context) for parent in parents),
                self.config.max_concurrency)

            new_candidates: List[Candidate] = []
            failures = 0
            for parent, rewrite in zip(parents, rewrites):
                if isinstance(rewrite, BaseException):
                    if not isinstance(rewrite, Exception):
                        raise rewrite
                    failures += 1
                    logger.warning(f"Prompt variation failed: {rewrite}")
                    continue
                if rewrite in known_prompts:
                    continue
                known_prompts.add(rewrite)
                child = parent.module.clone()
                child.set_prompt(rewrite)
                new_candidates.append(Candidate(
                    child, order=next_order, generation_number=depth, parents=[parent],
                    creation_metadata={"strategy": "copro"},
                ))
                next_order += 1

            if parents and failures == len(parents):
                raise GenerationError(f"All {failures} prompt variation requests failed at depth {depth}")

            await self.evaluate_candidates(new_candidates, evalset)
            beam.merge(new_candidates)
            best = beam.best()
            logger.info(f"Depth {depth}: {len(new_candidates)} new candidates, best score {best.score:.4f}")
            self._record_round(
                depth, best.score, best.prompt,
                f"{len(new_candidates)} new candidates, beam of {len(beam)}",
                round_started,
                generated=len(new_candidates),
                failed_generations=failures,
                beam_size=len(beam),
                beam_scores=[candidate.score for candidate in beam],
            )

        best = beam.best()
        return self._finish(best.module, best.score)
