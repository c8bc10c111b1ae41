"""Few-shot demonstration bootstrapping."""

import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..config import BootstrapConfig
from ..data.example import Example, Prediction, format_value
from ..data.results import EvaluationResult, OptimizationResult
from ..exceptions import GenerationError
from ..generators.base import gather_limited
from ..generators.mutation import clean_generated_prompt
from ..generators.templates import TEACHER_TEMPLATE
from ..metrics import ExactMatch
from ..modules.base import GenerationOptions, LanguageModel, Module
from ..modules.demonstrations import DemonstrationModule
from .base import BaseOptimizer

logger = logging.getLogger(__name__)


class BootstrapOptimizer(BaseOptimizer):
    """Builds few-shot demonstrations from labeled and teacher-generated examples.

    Each round selects the labeled examples the student already handles best,
    asks the teacher to answer some of the remaining ones, keeps the answers
    the metric accepts, and scores the student with those demonstrations in
    front of its instruction. Without a teacher model the student itself
    produces the bootstrapped answers.
    """

    config_class = BootstrapConfig

    def __init__(self,
                 metric: Callable = ExactMatch,
                 teacher: Optional[LanguageModel] = None,
                 config: Optional[BootstrapConfig] = None,
                 teacher_options: Optional[GenerationOptions] = None,
                 **kwargs):
        super().__init__(metric, config, **kwargs)
        self.teacher = teacher
        self.teacher_options = teacher_options

    async def optimize(self, module: Module, trainset: Sequence[Example],
                       valset: Optional[Sequence[Example]] = None) -> OptimizationResult:
        trainset = list(trainset)
        evalset = self.evaluation_set(trainset, valset)
        self._start(module, trainset, valset)

        baseline = await self.evaluate(module, evalset)
        best_module, best_score = module, baseline.score
        self._record_round(0, baseline.score, module.get_prompt(), "baseline",
                           evaluation_failures=len(baseline.failures))

        ranking = await self.evaluate(module, trainset) if valset else baseline
        ranked = self.rank_examples(ranking)

        for round_number in range(1, self.config.max_rounds + 1):
            if self.should_stop(best_score):
                logger.info(f"Early stopping: score {best_score:.4f} reached the threshold")
                break
            self._start_round(round_number)
            round_started = time.perf_counter()

            pool = self._round_pool(len(trainset), round_number)
            labeled_indices = [index for index in ranked if index in pool][:self.config.max_labeled]
            labeled = [trainset[index] for index in labeled_indices]
            remaining = [trainset[index] for index in sorted(pool) if index not in labeled_indices]
            bootstrapped, teacher_failures = await self.bootstrap(module, remaining, has_labeled=bool(labeled))

            candidate = DemonstrationModule.wrap(module, labeled + bootstrapped)
            result = await self.evaluate(candidate, evalset)
            improved = result.score > best_score
            if improved:
                best_module, best_score = candidate, result.score
            logger.info(f"Round {round_number}: {len(labeled)} labeled, {len(bootstrapped)} bootstrapped, "
                        f"score={result.score:.4f}{' (new best)' if improved else ''}")
            self._record_round(
                round_number, result.score, candidate.get_prompt(),
                f"{len(labeled)} labeled + {len(bootstrapped)} bootstrapped demonstrations",
                round_started,
                labeled=len(labeled),
                bootstrapped=len(bootstrapped),
                teacher_failures=teacher_failures,
                evaluation_failures=len(result.failures),
                usage=result.usage.to_dict(),
                improved=improved,
            )

        return self._finish(best_module, best_score)

    @staticmethod
    def rank_examples(ranking: EvaluationResult) -> List[int]:
        """Example indices by the student's score, best first, ties in dataset order."""
        scores = ranking.individual_scores
        return sorted(range(len(scores)), key=lambda index: -scores[index])

    def _round_pool(self, size: int, round_number: int) -> set:
        if round_number == 1 or size < 2:
            return set(range(size))
        return set(self.rng.sample(range(size), size // 2))

    async def bootstrap(self, module: Module, candidates: Sequence[Example],
                        has_labeled: bool = False) -> Tuple[List[Example], int]:
        """Generate and filter teacher demonstrations.

        Returns the accepted demonstrations and the number of failed teacher
        calls. Raises :class:`GenerationError` when every teacher call failed
        and there are no labeled demonstrations to fall back on.
        """
        limit = self.config.max_bootstrapped
        attempts = self.rng.shuffled(candidates)[:3 * limit]
        accepted: List[Example] = []
        failures = 0
        issued = 0

        wave_size = self.config.max_concurrency
        for wave_start in range(0, len(attempts), wave_size):
            if len(accepted) >= limit:
                break
            wave = attempts[wave_start:wave_start + wave_size]
            issued += len(wave)
            outputs = await gather_limited((self.teach(module, example) for example in wave), wave_size)
            for example, output in zip(wave, outputs):
                if isinstance(output, BaseException):
                    if not isinstance(output, Exception):
                        raise output
                    failures += 1
                    logger.warning(f"Teacher failed to answer an example: {output}")
                    continue
                if len(accepted) < limit and self._accepts(example, output):
                    accepted.append(example.with_output(output, bootstrapped=True))
                    logger.debug(f"Accepted bootstrapped demonstration {len(accepted)}/{limit}")

        if issued and failures == issued and not has_labeled:
            raise GenerationError(f"All {issued} teacher calls failed and no labeled demonstrations are available")
        return accepted, failures

    async def teach(self, module: Module, example: Example) -> Any:
        """Ask the teacher (or the student when there is none) for an output."""
        if self.teacher is None:
            prediction = await module.predict(example.input)
            return prediction.output
        request = TEACHER_TEMPLATE.format(input=format_value(example.input))
        text = clean_generated_prompt(await self.teacher.generate(request, self.teacher_options))
        if not text:
            raise GenerationError(f"{self.teacher.get_model_name()} returned an empty answer")
        return text

    def _accepts(self, example: Example, output: Any) -> bool:
        try:
            score = float(self.metric(example, Prediction(output)))
        except Exception as e:
            logger.warning(f"Metric failed on a bootstrapped output: {e}")
            return False
        return score >= self.config.acceptance_threshold
