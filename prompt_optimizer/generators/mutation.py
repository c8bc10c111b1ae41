"""Language-model driven prompt rewriting."""

import logging
from typing import List, Optional, Sequence

from ..data.candidate import Candidate
from ..data.example import Example
from ..exceptions import GenerationError
from ..modules.base import GenerationOptions, LanguageModel, Module
from ..modules.demonstrations import DemonstrationModule, format_demonstrations
from ..random_source import RandomSource
from .base import CandidateGenerator, gather_limited, sample_demonstrations
from .templates import MUTATION_TEMPLATE

logger = logging.getLogger(__name__)

_QUOTES = ('"', "'", "`")


def clean_generated_prompt(text: str) -> str:
    """Strip whitespace and a pair of surrounding quotes from model output."""
    text = (text or "").strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTES:
        text = text[1:-1].strip()
    return text


class PromptMutator:
    """Asks a language model to rewrite a prompt.

    ``template`` receives ``{prompt}`` and ``{examples}``.
    """

    def __init__(self, lm: LanguageModel,
                 options: Optional[GenerationOptions] = None,
                 template: str = MUTATION_TEMPLATE):
        self.lm = lm
        self.options = options
        self.template = template

    def build_request(self, prompt: str, examples: Sequence[Example] = ()) -> str:
        return self.template.format(
            prompt=prompt,
            examples=format_demonstrations(examples) if examples else "(none)",
        )

    async def mutate(self, prompt: str, examples: Sequence[Example] = ()) -> str:
        """Return a rewritten prompt; blank output raises :class:`GenerationError`."""
        text = await self.lm.generate(self.build_request(prompt, examples), self.options)
        rewritten = clean_generated_prompt(text)
        if not rewritten:
            raise GenerationError(f"{self.lm.get_model_name()} returned an empty prompt")
        return rewritten


class MutationGenerator(CandidateGenerator):
    """Paraphrases the base prompt and pairs each rewrite with random demonstrations."""

    def __init__(self, mutator: PromptMutator, max_demonstrations: int = 8, max_concurrency: int = 8):
        self.mutator = mutator
        self.max_demonstrations = max_demonstrations
        self.max_concurrency = max_concurrency

    async def generate(self, module: Module, trainset: Sequence[Example],
                       count: int, rng: RandomSource) -> List[Candidate]:
        base_prompt = module.get_prompt()
        demonstration_sets = [sample_demonstrations(trainset, rng, self.max_demonstrations)
                              for _ in range(count)]
        rewrites = await gather_limited(
            (self.mutator.mutate(base_prompt, demonstrations) for demonstrations in demonstration_sets),
            self.max_concurrency)

        candidates = []
        for index, (demonstrations, rewrite) in enumerate(zip(demonstration_sets, rewrites)):
            if isinstance(rewrite, BaseException):
                if not isinstance(rewrite, Exception):
                    raise rewrite
                logger.warning(f"Mutation {index} failed: {rewrite}")
                continue
            candidates.append(Candidate(
                DemonstrationModule.wrap(module, demonstrations, instruction=rewrite),
                order=index,
                creation_metadata={"strategy": "mutation", "demonstrations": len(demonstrations)},
            ))

        if count and not candidates:
            raise GenerationError(f"All {count} prompt mutations failed")
        logger.debug(f"Generated {len(candidates)}/{count} mutation candidates")
        return candidates
