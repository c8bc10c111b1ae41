"""Candidate generation strategies."""

from typing import Optional, Sequence

from ..config import SearchStrategy
from ..exceptions import ConfigurationError
from ..modules.base import GenerationOptions, LanguageModel
from .base import CandidateGenerator, gather_limited, merge_demonstrations, sample_demonstrations
from .crossover import CrossoverGenerator, crossover_prompts, split_fragments
from .mutation import MutationGenerator, PromptMutator, clean_generated_prompt
from .restructure import RandomRestructureGenerator


def create_generator(strategy,
                     lm: Optional[LanguageModel] = None,
                     max_demonstrations: int = 8,
                     max_concurrency: int = 8,
                     seed_prompts: Sequence[str] = (),
                     options: Optional[GenerationOptions] = None) -> CandidateGenerator:
    """Build the generator for a :class:`SearchStrategy`."""
    strategy = SearchStrategy(strategy)
    if strategy is SearchStrategy.MUTATION:
        if lm is None:
            raise ConfigurationError("The mutation strategy requires a language model")
        return MutationGenerator(PromptMutator(lm, options), max_demonstrations, max_concurrency)
    if strategy is SearchStrategy.CROSSOVER:
        return CrossoverGenerator(seed_prompts, max_demonstrations)
    return RandomRestructureGenerator(max_demonstrations)


__all__ = [
    'CandidateGenerator',
    'CrossoverGenerator',
    'MutationGenerator',
    'PromptMutator',
    'RandomRestructureGenerator',
    'clean_generated_prompt',
    'create_generator',
    'crossover_prompts',
    'gather_limited',
    'merge_demonstrations',
    'sample_demonstrations',
    'split_fragments',
]
