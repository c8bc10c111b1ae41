"""Crossover-based candidate generation."""

import logging
import re
from typing import List, Sequence

from ..data.candidate import Candidate
from ..data.example import Example
from ..modules.base import Module
from ..modules.demonstrations import DemonstrationModule
from ..random_source import RandomSource
from .base import CandidateGenerator, merge_demonstrations, sample_demonstrations

logger = logging.getLogger(__name__)

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+|\n+")


def split_fragments(prompt: str) -> List[str]:
    """Split a prompt into sentence-like fragments."""
    return [fragment.strip() for fragment in _SENTENCE_BOUNDARY.split(prompt) if fragment.strip()]


def crossover_prompts(first: str, second: str, rng: RandomSource) -> str:
    """Uniform crossover of the fragments of two prompts.

    Position ``i`` of the child takes fragment ``i`` of a randomly chosen
    parent; positions only one parent has are kept with probability 1/2.
    """
    fragments_a = split_fragments(first)
    fragments_b = split_fragments(second)
    child = []
    for position in range(max(len(fragments_a), len(fragments_b))):
        options = [fragments[position] for fragments in (fragments_a, fragments_b) if position < len(fragments)]
        if len(options) == 2:
            fragment = options[0] if rng.random() < 0.5 else options[1]
        elif rng.random() < 0.5:
            fragment = options[0]
        else:
            continue
        if fragment not in child:
            child.append(fragment)
    return " ".join(child) if child else first


class CrossoverGenerator(CandidateGenerator):
    """Recombines the base prompt with seed prompts (for example from earlier runs).

    Each child also merges the demonstration sets drawn for its two parents.
    """

    def __init__(self, seed_prompts: Sequence[str] = (), max_demonstrations: int = 8):
        self.seed_prompts = [prompt for prompt in seed_prompts if prompt and prompt.strip()]
        self.max_demonstrations = max_demonstrations

    async def generate(self, module: Module, trainset: Sequence[Example],
                       count: int, rng: RandomSource) -> List[Candidate]:
        base_prompt = module.get_prompt()
        parents = [base_prompt] + [prompt for prompt in self.seed_prompts if prompt != base_prompt]

        candidates = []
        for index in range(count):
            first, second = (rng.sample(parents, 2) if len(parents) > 1 else (base_prompt, base_prompt))
            demonstrations = merge_demonstrations(
                sample_demonstrations(trainset, rng, self.max_demonstrations),
                sample_demonstrations(trainset, rng, self.max_demonstrations),
                limit=self.max_demonstrations,
            )
            child_prompt = crossover_prompts(first, second, rng)
            candidates.append(Candidate(
                DemonstrationModule.wrap(module, demonstrations, instruction=child_prompt),
                order=index,
                creation_metadata={"strategy": "crossover", "parents": [first, second],
                                   "demonstrations": len(demonstrations)},
            ))
        logger.debug(f"Generated {len(candidates)} crossover candidates from {len(parents)} parent prompts")
        return candidates
