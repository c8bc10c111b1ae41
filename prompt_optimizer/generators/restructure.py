"""Random structural variations that need no language model."""

import logging
from typing import List, Sequence

from ..data.candidate import Candidate
from ..data.example import Example
from ..modules.base import Module
from ..modules.demonstrations import TEMPLATES, DemonstrationModule
from ..random_source import RandomSource
from .base import CandidateGenerator, sample_demonstrations

logger = logging.getLogger(__name__)


class RandomRestructureGenerator(CandidateGenerator):
    """Keeps the base prompt and picks a random template and demonstration set."""

    def __init__(self, max_demonstrations: int = 8):
        self.max_demonstrations = max_demonstrations

    async def generate(self, module: Module, trainset: Sequence[Example],
                       count: int, rng: RandomSource) -> List[Candidate]:
        template_names = sorted(TEMPLATES)
        candidates = []
        for index in range(count):
            template = rng.choice(template_names)
            demonstrations = sample_demonstrations(trainset, rng, self.max_demonstrations)
            candidates.append(Candidate(
                DemonstrationModule.wrap(module, demonstrations, template=template),
                order=index,
                creation_metadata={"strategy": "random", "template": template,
                                   "demonstrations": len(demonstrations)},
            ))
        logger.debug(f"Generated {len(candidates)} restructured candidates")
        return candidates
