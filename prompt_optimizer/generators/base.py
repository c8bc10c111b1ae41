"""Base interfaces for candidate generation strategies."""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Iterable, List, Sequence, TypeVar

from ..data.candidate import Candidate
from ..data.example import Example
from ..modules.base import Module
from ..random_source import RandomSource

T = TypeVar("T")


def sample_demonstrations(trainset: Sequence[Example], rng: RandomSource, max_demonstrations: int) -> List[Example]:
    """Random subset of 1..max_demonstrations examples, capped by the trainset size."""
    if not trainset or max_demonstrations < 1:
        return []
    count = rng.randint(1, min(max_demonstrations, len(trainset)))
    return rng.sample(trainset, count)


def merge_demonstrations(*groups: Iterable[Example], limit: int) -> List[Example]:
    """Concatenate demonstration groups without duplicates, keeping the first ``limit``."""
    merged: List[Example] = []
    for group in groups:
        for example in group:
            if example not in merged:
                merged.append(example)
    return merged[:limit]


async def gather_limited(awaitables: Iterable[Awaitable[T]], max_concurrency: int) -> List[object]:
    """Await all ``awaitables`` with at most ``max_concurrency`` running.

    Results keep the input order; exceptions are returned in place of results.
    """
    semaphore = asyncio.Semaphore(max_concurrency)

    async def run(awaitable):
        async with semaphore:
            return await awaitable

    return await asyncio.gather(*(run(a) for a in awaitables), return_exceptions=True)


class CandidateGenerator(ABC):
    """Interface for candidate generation strategies.

    Every random draw a generator makes happens before it awaits anything,
    so a seeded random source reproduces the same candidates.
    """

    @abstractmethod
    async def generate(self, module: Module, trainset: Sequence[Example],
                       count: int, rng: RandomSource) -> List[Candidate]:
        """Propose up to ``count`` candidates derived from ``module``.

        Args:
            module: Module whose prompt is the starting point
            trainset: Examples demonstrations are drawn from
            count: Number of candidates requested
            rng: Random source of the running optimizer

        Returns:
            Candidates numbered in proposal order
        """
        raise NotImplementedError
