"""Bounded set of the best candidates kept between search iterations."""

from typing import Iterable, Iterator, List, Optional

from .candidate import Candidate


class Beam:
    """The top ``breadth`` candidates, best first.

    Merging is stable: among equal scores, earlier-discovered candidates keep
    their place ahead of newer ones.
    """

    def __init__(self, breadth: int, *candidates: Candidate):
        if breadth < 1:
            raise ValueError("breadth must be positive")
        self.breadth = breadth
        self.candidates: List[Candidate] = []
        if candidates:
            self.merge(candidates)

    def merge(self, new_candidates: Iterable[Candidate]) -> List[Candidate]:
        """Merge scored candidates into the beam and return those that were dropped."""
        pool = self.candidates + [c for c in new_candidates if c.is_scored]
        pool.sort(key=Candidate.rank_key)
        self.candidates = pool[:self.breadth]
        return pool[self.breadth:]

    def seed(self, candidate: Candidate) -> None:
        """Insert the starting candidate even if its evaluation failed."""
        self.candidates.insert(0, candidate)
        del self.candidates[self.breadth:]

    def best(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None

    def __len__(self) -> int:
        return len(self.candidates)

    def __iter__(self) -> Iterator[Candidate]:
        return iter(list(self.candidates))
