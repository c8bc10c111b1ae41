"""Candidate data structure for prompt search."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .results import EvaluationResult


@dataclass(eq=False)
class Candidate:
    """A proposed prompt / demonstration configuration under evaluation.

    Candidates live only for the duration of one ``optimize`` call. ``order``
    is the discovery index and breaks score ties in favour of earlier
    candidates.
    """
    module: Any  # Module being scored
    order: int = 0
    generation_number: int = 0
    parents: List['Candidate'] = field(default_factory=list)
    creation_metadata: Dict[str, Any] = field(default_factory=dict)
    evaluation: Optional[EvaluationResult] = None

    @property
    def prompt(self) -> str:
        return self.module.get_prompt()

    @property
    def is_scored(self) -> bool:
        """Scored candidates took part in a completed, not wholly failed, evaluation."""
        return self.evaluation is not None and not self.evaluation.all_failed

    @property
    def score(self) -> float:
        return self.evaluation.score if self.evaluation is not None else 0.0

    def rank_key(self):
        """Sort key: higher score first, then earlier discovery."""
        return (-self.score, self.order)

    def best_overall(self, other: 'Candidate') -> 'Candidate':
        if other.rank_key() < self.rank_key():
            return other
        return self

    def describe(self) -> str:
        strategy = self.creation_metadata.get("strategy", "candidate")
        return f"{strategy} #{self.order} (generation {self.generation_number})"
