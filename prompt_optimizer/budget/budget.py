"""Budget protocol for prompt optimization."""

from abc import abstractmethod
from typing import Any, Dict, Optional

from ..observer import OptimizationObserver


class Budget(OptimizationObserver):
    """Protocol for tracking how much of an optimization budget is left.

    A budget compares against plain numbers through its primary remaining
    value, so ``budget > 0`` reads as "there is budget left".
    """

    def __float__(self) -> float:
        """Convert budget to float (remaining budget value)."""
        remaining = self.get_remaining()
        primary_key = next(iter(remaining.keys()))
        return float(remaining[primary_key])

    def __int__(self) -> int:
        """Convert budget to int (remaining budget value)."""
        remaining = self.get_remaining()
        primary_key = next(iter(remaining.keys()))
        return int(remaining[primary_key])

    def __gt__(self, other) -> bool:
        if isinstance(other, (int, float)):
            return type(other)(self) > other
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, (int, float)):
            return type(other)(self) < other
        return NotImplemented

    def __le__(self, other) -> bool:
        if isinstance(other, (int, float)):
            return type(other)(self) <= other
        return NotImplemented

    def __ge__(self, other) -> bool:
        if isinstance(other, (int, float)):
            return type(other)(self) >= other
        return NotImplemented

    def __eq__(self, other) -> bool:
        if isinstance(other, (int, float)):
            return type(other)(self) == other
        return NotImplemented

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = object.__hash__

    def spend_on_evaluation(self, module: Any = None, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Charge one candidate evaluation.

        Args:
            module: Module about to be evaluated
            metadata: Optional details like {"candidate": 3, "examples": 20}
        """
        pass

    @abstractmethod
    def has_budget(self) -> bool:
        ...

    @abstractmethod
    def get_remaining(self) -> Dict[str, float]:
        """Get remaining budget breakdown; the first key is the primary value."""
        ...
