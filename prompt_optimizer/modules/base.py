"""Capability contracts consumed by the optimizers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..data.example import InputValue, Prediction


@dataclass(frozen=True)
class GenerationOptions:
    """Sampling options forwarded to a language model. Unset fields are omitted."""
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stop_sequences: List[str] = field(default_factory=list)
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None

    def as_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments in the naming used by OpenAI-style completion APIs."""
        kwargs = {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
        }
        if self.stop_sequences:
            kwargs["stop"] = list(self.stop_sequences)
        return {key: value for key, value in kwargs.items() if value is not None}


class LanguageModel(ABC):
    """Text generation capability.

    Implementations own networking, retries, timeouts and cancellation.
    """

    @abstractmethod
    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """Complete ``prompt`` and return the generated text."""
        ...

    @abstractmethod
    def get_model_name(self) -> str:
        ...


class Module(ABC):
    """Maps an input to a prediction under a mutable prompt configuration."""

    @abstractmethod
    async def predict(self, input: InputValue) -> Prediction:
        ...

    @abstractmethod
    def get_prompt(self) -> str:
        ...

    @abstractmethod
    def set_prompt(self, prompt: str) -> None:
        """Replace the prompt in place."""
        ...

    @abstractmethod
    def clone(self) -> "Module":
        """Independent copy: later changes to either side do not leak into the other."""
        ...
