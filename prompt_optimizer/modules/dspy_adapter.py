"""Adapters between dspy objects and the optimizer contracts."""

from typing import Any, Optional

import dspy

from ..data.example import Example
from ..exceptions import GenerationError
from .base import GenerationOptions, LanguageModel


class DSPyLanguageModel(LanguageModel):
    """Exposes a ``dspy.LM`` as a :class:`LanguageModel`.

    Caching, retries and provider routing stay with dspy/LiteLLM.
    """

    def __init__(self, lm: "dspy.LM"):
        self.lm = lm

    @classmethod
    def from_model(cls, model: str, **kwargs) -> "DSPyLanguageModel":
        """Create the adapter around ``dspy.LM(model, **kwargs)``."""
        return cls(dspy.LM(model, **kwargs))

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        kwargs = options.as_kwargs() if options else {}
        outputs = await self.lm.acall(prompt=prompt, **kwargs)
        if not outputs:
            raise GenerationError(f"{self.get_model_name()} returned no completion")
        first = outputs[0]
        # Completions carrying logprobs or tool calls come back as dicts.
        if isinstance(first, dict):
            first = first.get("text") or ""
        return str(first)

    def get_model_name(self) -> str:
        return str(getattr(self.lm, "model", type(self.lm).__name__))


def from_dspy_example(example: "dspy.Example", output_field: Optional[str] = None) -> Example:
    """Convert a ``dspy.Example`` whose inputs were declared with ``with_inputs``.

    A single input field becomes a text input, several become a mapping. The
    output is ``output_field`` when given, else the only label, else all
    labels as a mapping.
    """
    inputs = dict(example.inputs().items())
    labels = dict(example.labels().items())
    input_value: Any = next(iter(inputs.values())) if len(inputs) == 1 else inputs

    if output_field is not None:
        output = example[output_field]
    elif len(labels) == 1:
        output = next(iter(labels.values()))
    else:
        output = labels
    return Example(input=input_value, output=output)
