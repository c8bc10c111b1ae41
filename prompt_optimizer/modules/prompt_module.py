"""Prompt-only module backed by a language model."""

from typing import Optional

from ..data.example import InputValue, Prediction, format_value
from .base import GenerationOptions, LanguageModel, Module


class PromptModule(Module):
    """Sends ``prompt`` followed by the input to a language model."""

    def __init__(self, prompt: str, lm: LanguageModel, options: Optional[GenerationOptions] = None):
        self.prompt = prompt
        self.lm = lm
        self.options = options

    def render(self, input: InputValue) -> str:
        return f"{self.prompt}\n\nInput: {format_value(input)}\nOutput:"

    async def predict(self, input: InputValue) -> Prediction:
        text = await self.lm.generate(self.render(input), self.options)
        return Prediction(
            output=text.strip(),
            metadata={"model": self.lm.get_model_name()},
        )

    def get_prompt(self) -> str:
        return self.prompt

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def clone(self) -> "PromptModule":
        # The language model is a shared, stateless capability; only the prompt is copied.
        return PromptModule(self.prompt, self.lm, self.options)

    def __repr__(self) -> str:
        return f"PromptModule(model={self.lm.get_model_name()!r}, prompt={self.prompt[:40]!r})"
