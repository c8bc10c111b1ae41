"""Demonstration-augmented modules."""

from typing import Dict, Iterable, Optional, Sequence, Tuple

from ..data.example import Example, InputValue, Prediction, format_value
from .base import Module

DEFAULT_TEMPLATE = "demonstrations_first"

# Structural layouts combining an instruction with formatted demonstrations.
TEMPLATES: Dict[str, str] = {
    "demonstrations_first": (
        "Here are some examples to guide your responses:\n\n{demonstrations}\n\n{instruction}"
    ),
    "instruction_first": "{instruction}\n\nExamples:\n{demonstrations}\n\nYour response:",
    "step_by_step": (
        "Task: {instruction}\n\nStep 1: Review these examples\n{demonstrations}\n\n"
        "Step 2: Apply the same pattern to your response"
    ),
    "examples_then_task": (
        "Here are some examples:\n\n{demonstrations}\n\nBased on these examples: {instruction}"
    ),
}


def format_demonstration_output(example: Example) -> str:
    outputs = example.acceptable_outputs
    return format_value(outputs[0]) if outputs else ""


def format_demonstrations(examples: Sequence[Example]) -> str:
    """Number and render examples as ``Input:`` / ``Output:`` blocks."""
    return "\n\n".join(
        f"Example {index}:\nInput: {format_value(example.input)}\n"
        f"Output: {format_demonstration_output(example)}"
        for index, example in enumerate(examples, start=1)
    )


class DemonstrationModule(Module):
    """Wraps a module with an instruction and a fixed list of few-shot examples.

    ``get_prompt``/``set_prompt`` address the instruction only; the wrapped
    module always sees the fully rendered prompt.
    """

    def __init__(self,
                 base: Module,
                 instruction: str,
                 demonstrations: Iterable[Example] = (),
                 template: str = DEFAULT_TEMPLATE):
        if template not in TEMPLATES:
            raise ValueError(f"Unknown demonstration template {template!r}; expected one of {sorted(TEMPLATES)}")
        self.base = base
        self.instruction = instruction
        self.demonstrations: Tuple[Example, ...] = tuple(demonstrations)
        self.template = template
        self.base.set_prompt(self.render_prompt())

    @classmethod
    def wrap(cls,
             module: Module,
             demonstrations: Iterable[Example],
             instruction: Optional[str] = None,
             template: str = DEFAULT_TEMPLATE) -> "DemonstrationModule":
        """Attach demonstrations to a clone of ``module``.

        Wrapping a demonstration module replaces its demonstrations instead of
        nesting a second layer.
        """
        if isinstance(module, DemonstrationModule):
            base = module.base.clone()
            instruction = module.instruction if instruction is None else instruction
        else:
            base = module.clone()
            instruction = module.get_prompt() if instruction is None else instruction
        return cls(base, instruction, demonstrations, template)

    def render_prompt(self) -> str:
        if not self.demonstrations:
            return self.instruction
        return TEMPLATES[self.template].format(
            instruction=self.instruction,
            demonstrations=format_demonstrations(self.demonstrations),
        )

    async def predict(self, input: InputValue) -> Prediction:
        return await self.base.predict(input)

    def get_prompt(self) -> str:
        return self.instruction

    def set_prompt(self, prompt: str) -> None:
        self.instruction = prompt
        self.base.set_prompt(self.render_prompt())

    def clone(self) -> "DemonstrationModule":
        return DemonstrationModule(self.base.clone(), self.instruction, self.demonstrations, self.template)

    def __repr__(self) -> str:
        return (f"DemonstrationModule(demonstrations={len(self.demonstrations)}, "
                f"template={self.template!r}, instruction={self.instruction[:40]!r})")
