"""Deterministic modules and language models for tests and offline experiments."""

import asyncio
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .data.example import InputValue, Prediction, format_value
from .modules.base import GenerationOptions, LanguageModel, Module


class _InFlight:
    """Tracks the highest number of overlapping calls."""

    def __init__(self):
        self.current = 0
        self.peak = 0

    def __enter__(self):
        self.current += 1
        self.peak = max(self.peak, self.current)
        return self

    def __exit__(self, *exc_info):
        self.current -= 1
        return False


class MockLanguageModel(LanguageModel):
    """Scripted language model.

    Responses come from ``respond(prompt)`` when given, else cycle through
    ``responses``, else default to ``"response <n>"``. Calls whose 0-based
    index is in ``fail_on_calls`` raise, as do all calls when ``always_fail``.
    """

    def __init__(self,
                 responses: Optional[Sequence[str]] = None,
                 respond: Optional[Callable[[str], str]] = None,
                 fail_on_calls: Iterable[int] = (),
                 always_fail: bool = False,
                 model_name: str = "mock-lm",
                 delay: float = 0.0):
        self.responses = list(responses or [])
        self.respond = respond
        self.fail_on_calls = set(fail_on_calls)
        self.always_fail = always_fail
        self.model_name = model_name
        self.delay = delay
        self.prompts: List[str] = []
        self.options: List[Optional[GenerationOptions]] = []
        self._in_flight = _InFlight()

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    @property
    def max_in_flight(self) -> int:
        return self._in_flight.peak

    async def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        call = len(self.prompts)
        self.prompts.append(prompt)
        self.options.append(options)
        with self._in_flight:
            await asyncio.sleep(self.delay)
            if self.always_fail or call in self.fail_on_calls:
                raise RuntimeError(f"simulated failure of call {call}")
            if self.respond is not None:
                return self.respond(prompt)
            if self.responses:
                return self.responses[call % len(self.responses)]
            return f"response {call}"

    def get_model_name(self) -> str:
        return self.model_name


class MockModule(Module):
    """Module with scripted predictions.

    ``responses`` is either a mapping from input to output or a sequence that
    is cycled through. ``respond(prompt, input)`` takes precedence and sees
    the module's current prompt, which makes prompt changes observable.
    Inputs listed in ``fail_on`` raise. ``usage`` is attached to every
    prediction as token usage metadata.
    """

    def __init__(self,
                 prompt: str = "",
                 responses: Optional[Union[Mapping[str, Any], Sequence[Any]]] = None,
                 respond: Optional[Callable[[str, InputValue], Any]] = None,
                 fail_on: Iterable[Any] = (),
                 usage: Optional[Dict[str, int]] = None,
                 default: Any = "",
                 delay: float = 0.0):
        self.prompt = prompt
        self.responses = responses
        self.respond = respond
        self.fail_on = {format_value(value) for value in fail_on}
        self.usage = usage
        self.default = default
        self.delay = delay
        self.inputs: List[InputValue] = []
        self._in_flight = _InFlight()

    @property
    def max_in_flight(self) -> int:
        return self._in_flight.peak

    def _output_for(self, call: int, input: InputValue) -> Any:
        if self.respond is not None:
            return self.respond(self.prompt, input)
        if isinstance(self.responses, Mapping):
            return self.responses.get(format_value(input), self.default)
        if self.responses:
            return self.responses[call % len(self.responses)]
        return self.default

    async def predict(self, input: InputValue) -> Prediction:
        call = len(self.inputs)
        self.inputs.append(input)
        with self._in_flight:
            await asyncio.sleep(self.delay)
            if format_value(input) in self.fail_on:
                raise RuntimeError(f"simulated failure on {format_value(input)!r}")
            metadata = {"usage": dict(self.usage)} if self.usage else {}
            return Prediction(self._output_for(call, input), metadata)

    def get_prompt(self) -> str:
        return self.prompt

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def clone(self) -> "MockModule":
        return MockModule(self.prompt, self.responses, self.respond, self.fail_on,
                          self.usage, self.default, self.delay)
