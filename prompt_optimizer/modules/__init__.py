"""Module and language model contracts plus their concrete implementations."""

from .base import GenerationOptions, LanguageModel, Module
from .prompt_module import PromptModule
from .demonstrations import DemonstrationModule, TEMPLATES, format_demonstrations
from .dspy_adapter import DSPyLanguageModel, from_dspy_example

__all__ = [
    'GenerationOptions',
    'LanguageModel',
    'Module',
    'PromptModule',
    'DemonstrationModule',
    'TEMPLATES',
    'format_demonstrations',
    'DSPyLanguageModel',
    'from_dspy_example',
]
