"""Tests for the coordinate-ascent prompt optimizer."""

import asyncio

import pytest

from prompt_optimizer import COPROConfig, COPROOptimizer, Example
from prompt_optimizer.exceptions import GenerationError
from prompt_optimizer.testing import MockLanguageModel, MockModule


def careful_student(prompt, input):
    """Answers correctly only when told to be careful."""
    return input.upper() if "carefully" in prompt else "?"


class TestCOPROOptimizer:
    """Test beam search over rewritten prompts."""

    def setup_method(self):
        self.trainset = [Example(word, word.upper()) for word in ("alpha", "beta", "gamma", "delta")]
        self.module = MockModule("Answer.", respond=careful_student)

    def test_depth_zero_returns_baseline(self):
        lm = MockLanguageModel()
        result = asyncio.run(COPROOptimizer(lm, config=COPROConfig(depth=0)).optimize(self.module, self.trainset))

        assert result.best_prompt == "Answer."
        assert result.final_score == 0.0
        assert result.rounds_completed == 0
        assert lm.call_count == 0

    def test_finds_better_prompt(self):
        lm = MockLanguageModel(responses=["Answer quickly.", "Answer carefully.", "Reply."])
        config = COPROConfig(breadth=3, depth=2, num_variations=3, seed=0)

        result = asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))

        assert result.best_prompt == "Answer carefully."
        assert result.final_score == 1.0
        assert self.module.get_prompt() == "Answer."

    def test_early_stopping(self):
        lm = MockLanguageModel(responses=["Answer carefully."])
        config = COPROConfig(depth=5, num_variations=1)

        result = asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))

        assert result.rounds_completed == 1
        assert lm.call_count == 1

    def test_beam_never_exceeds_breadth(self):
        lm = MockLanguageModel(respond=lambda prompt: f"Variant {len(prompt)} {id(prompt)}")
        config = COPROConfig(breadth=2, depth=3, num_variations=3, early_stopping_threshold=None, seed=1)

        result = asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))

        for round in result.rounds[1:]:
            assert round.metadata["beam_size"] <= 2
            assert len(round.metadata["beam_scores"]) <= 2
        assert lm.call_count == 3 + 2 * 3 + 2 * 3

    def test_ties_prefer_earlier_candidates(self):
        lm = MockLanguageModel(responses=["First rewrite.", "Second rewrite."])
        config = COPROConfig(breadth=2, depth=1, num_variations=2, early_stopping_threshold=None)

        result = asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))

        assert result.best_prompt == "Answer."

    def test_duplicate_rewrites_are_skipped(self):
        lm = MockLanguageModel(responses=["Answer.", "Other."])
        config = COPROConfig(breadth=4, depth=1, num_variations=4, early_stopping_threshold=None)

        result = asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))

        assert result.rounds[1].metadata["generated"] == 1

    def test_context_and_temperature(self):
        lm = MockLanguageModel(responses=["A.", "B.", "C."])
        config = COPROConfig(depth=1, num_variations=3, temperature=1.3, num_context_examples=2,
                             early_stopping_threshold=None, seed=2)

        asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))

        assert len(set(lm.prompts)) == 1
        assert lm.prompts[0].count("Example ") == 2
        assert all(options.temperature == 1.3 for options in lm.options)

    def test_partial_generation_failures(self):
        lm = MockLanguageModel(responses=["Answer carefully.", "x", "y"], fail_on_calls={1, 2})
        config = COPROConfig(depth=1, num_variations=3)

        result = asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))

        assert result.final_score == 1.0
        assert result.rounds[1].metadata["failed_generations"] == 2

    def test_all_generation_failures_are_fatal(self):
        lm = MockLanguageModel(always_fail=True)
        with pytest.raises(GenerationError):
            asyncio.run(COPROOptimizer(lm, config=COPROConfig(depth=2)).optimize(self.module, self.trainset))

    def test_uses_validation_set(self):
        valset = [Example("omega", "OMEGA")]
        lm = MockLanguageModel(responses=["Answer carefully."])

        result = asyncio.run(COPROOptimizer(lm, config=COPROConfig(depth=1, num_variations=1)).optimize(
            self.module, self.trainset, valset))

        assert "omega" not in lm.prompts[0]
        assert result.rounds[0].score == 0.0
        assert result.final_score == 1.0

    def test_seeded_runs_are_reproducible(self):
        def run():
            lm = MockLanguageModel(responses=["Answer carefully.", "Be quick.", "Reply.", "Think."])
            config = COPROConfig(breadth=2, depth=2, num_variations=2, num_context_examples=2,
                                 early_stopping_threshold=None, seed=9)
            result = asyncio.run(COPROOptimizer(lm, config=config).optimize(self.module, self.trainset))
            return lm.prompts, [(r.round, r.score, r.prompt) for r in result.rounds]

        assert run() == run()
