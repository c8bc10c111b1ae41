"""Tests for the evaluation engine."""

import asyncio

import pytest

from prompt_optimizer import Evaluator, Example, ExactMatch, Prediction
from prompt_optimizer.exceptions import ConfigurationError
from prompt_optimizer.testing import MockModule


class TestEvaluator:
    """Test scoring a module over a dataset."""

    def setup_method(self):
        self.dataset = [
            Example("2+2?", "4"),
            Example("3+3?", "6"),
            Example("5+5?", "10"),
            Example("1+1?", "2"),
        ]

    def test_empty_dataset(self):
        """An empty dataset scores 0 without raising."""
        result = asyncio.run(Evaluator(ExactMatch).evaluate(MockModule(), []))

        assert result.score == 0.0
        assert result.individual_scores == ()
        assert result.failures == ()

    def test_perfect_module(self):
        module = MockModule(responses={"2+2?": "4"})
        result = asyncio.run(Evaluator(ExactMatch).evaluate(module, [Example("2+2?", "4")]))

        assert result.score == 1.0
        assert result.individual_scores == (1.0,)

    def test_scores_follow_dataset_order(self):
        """Concurrent predictions finishing out of order keep their positions."""
        module = MockModule(responses={"2+2?": "4", "3+3?": "wrong", "5+5?": "10", "1+1?": "2"}, delay=0.001)
        result = asyncio.run(Evaluator(ExactMatch, max_concurrency=2).evaluate(module, self.dataset))

        assert result.individual_scores == (1.0, 0.0, 1.0, 1.0)
        assert result.score == pytest.approx(0.75)

    def test_failures_are_recorded(self):
        """Failing predictions score 0 and are reported separately."""
        module = MockModule(responses={"2+2?": "4", "3+3?": "6", "5+5?": "10", "1+1?": "2"}, fail_on=["5+5?"])
        result = asyncio.run(Evaluator(ExactMatch).evaluate(module, self.dataset))

        assert result.individual_scores == (1.0, 1.0, 0.0, 1.0)
        assert [failure.index for failure in result.failures] == [2]
        assert "simulated failure" in result.failures[0].error
        assert not result.all_failed

    def test_metric_errors_are_recorded(self):
        def broken_metric(example, prediction, trace=None):
            raise ValueError("cannot score")

        result = asyncio.run(Evaluator(broken_metric).evaluate(MockModule(default="x"), self.dataset[:2]))

        assert result.score == 0.0
        assert len(result.failures) == 2
        assert result.all_failed

    def test_metric_override(self):
        always_half = lambda example, prediction, trace=None: 0.5
        result = asyncio.run(Evaluator(ExactMatch).evaluate(MockModule(), self.dataset, always_half))

        assert result.score == 0.5

    def test_usage_is_accumulated(self):
        module = MockModule(default="4", usage={"input_tokens": 10, "output_tokens": 2})
        result = asyncio.run(Evaluator(ExactMatch).evaluate(module, self.dataset))

        assert result.usage.input_tokens == 40
        assert result.usage.output_tokens == 8
        assert result.usage.total_tokens == 48

    def test_concurrency_is_bounded(self):
        module = MockModule(default="4", delay=0.001)
        dataset = [Example(f"q{i}", "4") for i in range(12)]
        asyncio.run(Evaluator(ExactMatch, max_concurrency=3).evaluate(module, dataset))

        assert 1 < module.max_in_flight <= 3

    def test_concurrent_evaluations_share_the_limit(self):
        module = MockModule(default="4", delay=0.001)
        dataset = [Example(f"q{i}", "4") for i in range(6)]
        evaluator = Evaluator(ExactMatch, max_concurrency=2)

        async def run_both():
            return await asyncio.gather(evaluator.evaluate(module, dataset), evaluator.evaluate(module, dataset))

        results = asyncio.run(run_both())
        assert [result.score for result in results] == [1.0, 1.0]
        assert module.max_in_flight <= 2

    def test_reusable_across_event_loops(self):
        evaluator = Evaluator(ExactMatch, max_concurrency=2)
        module = MockModule(default="4")

        first = asyncio.run(evaluator.evaluate(module, self.dataset[:1]))
        second = asyncio.run(evaluator.evaluate(module, self.dataset[:1]))

        assert first.score == second.score == 1.0

    def test_invalid_concurrency(self):
        with pytest.raises(ConfigurationError):
            Evaluator(ExactMatch, max_concurrency=0)

    def test_prediction_output_is_kept(self):
        module = MockModule(default="4")
        prediction = asyncio.run(Evaluator(ExactMatch).predict(module, Example("2+2?", "4")))

        assert prediction == Prediction("4")
