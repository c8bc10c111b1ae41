"""Tests for the answer matching metrics."""

import pytest

from prompt_optimizer import Example, Prediction
from prompt_optimizer.exceptions import ConfigurationError
from prompt_optimizer.metrics import (
    ContainsMatch,
    ExactMatch,
    FuzzyMatch,
    NumericMatch,
    PassageMatch,
    answer_exact_match,
    answer_fuzzy_match,
    answer_numeric_match,
    composite_metric,
    exact_match_metric,
    extract_answer,
    fuzzy_match_metric,
    normalize_text,
    numeric_match_metric,
)


class TestNormalization:
    """Test text normalization shared by all metrics."""

    def test_normalize_text(self):
        assert normalize_text("  Hello \n  World ") == "hello world"
        assert normalize_text("STRASSE") == normalize_text("straße")

    def test_extract_answer_from_mapping(self):
        assert extract_answer({"answer": "Paris", "reasoning": "capital"}) == "Paris"
        assert extract_answer({"output": 4}) == "4"
        assert extract_answer({"response": "yes"}) == "yes"
        assert extract_answer(None) == ""


class TestExactMatch:
    """Test exact match scoring, including the fractional mode."""

    def test_match_after_normalization(self):
        example = Example("q", "Paris")
        assert ExactMatch(example, Prediction("  paris ")) == 1.0
        assert ExactMatch(example, Prediction("Lyon")) == 0.0

    def test_any_acceptable_answer(self):
        example = Example("q", ["NYC", "New York City"])
        assert ExactMatch(example, Prediction("new york city")) == 1.0
        assert ExactMatch(example, Prediction("New York")) == 0.0

    def test_idempotent(self):
        example = Example("q", "4")
        prediction = Prediction("4")
        assert [ExactMatch(example, prediction) for _ in range(3)] == [1.0, 1.0, 1.0]

    def test_fraction_mode_scales_overlap(self):
        example = Example("q", "the quick brown fox")
        prediction = Prediction("quick fox")
        assert answer_exact_match(example, prediction, frac=0.5) == 1.0
        assert answer_exact_match(example, prediction, frac=1.0) == 0.5
        assert answer_exact_match(example, Prediction("nothing"), frac=0.5) == 0.0

    def test_fraction_mode_uses_best_answer(self):
        example = Example("q", ["alpha beta gamma delta", "beta"])
        assert answer_exact_match(example, Prediction("beta gamma"), frac=0.8) == 1.0

    def test_empty_acceptable_list_scores_zero(self):
        example = Example("q", [])
        assert answer_exact_match(example, Prediction("")) == 0.0
        assert answer_exact_match(example, Prediction("anything"), frac=0.5) == 0.0

    def test_mapping_prediction(self):
        assert ExactMatch(Example("q", "4"), Prediction({"answer": "4"})) == 1.0

    def test_invalid_fraction(self):
        with pytest.raises(ConfigurationError):
            exact_match_metric(frac=0)
        with pytest.raises(ConfigurationError):
            answer_exact_match(Example("q", "a"), Prediction("a b"), frac=1.5)


class TestFuzzyMatch:
    """Test edit-distance based fuzzy matching."""

    def test_close_strings_match(self):
        example = Example("q", "color")
        assert FuzzyMatch(example, Prediction("colour")) == 1.0

    def test_distant_strings_do_not_match(self):
        assert FuzzyMatch(Example("q", "cat"), Prediction("elephant")) == 0.0

    def test_threshold(self):
        example = Example("q", "abcd")
        prediction = Prediction("abce")
        assert answer_fuzzy_match(example, prediction, threshold=0.75) == 1.0
        assert answer_fuzzy_match(example, prediction, threshold=0.8) == 0.0
        assert fuzzy_match_metric(0.75)(example, prediction) == 1.0

    def test_empty_strings_are_identical(self):
        assert FuzzyMatch(Example("q", ""), Prediction("  ")) == 1.0


class TestPassageMatch:
    """Test substring matching against context passages."""

    def test_context_from_prediction(self):
        example = Example("Who wrote Hamlet?", "Shakespeare")
        prediction = Prediction("?", {"context": ["Hamlet is a play by William Shakespeare."]})
        assert PassageMatch(example, prediction) == 1.0

    def test_context_from_example(self):
        example = Example("q", "Paris", {"context": "The capital of France is Paris."})
        assert PassageMatch(example, Prediction("")) == 1.0

    def test_context_from_mapping_input(self):
        example = Example({"question": "q", "context": ["nothing relevant"]}, "Paris")
        assert PassageMatch(example, Prediction("Paris")) == 0.0

    def test_without_context(self):
        assert PassageMatch(Example("q", "Paris"), Prediction("Paris")) == 0.0


class TestContainsMatch:
    """Test substring containment of the expected answer."""

    def test_contains(self):
        example = Example("q", "Paris")
        assert ContainsMatch(example, Prediction("The answer is PARIS.")) == 1.0
        assert ContainsMatch(example, Prediction("The answer is Lyon.")) == 0.0


class TestNumericMatch:
    """Test numeric matching within an absolute tolerance."""

    def test_tolerance(self):
        example = Example("q", "10")
        assert answer_numeric_match(example, Prediction("10.4"), tolerance=0.5) == 1.0
        assert answer_numeric_match(example, Prediction("11"), tolerance=0.5) == 0.0
        assert numeric_match_metric(0.5)(example, Prediction("9.6")) == 1.0

    def test_default_tolerance(self):
        example = Example("q", "3.14")
        assert NumericMatch(example, Prediction("3.145")) == 1.0
        assert NumericMatch(example, Prediction("3.2")) == 0.0

    def test_leading_number_and_numeric_outputs(self):
        assert NumericMatch(Example("q", 42), Prediction("42 apples")) == 1.0
        assert NumericMatch(Example("q", "42"), Prediction(42.0)) == 1.0

    def test_non_numeric_scores_zero(self):
        example = Example("q", "10")
        assert NumericMatch(example, Prediction("ten")) == 0.0
        assert NumericMatch(example, Prediction("nan")) == 0.0
        assert NumericMatch(Example("q", "inf"), Prediction("inf")) == 0.0
        assert NumericMatch(example, Prediction(True)) == 0.0

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ConfigurationError):
            numeric_match_metric(-1)


class TestCompositeMetric:
    """Test weighted combination of metrics."""

    def test_perfect_match(self):
        metric = composite_metric([(ExactMatch, 1), (FuzzyMatch, 1)])
        assert metric(Example("q", "Paris"), Prediction("Paris")) == 1.0

    def test_weighted_average(self):
        metric = composite_metric([(ExactMatch, 3), (ContainsMatch, 1)])
        score = metric(Example("q", "Paris"), Prediction("It is Paris"))
        assert score == pytest.approx(0.25)

    def test_weights_need_not_sum_to_one(self):
        metric = composite_metric([(ExactMatch, 2), (ContainsMatch, 2)])
        assert metric(Example("q", "Paris"), Prediction("It is Paris")) == pytest.approx(0.5)

    def test_invalid_weights(self):
        with pytest.raises(ConfigurationError):
            composite_metric([(ExactMatch, -1), (FuzzyMatch, 2)])
        with pytest.raises(ConfigurationError):
            composite_metric([(ExactMatch, 0)])
        with pytest.raises(ConfigurationError):
            composite_metric([])

    def test_scores_stay_in_unit_interval(self):
        metrics = [ExactMatch, FuzzyMatch, PassageMatch, ContainsMatch, NumericMatch,
                   composite_metric([(ExactMatch, 1), (NumericMatch, 2)])]
        cases = [
            (Example("q", "4"), Prediction("4")),
            (Example("q", ["a", "b"]), Prediction("c")),
            (Example("q", ""), Prediction("")),
            (Example("q", "12.5"), Prediction({"answer": "12.5"})),
        ]
        for metric in metrics:
            for example, prediction in cases:
                assert 0.0 <= metric(example, prediction) <= 1.0
