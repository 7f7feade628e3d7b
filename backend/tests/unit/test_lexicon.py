"""
Unit tests for the local keyword heuristics.
"""

import random

import pytest

from data.sentiment.lexicon import (
    analyze_words_locally,
    enhance_word_analysis,
    fallback_analysis,
    keyword_fallback_analysis,
    tokenize,
)
from data.sentiment.models import SentimentLabel


def test_tokenize_drops_short_tokens():
    assert tokenize("I am SO happy today") == ["happy", "today"]


class TestAnalyzeWordsLocally:
    def test_keyword_ranges(self, seeded_rng):
        words = analyze_words_locally("great terrible table", seeded_rng)

        assert words[0].sentiment is SentimentLabel.POSITIVE
        assert 0.7 <= words[0].score <= 1.0
        assert words[1].sentiment is SentimentLabel.NEGATIVE
        assert -1.0 <= words[1].score <= -0.7
        assert words[2].sentiment is SentimentLabel.NEUTRAL
        assert -0.1 <= words[2].score <= 0.1

    def test_punctuation_stripped(self, seeded_rng):
        words = analyze_words_locally("Amazing!!! feature,", seeded_rng)

        assert [w.word for w in words] == ["amazing", "feature"]

    def test_seeded_output_is_reproducible(self):
        first = analyze_words_locally("a great new day", random.Random(1))
        second = analyze_words_locally("a great new day", random.Random(1))

        assert first == second


class TestFallbackAnalysis:
    """Tests for the never-failing local analysis."""

    def test_positive_text(self, seeded_rng):
        result = fallback_analysis("I love this new feature!", seeded_rng)

        assert result.overall.sentiment is SentimentLabel.POSITIVE
        assert result.overall.score > 0.1
        assert [w.word for w in result.words] == ["love", "this", "new", "feature"]
        assert result.words[0].sentiment is SentimentLabel.POSITIVE
        assert result.words[0].score >= 0.7

    def test_confidence_follows_magnitude(self, seeded_rng):
        result = fallback_analysis("terrible awful horrible", seeded_rng)

        assert result.overall.sentiment is SentimentLabel.NEGATIVE
        assert result.overall.confidence == 1.0

    def test_empty_input_is_neutral(self, seeded_rng):
        result = fallback_analysis("", seeded_rng)

        assert result.overall.sentiment is SentimentLabel.NEUTRAL
        assert result.overall.score == 0.0
        assert result.overall.confidence == 0.0
        assert result.words == []

    def test_metrics_match_words(self, seeded_rng):
        result = fallback_analysis("good bad chair", seeded_rng)

        assert result.metrics.word_count == 3
        assert result.metrics.positive_words == 1
        assert result.metrics.negative_words == 1
        assert result.metrics.neutral_words == 1


class TestKeywordFallbackAnalysis:
    def test_counts_dominant_keywords(self, seeded_rng):
        result = keyword_fallback_analysis("good great love bad", seeded_rng)

        assert result.overall.sentiment is SentimentLabel.POSITIVE
        assert result.overall.score == pytest.approx(0.6)
        assert result.overall.confidence == 0.6
        assert result.key_phrases == ["good", "great", "love", "bad"]
        assert result.analysis.startswith("Fallback analysis: The text appears to be positive")

    def test_score_capped(self, seeded_rng):
        result = keyword_fallback_analysis(
            "bad bad terrible awful hate worst sad", seeded_rng
        )

        assert result.overall.score == pytest.approx(-0.8)

    def test_tie_is_neutral(self, seeded_rng):
        result = keyword_fallback_analysis("good bad", seeded_rng)

        assert result.overall.sentiment is SentimentLabel.NEUTRAL
        assert result.overall.score == 0.0


class TestEnhanceWordAnalysis:
    """Tests for intensifier and negation handling."""

    def test_negated_intensified_word_flips(self):
        rng = random.Random(3)
        expected_rng = random.Random(3)
        for _ in range(3):
            expected_rng.uniform(-0.05, 0.05)
        base = expected_rng.uniform(0.4, 0.7)

        words = enhance_word_analysis("This is not very good", rng)

        assert [w.word for w in words] == ["this", "not", "very", "good"]
        good = words[-1]
        assert good.sentiment is SentimentLabel.NEGATIVE
        assert good.score == pytest.approx(base * 1.3 * -0.8)

    def test_modifiers_stay_neutral(self, seeded_rng):
        words = enhance_word_analysis("This is not very good", seeded_rng)

        assert words[1].sentiment is SentimentLabel.NEUTRAL
        assert words[2].sentiment is SentimentLabel.NEUTRAL

    def test_negation_window_is_three_tokens(self, seeded_rng):
        words = enhance_word_analysis("not one two three excellent", seeded_rng)

        assert words[-1].sentiment is SentimentLabel.POSITIVE

    def test_intensified_strong_word_clamped(self, seeded_rng):
        words = enhance_word_analysis("absolutely phenomenal", seeded_rng)

        assert words[1].sentiment is SentimentLabel.POSITIVE
        assert words[1].score <= 1.0

    def test_strong_negative_tier(self, seeded_rng):
        words = enhance_word_analysis("dreadful", seeded_rng)

        assert words[0].sentiment is SentimentLabel.NEGATIVE
        assert -1.0 <= words[0].score <= -0.8
