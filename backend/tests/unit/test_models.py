"""
Unit tests for sentiment data models.
"""

from datetime import datetime, timezone

import pytest

from data.sentiment.models import (
    DetailedSentimentResult,
    EntrySource,
    HistoryEntry,
    SentimentEntry,
    SentimentLabel,
    SentimentMetrics,
    SentimentResult,
    WordSentiment,
    label_for_score,
)


class TestLabelForScore:
    """Tests for the ±0.1 label thresholds."""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (0.5, SentimentLabel.POSITIVE),
            (0.11, SentimentLabel.POSITIVE),
            (0.1, SentimentLabel.NEUTRAL),
            (0.0, SentimentLabel.NEUTRAL),
            (-0.1, SentimentLabel.NEUTRAL),
            (-0.11, SentimentLabel.NEGATIVE),
            (-1.0, SentimentLabel.NEGATIVE),
        ],
    )
    def test_thresholds(self, score, expected):
        assert label_for_score(score) is expected


class TestSentimentLabel:
    def test_coerce_known_values(self):
        assert SentimentLabel.coerce("POSITIVE") is SentimentLabel.POSITIVE
        assert SentimentLabel.coerce(" negative ") is SentimentLabel.NEGATIVE

    def test_coerce_unknown_is_neutral(self):
        assert SentimentLabel.coerce("mixed") is SentimentLabel.NEUTRAL
        assert SentimentLabel.coerce(None) is SentimentLabel.NEUTRAL

    def test_flipped(self):
        assert SentimentLabel.POSITIVE.flipped() is SentimentLabel.NEGATIVE
        assert SentimentLabel.NEGATIVE.flipped() is SentimentLabel.POSITIVE
        assert SentimentLabel.NEUTRAL.flipped() is SentimentLabel.NEUTRAL


class TestSentimentResult:
    """Tests for range normalization."""

    def test_score_and_confidence_clamped(self):
        result = SentimentResult(sentiment="positive", score=1.7, confidence=-0.2)

        assert result.score == 1.0
        assert result.confidence == 0.0

    def test_label_string_coerced(self):
        result = SentimentResult(sentiment="Negative", score=-0.5, confidence=0.5)

        assert result.sentiment is SentimentLabel.NEGATIVE

    def test_from_score_derives_label(self):
        assert SentimentResult.from_score(0.3, 0.5).sentiment is SentimentLabel.POSITIVE
        assert SentimentResult.from_score(0.05, 0.5).sentiment is SentimentLabel.NEUTRAL

    def test_from_dict_defaults(self):
        result = SentimentResult.from_dict({})

        assert result == SentimentResult.neutral()

    def test_word_score_clamped(self):
        word = WordSentiment("great", "positive", 1.4)

        assert word.score == 1.0


class TestDetailedSentimentResult:
    def test_from_words_tallies_metrics(self):
        words = [
            WordSentiment("great", "positive", 0.8),
            WordSentiment("awful", "negative", -0.9),
            WordSentiment("movie", "neutral", 0.01),
            WordSentiment("best", "positive", 0.9),
        ]

        result = DetailedSentimentResult.from_words(
            SentimentResult.from_score(0.2, 0.6), words
        )

        assert result.metrics == SentimentMetrics(
            word_count=4, positive_words=2, negative_words=1, neutral_words=1
        )

    def test_empty_is_placeholder(self):
        result = DetailedSentimentResult.empty()

        assert result.is_placeholder
        assert result.overall.sentiment is SentimentLabel.NEUTRAL
        assert result.overall.confidence == 0.0

    def test_provider_result_is_not_placeholder(self):
        result = DetailedSentimentResult(
            overall=SentimentResult.neutral(), provider="gemini"
        )

        assert not result.is_placeholder

    def test_to_dict_uses_camel_case(self):
        data = DetailedSentimentResult.empty().to_dict()

        assert data["metrics"] == {
            "wordCount": 0,
            "positiveWords": 0,
            "negativeWords": 0,
            "neutralWords": 0,
        }
        assert "keyPhrases" in data
        assert "contextualFactors" in data
        assert "linguisticFeatures" in data


class TestEntries:
    def test_sentiment_entry_round_trip(self):
        entry = SentimentEntry(
            id="1700000000000-abc123def",
            text="Lovely day",
            sentiment=SentimentLabel.POSITIVE,
            score=0.7,
            confidence=0.9,
            timestamp=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
            source=EntrySource.LIVE,
            model="gemini-2.0-flash",
        )

        assert SentimentEntry.from_dict(entry.to_dict()) == entry

    def test_entry_without_model_omits_key(self):
        entry = SentimentEntry(
            id="1",
            text="t",
            sentiment=SentimentLabel.NEUTRAL,
            score=0.0,
            confidence=0.5,
            timestamp=datetime.now(timezone.utc),
        )

        assert "model" not in entry.to_dict()

    def test_naive_and_zulu_timestamps_are_utc(self):
        data = {
            "id": "1",
            "text": "t",
            "sentiment": "neutral",
            "score": 0,
            "confidence": 0,
            "timestamp": "2024-05-01T12:30:00Z",
        }

        entry = HistoryEntry.from_dict(data)

        assert entry.timestamp == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

    def test_unknown_stored_sentiment_rejected(self):
        with pytest.raises(ValueError):
            SentimentEntry.from_dict(
                {
                    "id": "1",
                    "text": "t",
                    "sentiment": "ecstatic",
                    "score": 0,
                    "confidence": 0,
                    "timestamp": "2024-05-01T12:30:00+00:00",
                }
            )
