"""
Sentiment Data Models

Data classes for provider results, stored history entries and the
derived live feed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# Thresholds used whenever the system derives a label from a score
POSITIVE_THRESHOLD = 0.1
NEGATIVE_THRESHOLD = -0.1

DEFAULT_ANALYSIS_TEXT = "Sentiment analysis completed successfully."

EMOTION_KEYS = (
    "joy",
    "anger",
    "sadness",
    "fear",
    "surprise",
    "disgust",
    "trust",
    "anticipation",
)
CONTEXTUAL_FACTOR_KEYS = ("sarcasm", "formality", "subjectivity", "intensity")
LINGUISTIC_FEATURE_KEYS = ("negations", "intensifiers", "emoticons", "exclamations")


class SentimentLabel(str, Enum):
    """Categorical sentiment polarity."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @classmethod
    def coerce(cls, value: Any) -> "SentimentLabel":
        """Map an external label to a known value, neutral when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NEUTRAL

    def flipped(self) -> "SentimentLabel":
        """Swap positive and negative; neutral stays neutral."""
        if self is SentimentLabel.POSITIVE:
            return SentimentLabel.NEGATIVE
        if self is SentimentLabel.NEGATIVE:
            return SentimentLabel.POSITIVE
        return self


class EntrySource(str, Enum):
    """Where a stored entry came from."""

    NORMAL = "normal"
    LIVE = "live"
    BATCH = "batch"


class ProviderName(str, Enum):
    """Registered sentiment providers."""

    GEMINI = "gemini"
    HUGGINGFACE = "huggingface"
    OPENAI = "openai"


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def label_for_score(score: float) -> SentimentLabel:
    """Derive the sentiment label from a score using the ±0.1 thresholds."""
    if score > POSITIVE_THRESHOLD:
        return SentimentLabel.POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class SentimentResult:
    """
    Overall sentiment judgment.

    Attributes:
        sentiment: positive, negative or neutral
        score: Polarity from -1.0 (very negative) to +1.0 (very positive)
        confidence: Certainty of the judgment (0.0 to 1.0)
    """

    sentiment: SentimentLabel
    score: float
    confidence: float

    def __post_init__(self):
        """Coerce the label and clamp score/confidence into range."""
        self.sentiment = SentimentLabel.coerce(self.sentiment)
        self.score = clamp(float(self.score), -1.0, 1.0)
        self.confidence = clamp(float(self.confidence), 0.0, 1.0)

    @classmethod
    def from_score(cls, score: float, confidence: float) -> "SentimentResult":
        """Build a result whose label is derived from the score."""
        return cls(
            sentiment=label_for_score(score), score=score, confidence=confidence
        )

    @classmethod
    def neutral(cls) -> "SentimentResult":
        return cls(sentiment=SentimentLabel.NEUTRAL, score=0.0, confidence=0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sentiment": self.sentiment.value,
            "score": self.score,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SentimentResult":
        return cls(
            sentiment=data.get("sentiment", "neutral"),
            score=data.get("score", 0.0),
            confidence=data.get("confidence", 0.0),
        )


@dataclass
class WordSentiment:
    """Locally computed sentiment for a single token."""

    word: str
    sentiment: SentimentLabel
    score: float

    def __post_init__(self):
        self.sentiment = SentimentLabel.coerce(self.sentiment)
        self.score = clamp(float(self.score), -1.0, 1.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "word": self.word,
            "sentiment": self.sentiment.value,
            "score": self.score,
        }


@dataclass
class SentimentMetrics:
    """Token tallies for a word-level breakdown."""

    word_count: int = 0
    positive_words: int = 0
    negative_words: int = 0
    neutral_words: int = 0

    @classmethod
    def from_words(cls, words: list[WordSentiment]) -> "SentimentMetrics":
        return cls(
            word_count=len(words),
            positive_words=sum(
                1 for w in words if w.sentiment is SentimentLabel.POSITIVE
            ),
            negative_words=sum(
                1 for w in words if w.sentiment is SentimentLabel.NEGATIVE
            ),
            neutral_words=sum(1 for w in words if w.sentiment is SentimentLabel.NEUTRAL),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "wordCount": self.word_count,
            "positiveWords": self.positive_words,
            "negativeWords": self.negative_words,
            "neutralWords": self.neutral_words,
        }


@dataclass
class DetailedSentimentResult:
    """
    Normalized output of every provider and of the orchestrator.

    The optional enrichment fields are only filled by providers whose
    prompt asks for them (Gemini); they stay empty otherwise.
    """

    overall: SentimentResult
    words: list[WordSentiment] = field(default_factory=list)
    metrics: SentimentMetrics = field(default_factory=SentimentMetrics)
    emotions: dict[str, float] = field(default_factory=dict)
    key_phrases: list[str] = field(default_factory=list)
    analysis: str = DEFAULT_ANALYSIS_TEXT
    contextual_factors: dict[str, float] = field(default_factory=dict)
    linguistic_features: dict[str, int] = field(default_factory=dict)
    provider: str | None = None
    model: str | None = None

    @classmethod
    def from_words(
        cls, overall: SentimentResult, words: list[WordSentiment], **kwargs: Any
    ) -> "DetailedSentimentResult":
        """Build a result and tally metrics from the word breakdown."""
        return cls(
            overall=overall,
            words=words,
            metrics=SentimentMetrics.from_words(words),
            **kwargs,
        )

    @classmethod
    def empty(cls) -> "DetailedSentimentResult":
        """Neutral, zero-confidence placeholder."""
        return cls(overall=SentimentResult.neutral())

    @property
    def is_placeholder(self) -> bool:
        return (
            self.overall.confidence == 0.0
            and self.overall.score == 0.0
            and not self.words
            and self.provider is None
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall.to_dict(),
            "words": [w.to_dict() for w in self.words],
            "metrics": self.metrics.to_dict(),
            "emotions": self.emotions,
            "keyPhrases": self.key_phrases,
            "analysis": self.analysis,
            "contextualFactors": self.contextual_factors,
            "linguisticFeatures": self.linguistic_features,
            "provider": self.provider,
            "model": self.model,
        }


@dataclass(frozen=True)
class SentimentEntry:
    """
    A stored analysis. Created only by the store and never updated.

    Attributes:
        id: Time-based id with a random suffix
        text: The analyzed text
        sentiment: Overall label
        score: Overall score (-1.0 to 1.0)
        confidence: Overall confidence (0.0 to 1.0)
        timestamp: When the entry was recorded (UTC)
        source: normal, live or batch
        model: Provider or model that produced the result
    """

    id: str
    text: str
    sentiment: SentimentLabel
    score: float
    confidence: float
    timestamp: datetime
    source: EntrySource = EntrySource.NORMAL
    model: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        data = {
            "id": self.id,
            "text": self.text,
            "sentiment": self.sentiment.value,
            "score": self.score,
            "confidence": self.confidence,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source.value,
        }
        if self.model is not None:
            data["model"] = self.model
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SentimentEntry":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            sentiment=SentimentLabel(data["sentiment"]),
            score=float(data["score"]),
            confidence=float(data["confidence"]),
            timestamp=_parse_timestamp(data["timestamp"]),
            source=EntrySource(data.get("source", "normal")),
            model=data.get("model"),
        )


@dataclass(frozen=True)
class LiveFeedEntry:
    """Display-oriented mirror of a recent entry."""

    id: str
    text: str
    sentiment: SentimentLabel
    score: float
    emoji: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "sentiment": self.sentiment.value,
            "score": self.score,
            "emoji": self.emoji,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LiveFeedEntry":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            sentiment=SentimentLabel(data["sentiment"]),
            score=float(data["score"]),
            emoji=str(data.get("emoji", "")),
            timestamp=_parse_timestamp(data["timestamp"]),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """Entry of the standalone recent-analyses history."""

    id: str
    text: str
    sentiment: SentimentLabel
    score: float
    confidence: float
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "sentiment": self.sentiment.value,
            "score": self.score,
            "confidence": self.confidence,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        return cls(
            id=str(data["id"]),
            text=str(data["text"]),
            sentiment=SentimentLabel(data["sentiment"]),
            score=float(data["score"]),
            confidence=float(data["confidence"]),
            timestamp=_parse_timestamp(data["timestamp"]),
        )
