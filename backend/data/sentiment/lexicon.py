"""
Lexicon Heuristics

Deterministic keyword scoring used when providers are unavailable and for
the ensemble's word-level breakdown. Scores carry a small random jitter so
unmatched tokens are not perfectly flat; pass a seeded ``random.Random``
for reproducible output.
"""

import random
import re

from data.sentiment.models import (
    DetailedSentimentResult,
    SentimentLabel,
    SentimentResult,
    WordSentiment,
    clamp,
    label_for_score,
)

_NON_WORD = re.compile(r"[^\w]")

POSITIVE_WORDS = frozenset(
    {
        "good",
        "great",
        "excellent",
        "amazing",
        "wonderful",
        "fantastic",
        "love",
        "like",
        "happy",
        "joy",
        "awesome",
        "perfect",
        "brilliant",
        "outstanding",
        "superb",
        "beautiful",
        "best",
        "incredible",
        "marvelous",
        "spectacular",
        "terrific",
    }
)

NEGATIVE_WORDS = frozenset(
    {
        "bad",
        "terrible",
        "awful",
        "hate",
        "horrible",
        "disgusting",
        "worst",
        "sad",
        "angry",
        "frustrated",
        "annoying",
        "disappointing",
        "useless",
        "pathetic",
        "ugly",
        "stupid",
        "boring",
        "dull",
        "unpleasant",
        "irritating",
    }
)

# Shorter lists used by the Gemini keyword fallback
KEYWORD_POSITIVE = (
    "good",
    "great",
    "excellent",
    "amazing",
    "wonderful",
    "fantastic",
    "love",
    "like",
    "happy",
    "awesome",
)
KEYWORD_NEGATIVE = (
    "bad",
    "terrible",
    "awful",
    "hate",
    "horrible",
    "disgusting",
    "worst",
    "sad",
    "angry",
    "frustrated",
)

STRONG_POSITIVE = frozenset(
    {
        "amazing",
        "excellent",
        "outstanding",
        "brilliant",
        "fantastic",
        "wonderful",
        "incredible",
        "spectacular",
        "marvelous",
        "superb",
        "exceptional",
        "phenomenal",
        "magnificent",
        "extraordinary",
        "perfect",
        "flawless",
        "stunning",
        "breathtaking",
    }
)

STRONG_NEGATIVE = frozenset(
    {
        "terrible",
        "awful",
        "horrible",
        "disgusting",
        "pathetic",
        "abysmal",
        "atrocious",
        "dreadful",
        "appalling",
        "deplorable",
        "catastrophic",
        "disastrous",
        "nightmarish",
        "unbearable",
        "excruciating",
        "devastating",
        "horrendous",
    }
)

MODERATE_POSITIVE = frozenset(
    {
        "good",
        "nice",
        "pleasant",
        "enjoyable",
        "satisfying",
        "decent",
        "fine",
        "solid",
        "reasonable",
        "acceptable",
        "adequate",
        "favorable",
        "positive",
    }
)

MODERATE_NEGATIVE = frozenset(
    {
        "bad",
        "poor",
        "disappointing",
        "unsatisfactory",
        "inadequate",
        "subpar",
        "mediocre",
        "inferior",
        "deficient",
        "problematic",
        "concerning",
        "troubling",
    }
)

INTENSIFIERS = frozenset(
    {"very", "extremely", "incredibly", "absolutely", "completely", "totally"}
)
NEGATIONS = frozenset(
    {"not", "no", "never", "nothing", "nobody", "nowhere", "don't", "won't", "can't"}
)

INTENSIFIER_MULTIPLIER = 1.3
NEGATION_MULTIPLIER = -0.8
NEGATION_WINDOW = 3


def tokenize(text: str) -> list[str]:
    """Lower-case, split on whitespace and drop tokens of two chars or fewer."""
    return [word for word in text.lower().split() if len(word) > 2]


def clean_token(token: str) -> str:
    return _NON_WORD.sub("", token)


def analyze_words_locally(
    text: str, rng: random.Random | None = None
) -> list[WordSentiment]:
    """Score each token against the positive/negative keyword lists."""
    rng = rng or random.Random()
    words = []
    for token in tokenize(text):
        word = clean_token(token)
        if word in POSITIVE_WORDS:
            words.append(
                WordSentiment(word, SentimentLabel.POSITIVE, rng.uniform(0.7, 1.0))
            )
        elif word in NEGATIVE_WORDS:
            words.append(
                WordSentiment(word, SentimentLabel.NEGATIVE, -rng.uniform(0.7, 1.0))
            )
        else:
            words.append(
                WordSentiment(word, SentimentLabel.NEUTRAL, rng.uniform(-0.1, 0.1))
            )
    return words


def fallback_analysis(
    text: str, rng: random.Random | None = None
) -> DetailedSentimentResult:
    """
    Local analysis that never fails.

    Averages the per-token keyword scores; confidence grows with the
    magnitude of the average and is capped at 1.0.
    """
    words = analyze_words_locally(text, rng)
    average = sum(w.score for w in words) / len(words) if words else 0.0
    overall = SentimentResult(
        sentiment=label_for_score(average),
        score=average,
        confidence=min(abs(average) * 2, 1.0),
    )
    return DetailedSentimentResult.from_words(
        overall,
        words,
        analysis="Local keyword analysis: provider unavailable.",
    )


def keyword_fallback_analysis(
    text: str, rng: random.Random | None = None
) -> DetailedSentimentResult:
    """
    Count-based keyword analysis with a fixed 0.6 confidence.

    Each dominant keyword moves the score by 0.2, capped at ±0.8.
    """
    tokens = text.lower().split()
    positive = [t for t in tokens if t in KEYWORD_POSITIVE]
    negative = [t for t in tokens if t in KEYWORD_NEGATIVE]

    sentiment = SentimentLabel.NEUTRAL
    score = 0.0
    if len(positive) > len(negative):
        sentiment = SentimentLabel.POSITIVE
        score = min(0.8, len(positive) * 0.2)
    elif len(negative) > len(positive):
        sentiment = SentimentLabel.NEGATIVE
        score = max(-0.8, -len(negative) * 0.2)

    return DetailedSentimentResult.from_words(
        SentimentResult(sentiment=sentiment, score=score, confidence=0.6),
        analyze_words_locally(text, rng),
        key_phrases=[t for t in tokens if t in KEYWORD_POSITIVE or t in KEYWORD_NEGATIVE],
        analysis=(
            f"Fallback analysis: The text appears to be {sentiment.value} based on "
            "keyword analysis. This is a simplified analysis due to API limitations."
        ),
    )


def _base_word_score(word: str, rng: random.Random) -> tuple[SentimentLabel, float]:
    if word in STRONG_POSITIVE:
        return SentimentLabel.POSITIVE, rng.uniform(0.8, 1.0)
    if word in STRONG_NEGATIVE:
        return SentimentLabel.NEGATIVE, -rng.uniform(0.8, 1.0)
    if word in MODERATE_POSITIVE:
        return SentimentLabel.POSITIVE, rng.uniform(0.4, 0.7)
    if word in MODERATE_NEGATIVE:
        return SentimentLabel.NEGATIVE, -rng.uniform(0.4, 0.7)
    return SentimentLabel.NEUTRAL, rng.uniform(-0.05, 0.05)


def enhance_word_analysis(
    text: str, rng: random.Random | None = None
) -> list[WordSentiment]:
    """
    Context-aware word analysis.

    Tokens are scored against four severity tiers. An intensifier directly
    before a token amplifies it by 1.3x; a negation within the previous
    three tokens multiplies by -0.8 and flips the label. Only tokens with a
    magnitude above 0.1 are adjusted. Final scores are clamped to [-1, 1].
    """
    rng = rng or random.Random()
    tokens = tokenize(text)
    words = []

    for index, token in enumerate(tokens):
        word = clean_token(token)
        sentiment, score = _base_word_score(word, rng)

        has_intensifier = index > 0 and tokens[index - 1] in INTENSIFIERS
        window = tokens[max(0, index - NEGATION_WINDOW) : index]
        has_negation = any(t in NEGATIONS for t in window)

        if has_intensifier and abs(score) > 0.1:
            score *= INTENSIFIER_MULTIPLIER

        if has_negation and abs(score) > 0.1:
            score *= NEGATION_MULTIPLIER
            sentiment = sentiment.flipped()

        words.append(WordSentiment(word, sentiment, clamp(score, -1.0, 1.0)))

    return words
