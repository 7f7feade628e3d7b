"""
OpenAI Sentiment Provider

Asks an OpenAI chat model for a JSON sentiment verdict.
"""

import logging
from typing import Any

from config import get_settings
from data.sentiment.base import SentimentProvider, extract_json_object, require_number
from data.sentiment.exceptions import ParseError
from data.sentiment.models import (
    DetailedSentimentResult,
    ProviderName,
    SentimentResult,
    WordSentiment,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a sentiment analysis expert. Analyze the given text and return a JSON response with:
1. overall_sentiment: "positive", "negative", or "neutral"
2. overall_score: number between -1 and 1
3. confidence: number between 0 and 1
4. word_analysis: array of {word, sentiment, score} for each significant word

Be precise and objective in your analysis."""


def _parse_words(raw: Any) -> list[WordSentiment]:
    """Keep well-formed word entries; scores are clamped by WordSentiment."""
    if not isinstance(raw, list):
        return []
    words = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("word"), str):
            continue
        score = item.get("score", 0.0)
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            score = 0.0
        words.append(
            WordSentiment(
                word=item["word"],
                sentiment=item.get("sentiment", "neutral"),
                score=score,
            )
        )
    return words


class OpenAISentimentProvider(SentimentProvider):
    """OpenAI chat-completions sentiment provider (JSON response mode)."""

    name = ProviderName.OPENAI

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        **kwargs,
    ):
        settings = get_settings()
        kwargs.setdefault("timeout", settings.http_timeout_seconds)
        super().__init__(api_key=api_key or settings.openai_api_key, **kwargs)
        self.model = model or settings.openai_model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")

    async def analyze(self, text: str) -> DetailedSentimentResult:
        self._check_request(text)

        response = await self._post(
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self._api_key}"},
            json={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f'Analyze this text: "{text}"'},
                ],
                "temperature": 0.1,
                "response_format": {"type": "json_object"},
            },
        )
        self._raise_for_status(response)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"OpenAI API error: unexpected response shape: {e}")
            raise ParseError(f"Unexpected OpenAI response shape: {e}") from e

        analysis = extract_json_object(content or "", "OpenAI")
        if not isinstance(analysis.get("overall_sentiment"), str):
            raise ParseError("Invalid response structure from OpenAI API")

        overall = SentimentResult(
            sentiment=analysis["overall_sentiment"],
            score=require_number(analysis.get("overall_score"), "overall_score", "OpenAI"),
            confidence=require_number(analysis.get("confidence"), "confidence", "OpenAI"),
        )

        return DetailedSentimentResult.from_words(
            overall,
            _parse_words(analysis.get("word_analysis")),
            provider=self.name.value,
            model=self.model,
        )
