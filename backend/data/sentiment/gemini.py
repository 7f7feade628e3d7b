"""
Gemini Sentiment Provider

Sends a single structured prompt to Google Gemini and parses the JSON
object it returns.
"""

import logging
import random
from typing import Any

from config import get_settings
from data.sentiment.base import SentimentProvider, extract_json_object, require_number
from data.sentiment.exceptions import ParseError, ProviderHTTPError
from data.sentiment.lexicon import analyze_words_locally, keyword_fallback_analysis
from data.sentiment.models import (
    CONTEXTUAL_FACTOR_KEYS,
    DEFAULT_ANALYSIS_TEXT,
    EMOTION_KEYS,
    LINGUISTIC_FEATURE_KEYS,
    DetailedSentimentResult,
    ProviderName,
    SentimentResult,
    clamp,
)

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are an expert sentiment analysis AI with deep understanding of human emotions, context, and linguistic nuances. Analyze the following text with extreme precision.

ANALYSIS REQUIREMENTS:
1. Consider context, sarcasm, irony, and implicit meanings
2. Account for cultural and linguistic variations
3. Evaluate emotional intensity and subtlety
4. Consider negations, qualifiers, and conditional statements
5. Analyze both explicit and implicit sentiment indicators

TEXT TO ANALYZE: "{text}"

Return a JSON object with this EXACT structure:
{{
  "overall": {{
    "sentiment": "positive" | "negative" | "neutral",
    "score": number between -1.0 and 1.0 (precise to 3 decimals),
    "confidence": number between 0.0 and 1.0 (how certain you are)
  }},
  "emotions": {{
    "joy": number between 0.0 and 1.0,
    "anger": number between 0.0 and 1.0,
    "sadness": number between 0.0 and 1.0,
    "fear": number between 0.0 and 1.0,
    "surprise": number between 0.0 and 1.0,
    "disgust": number between 0.0 and 1.0,
    "trust": number between 0.0 and 1.0,
    "anticipation": number between 0.0 and 1.0
  }},
  "keyPhrases": ["array of 3-8 most influential phrases"],
  "analysis": "Detailed 2-3 sentence explanation of your reasoning",
  "contextualFactors": {{
    "sarcasm": number between 0.0 and 1.0,
    "formality": number between 0.0 and 1.0,
    "subjectivity": number between 0.0 and 1.0,
    "intensity": number between 0.0 and 1.0
  }},
  "linguisticFeatures": {{
    "negations": number (count of negation words),
    "intensifiers": number (count of intensifying words),
    "emoticons": number (count of emotional symbols),
    "exclamations": number (count of exclamation marks)
  }}
}}

SCORING GUIDELINES:
- Score -1.0: Extremely negative (hatred, despair, fury)
- Score -0.7: Very negative (anger, disappointment, frustration)
- Score -0.3: Somewhat negative (mild criticism, concern)
- Score 0.0: Truly neutral (factual, balanced, no emotional lean)
- Score +0.3: Somewhat positive (mild approval, satisfaction)
- Score +0.7: Very positive (happiness, excitement, praise)
- Score +1.0: Extremely positive (euphoria, love, ecstasy)

CONFIDENCE GUIDELINES:
- 0.9-1.0: Crystal clear sentiment, unambiguous
- 0.7-0.9: Clear sentiment with minor ambiguity
- 0.5-0.7: Moderate confidence, some mixed signals
- 0.3-0.5: Low confidence, highly ambiguous
- 0.0-0.3: Very uncertain, contradictory signals

Return ONLY the JSON object, no additional text.
"""

# Low temperature for consistent scoring
GENERATION_CONFIG = {
    "temperature": 0.05,
    "topK": 1,
    "topP": 0.8,
    "maxOutputTokens": 3072,
    "candidateCount": 1,
}


def build_prompt(text: str) -> str:
    return PROMPT_TEMPLATE.format(text=text)


def _clamped_mapping(raw: Any, keys: tuple[str, ...]) -> dict[str, float]:
    if not isinstance(raw, dict):
        return {}
    values = {}
    for key in keys:
        value = raw.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            values[key] = clamp(float(value), 0.0, 1.0)
    return values


def _count_mapping(raw: Any) -> dict[str, int]:
    if not isinstance(raw, dict):
        return {}
    counts = {}
    for key in LINGUISTIC_FEATURE_KEYS:
        value = raw.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            counts[key] = max(0, int(value))
    return counts


class GeminiSentimentProvider(SentimentProvider):
    """
    Google Gemini sentiment provider.

    The prompt embeds the exact output schema plus score and confidence
    rubrics. Word-level breakdowns are computed locally since Gemini only
    returns overall judgments and key phrases.
    """

    name = ProviderName.GEMINI

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        fallback_on_error: bool = False,
        rng: random.Random | None = None,
        **kwargs,
    ):
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key (defaults to settings)
            model: Model identifier (defaults to settings)
            base_url: API base URL (defaults to settings)
            fallback_on_error: Return a keyword analysis instead of raising
                transient errors
            rng: Random source for local word scoring
            **kwargs: Additional args for base SentimentProvider
        """
        settings = get_settings()
        kwargs.setdefault("timeout", settings.http_timeout_seconds)
        super().__init__(api_key=api_key or settings.gemini_api_key, **kwargs)
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.fallback_on_error = fallback_on_error
        self._rng = rng or random.Random()

    async def analyze(self, text: str) -> DetailedSentimentResult:
        self._check_request(text)

        try:
            content = await self._generate(build_prompt(text))
            return self._parse_analysis(content, text)
        except (ParseError, ProviderHTTPError) as e:
            logger.error(f"Gemini API error: {e}")
            if not self.fallback_on_error:
                raise
            logger.warning("Using keyword fallback for Gemini analysis")
            result = keyword_fallback_analysis(text, self._rng)
            result.provider = self.name.value
            return result

    async def _generate(self, prompt: str) -> str:
        """Call generateContent and return the first candidate's text."""
        response = await self._post(
            f"{self.base_url}/{self.model}:generateContent",
            params={"key": self._api_key},
            json={
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": GENERATION_CONFIG,
            },
        )
        self._raise_for_status(response)

        try:
            data = response.json()
        except ValueError as e:
            raise ParseError(f"Gemini returned a non-JSON body: {e}") from e

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not candidates:
            raise ParseError("No response from Gemini API")

        try:
            return candidates[0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ParseError(f"Unexpected Gemini response shape: {e}") from e

    def _parse_analysis(self, content: str, text: str) -> DetailedSentimentResult:
        """Validate and normalize the model's JSON object."""
        analysis = extract_json_object(content, "Gemini")

        overall = analysis.get("overall")
        if not isinstance(overall, dict) or not isinstance(
            overall.get("sentiment"), str
        ):
            raise ParseError("Invalid response structure from Gemini API")

        result = SentimentResult(
            sentiment=overall["sentiment"],
            score=require_number(overall.get("score"), "overall.score", "Gemini"),
            confidence=require_number(
                overall.get("confidence"), "overall.confidence", "Gemini"
            ),
        )

        key_phrases = analysis.get("keyPhrases")
        if not isinstance(key_phrases, list):
            key_phrases = []

        explanation = analysis.get("analysis")
        if not isinstance(explanation, str):
            explanation = DEFAULT_ANALYSIS_TEXT

        return DetailedSentimentResult.from_words(
            result,
            analyze_words_locally(text, self._rng),
            emotions=_clamped_mapping(analysis.get("emotions"), EMOTION_KEYS),
            key_phrases=[str(p) for p in key_phrases],
            analysis=explanation,
            contextual_factors=_clamped_mapping(
                analysis.get("contextualFactors"), CONTEXTUAL_FACTOR_KEYS
            ),
            linguistic_features=_count_mapping(analysis.get("linguisticFeatures")),
            provider=self.name.value,
            model=self.model,
        )
