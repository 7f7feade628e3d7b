"""
Sentiment Analysis Orchestrator

Chooses how an analysis request runs: a single provider, a
confidence-weighted ensemble of several providers, or a rate-limited
sequential batch.
"""

import asyncio
import logging
import random
from typing import Iterable

from config import get_settings
from data.sentiment.base import SentimentProvider
from data.sentiment.exceptions import (
    AllProvidersFailedError,
    ConfigurationError,
    SentimentError,
)
from data.sentiment.gemini import GeminiSentimentProvider
from data.sentiment.huggingface import HuggingFaceSentimentProvider
from data.sentiment.lexicon import enhance_word_analysis
from data.sentiment.models import (
    DetailedSentimentResult,
    EntrySource,
    ProviderName,
    SentimentEntry,
    SentimentResult,
    label_for_score,
)
from data.sentiment.openai_chat import OpenAISentimentProvider
from data.sentiment.store import SentimentStore

logger = logging.getLogger(__name__)

ENSEMBLE_PROVIDERS = (ProviderName.GEMINI, ProviderName.HUGGINGFACE)
ENSEMBLE_CONFIDENCE_BOOST = 1.1


def weighted_score(results: list[DetailedSentimentResult]) -> float:
    """Confidence-weighted mean of the overall scores (0 if no weight)."""
    total_weight = sum(r.overall.confidence for r in results)
    if total_weight == 0:
        return 0.0
    return sum(r.overall.score * r.overall.confidence for r in results) / total_weight


def ensemble_results(
    results: list[DetailedSentimentResult],
    text: str,
    confidence_boost: float = ENSEMBLE_CONFIDENCE_BOOST,
    rng: random.Random | None = None,
) -> DetailedSentimentResult:
    """
    Combine several provider results into one.

    The score is the confidence-weighted mean, the label is re-derived from
    that score, and the confidence is the mean confidence boosted by 1.1x
    and capped at 1.0. Word analysis is recomputed from the raw text rather
    than merged from providers, so the output does not depend on provider
    order.
    """
    if not results:
        raise AllProvidersFailedError("No results to combine")

    score = weighted_score(results)
    avg_confidence = sum(r.overall.confidence for r in results) / len(results)

    overall = SentimentResult(
        sentiment=label_for_score(score),
        score=score,
        confidence=min(avg_confidence * confidence_boost, 1.0),
    )

    return DetailedSentimentResult.from_words(
        overall,
        enhance_word_analysis(text, rng),
        analysis=(
            f"Ensemble of {len(results)} providers: "
            + ", ".join(sorted(r.provider or "unknown" for r in results))
        ),
        provider="ensemble",
    )


class SentimentAnalysisService:
    """
    Orchestrates sentiment analysis across providers.

    Modes:
    - Single provider: delegates and propagates errors unchanged
    - Ensemble: queries providers one after another, drops failures
    - Batch: one text at a time with a fixed delay between requests
    """

    def __init__(
        self,
        providers: dict[ProviderName, SentimentProvider] | None = None,
        batch_delay: float | None = None,
        confidence_boost: float | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the service.

        Args:
            providers: Provider registry (defaults to all three from settings)
            batch_delay: Seconds between batch requests (default from config)
            confidence_boost: Ensemble confidence multiplier (default from config)
            rng: Random source for the ensemble word heuristic
        """
        settings = get_settings()

        if providers is None:
            providers = {
                ProviderName.GEMINI: GeminiSentimentProvider(),
                ProviderName.HUGGINGFACE: HuggingFaceSentimentProvider(),
                ProviderName.OPENAI: OpenAISentimentProvider(),
            }
        self._providers = providers

        self.batch_delay = (
            settings.sentiment_batch_delay if batch_delay is None else batch_delay
        )
        self.confidence_boost = confidence_boost or settings.ensemble_confidence_boost
        self.default_provider = ProviderName(settings.default_provider)
        self._rng = rng

    def get_provider(self, provider: ProviderName | str) -> SentimentProvider:
        try:
            return self._providers[ProviderName(provider)]
        except (KeyError, ValueError):
            raise ConfigurationError(f"Unknown sentiment provider: {provider}")

    def provider_status(self) -> dict[str, bool]:
        """Which registered providers have credentials."""
        return {name.value: p.is_configured for name, p in self._providers.items()}

    async def analyze_text(
        self,
        text: str,
        provider: ProviderName | str | None = None,
    ) -> DetailedSentimentResult:
        """
        Analyze text with a single provider.

        Empty text short-circuits to the neutral placeholder. Provider
        errors propagate unchanged.
        """
        if not text.strip():
            return DetailedSentimentResult.empty()

        client = self.get_provider(provider or self.default_provider)

        try:
            return await client.analyze(text)
        except SentimentError as e:
            logger.error(f"Error with {client.name.value} provider: {e}")
            raise

    async def analyze_with_ensemble(
        self,
        text: str,
        providers: Iterable[ProviderName] = ENSEMBLE_PROVIDERS,
    ) -> DetailedSentimentResult:
        """
        Analyze text with several providers and combine the results.

        Raises:
            AllProvidersFailedError: If no provider produced a result
        """
        results: list[DetailedSentimentResult] = []
        failures: list[Exception] = []

        for name in providers:
            try:
                results.append(await self.analyze_text(text, name))
            except Exception as e:
                logger.warning(f"Provider {ProviderName(name).value} failed: {e}")
                failures.append(e)

        if not results:
            raise AllProvidersFailedError(
                "All sentiment analysis providers failed", failures
            )

        return ensemble_results(results, text, self.confidence_boost, self._rng)

    async def batch_analyze(
        self,
        texts: list[str],
        provider: ProviderName | str | None = None,
    ) -> list[DetailedSentimentResult]:
        """
        Analyze texts strictly one at a time.

        A failed text yields the neutral zero-confidence placeholder and
        does not abort the batch.
        """
        results = []

        for index, text in enumerate(texts):
            try:
                results.append(await self.analyze_text(text, provider))
            except Exception as e:
                logger.error(f"Batch analysis error for item {index}: {e}")
                results.append(DetailedSentimentResult.empty())

            # Rate limiting between requests
            if index < len(texts) - 1:
                await asyncio.sleep(self.batch_delay)

        logger.info(f"Batch analyzed {len(texts)} texts")
        return results

    async def close(self):
        for provider in self._providers.values():
            await provider.close()


def record_result(
    store: SentimentStore,
    text: str,
    result: DetailedSentimentResult,
    source: EntrySource = EntrySource.NORMAL,
) -> SentimentEntry:
    """Store a single analysis result."""
    return store.add_entry(
        text=text,
        sentiment=result.overall.sentiment,
        score=result.overall.score,
        confidence=result.overall.confidence,
        source=source,
        model=result.model or result.provider,
    )


def record_batch(
    store: SentimentStore,
    texts: list[str],
    results: list[DetailedSentimentResult],
) -> list[SentimentEntry]:
    """Store batch results, skipping failed placeholders."""
    items = [
        {
            "text": text,
            "sentiment": result.overall.sentiment,
            "score": result.overall.score,
            "confidence": result.overall.confidence,
            "model": result.model or result.provider,
        }
        for text, result in zip(texts, results)
        if not result.is_placeholder
    ]
    return store.add_batch_entries(items)


# Singleton instance for shared use
_service_instance: SentimentAnalysisService | None = None


def get_sentiment_service() -> SentimentAnalysisService:
    """Get or create the singleton analysis service."""
    global _service_instance
    if _service_instance is None:
        _service_instance = SentimentAnalysisService()
    return _service_instance
