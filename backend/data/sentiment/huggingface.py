"""
Hugging Face Sentiment Provider

Classifies text with hosted Hugging Face sentiment models, trying several
candidate models in order. The provider always has the local keyword
heuristic as a terminal fallback.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable

import httpx

from config import get_settings
from data.sentiment.base import SentimentProvider
from data.sentiment.exceptions import (
    AllProvidersFailedError,
    ParseError,
    ProviderHTTPError,
)
from data.sentiment.lexicon import analyze_words_locally, fallback_analysis
from data.sentiment.models import (
    DetailedSentimentResult,
    ProviderName,
    SentimentLabel,
    SentimentResult,
)

logger = logging.getLogger(__name__)

ALL_MODELS_FAILED_MESSAGE = "All Hugging Face models failed. Please try again later."

# Tried in order of preference
DEFAULT_MODELS = (
    "cardiffnlp/twitter-roberta-base-sentiment-latest",
    "nlptown/bert-base-multilingual-uncased-sentiment",
    "distilbert-base-uncased-finetuned-sst-2-english",
)

# Models that answer with positional class labels
POSITIONAL_LABELS: dict[str, dict[str, SentimentLabel]] = {
    "cardiffnlp/twitter-roberta-base-sentiment-latest": {
        "LABEL_0": SentimentLabel.NEGATIVE,
        "LABEL_1": SentimentLabel.NEUTRAL,
        "LABEL_2": SentimentLabel.POSITIVE,
    },
}

# Star ratings returned by the multilingual review model
STAR_LABELS = {
    "1 star": SentimentLabel.NEGATIVE,
    "2 stars": SentimentLabel.NEGATIVE,
    "3 stars": SentimentLabel.NEUTRAL,
    "4 stars": SentimentLabel.POSITIVE,
    "5 stars": SentimentLabel.POSITIVE,
}


def _top_prediction(body: Any) -> dict[str, Any]:
    """Pick the highest-scoring {label, score} item from a classifier body."""
    predictions = body
    if isinstance(predictions, list) and predictions and isinstance(predictions[0], list):
        predictions = predictions[0]

    if not isinstance(predictions, list):
        raise ParseError("Unexpected classifier response shape")

    valid = [
        p
        for p in predictions
        if isinstance(p, dict)
        and isinstance(p.get("label"), str)
        and isinstance(p.get("score"), (int, float))
    ]
    if not valid:
        raise ParseError("Classifier response contained no predictions")
    return max(valid, key=lambda p: p["score"])


def map_prediction(model: str, body: Any) -> SentimentResult:
    """
    Convert a classifier body into a SentimentResult.

    Positional labels go through the model's mapping table; other labels
    are matched on "positive"/"negative" substrings or star ratings.
    """
    top = _top_prediction(body)
    label = top["label"]
    probability = float(top["score"])

    table = POSITIONAL_LABELS.get(model, {})
    if label in table:
        sentiment = table[label]
    else:
        lowered = label.lower()
        if "positive" in lowered:
            sentiment = SentimentLabel.POSITIVE
        elif "negative" in lowered:
            sentiment = SentimentLabel.NEGATIVE
        else:
            sentiment = STAR_LABELS.get(lowered, SentimentLabel.NEUTRAL)

    if sentiment is SentimentLabel.POSITIVE:
        score = probability
    elif sentiment is SentimentLabel.NEGATIVE:
        score = -probability
    else:
        score = 0.0

    return SentimentResult(sentiment=sentiment, score=score, confidence=probability)


def _is_loading(body: Any) -> bool:
    return isinstance(body, dict) and "loading" in str(body.get("error", "")).lower()


class HuggingFaceInferenceClient:
    """
    Multi-model Hugging Face Inference API client.

    Used in-process by HuggingFaceSentimentProvider and by the relay
    endpoint. Performs no analysis beyond model fallback and label mapping.
    """

    def __init__(
        self,
        models: tuple[str, ...] = DEFAULT_MODELS,
        base_url: str | None = None,
        model_loading_wait: float | None = None,
        model_loading_retries: int | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        settings = get_settings()
        self.models = models
        self.base_url = (base_url or settings.huggingface_base_url).rstrip("/")
        self.model_loading_wait = (
            settings.huggingface_model_loading_wait
            if model_loading_wait is None
            else model_loading_wait
        )
        self.model_loading_retries = (
            settings.huggingface_model_loading_retries
            if model_loading_retries is None
            else model_loading_retries
        )
        self._timeout = settings.http_timeout_seconds
        self._client = http_client
        self._owns_client = http_client is None
        self._sleep = sleep

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def classify(self, text: str, api_key: str) -> tuple[SentimentResult, str]:
        """
        Classify text with the first candidate model that answers.

        Returns:
            Tuple of (sentiment_result, model_used)

        Raises:
            AllProvidersFailedError: If every candidate model failed
        """
        failures: list[Exception] = []

        for model in self.models:
            logger.info(f"Trying Hugging Face model: {model}")
            try:
                result = await self._classify_with_model(model, text, api_key)
            except (ParseError, ProviderHTTPError, httpx.HTTPError) as e:
                logger.warning(f"Model {model} failed: {e}")
                failures.append(e)
                continue

            logger.info(f"Successfully used model: {model}")
            return result, model

        raise AllProvidersFailedError(ALL_MODELS_FAILED_MESSAGE, failures)

    async def _classify_with_model(
        self, model: str, text: str, api_key: str
    ) -> SentimentResult:
        """Query one model, waiting out "model loading" answers."""
        client = self._get_client()
        attempts = 0

        while True:
            response = await client.post(
                f"{self.base_url}/{model}",
                headers={"Authorization": f"Bearer {api_key}"},
                json={
                    "inputs": text,
                    "options": {"wait_for_model": True, "use_cache": False},
                },
            )

            try:
                body = response.json()
            except ValueError:
                body = None

            if _is_loading(body):
                if attempts >= self.model_loading_retries:
                    raise ProviderHTTPError(
                        response.status_code, f"Model {model} is still loading"
                    )
                attempts += 1
                logger.info(f"Model {model} is loading, waiting...")
                await self._sleep(self.model_loading_wait)
                continue

            if not response.is_success:
                raise ProviderHTTPError(
                    response.status_code,
                    f"Model {model} failed with status {response.status_code}: "
                    f"{response.text[:200]}",
                )

            if body is None:
                raise ParseError(f"Model {model} returned a non-JSON body")

            return map_prediction(model, body)

    async def close(self):
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None


class HuggingFaceSentimentProvider(SentimentProvider):
    """
    Hugging Face sentiment provider with a local fallback.

    Calls the relay endpoint when ``relay_url`` is configured, otherwise
    the inference client directly. Any network, HTTP or parse failure
    falls back to the local keyword heuristic, so this provider only
    raises configuration and validation errors.
    """

    name = ProviderName.HUGGINGFACE

    def __init__(
        self,
        api_key: str | None = None,
        relay_url: str | None = None,
        inference_client: HuggingFaceInferenceClient | None = None,
        rng: random.Random | None = None,
        **kwargs,
    ):
        settings = get_settings()
        kwargs.setdefault("timeout", settings.http_timeout_seconds)
        super().__init__(api_key=api_key or settings.huggingface_api_key, **kwargs)
        self.relay_url = relay_url or settings.huggingface_relay_url
        self._inference = inference_client
        self._rng = rng or random.Random()

    def _get_inference_client(self) -> HuggingFaceInferenceClient:
        if self._inference is None:
            self._inference = HuggingFaceInferenceClient()
        return self._inference

    async def analyze(self, text: str) -> DetailedSentimentResult:
        self._check_request(text)

        try:
            if self.relay_url:
                overall, model = await self._analyze_via_relay(text)
            else:
                overall, model = await self._get_inference_client().classify(
                    text, self._api_key
                )
        except (
            AllProvidersFailedError,
            ParseError,
            ProviderHTTPError,
            httpx.HTTPError,
        ) as e:
            logger.warning(f"Hugging Face API error, using local analysis: {e}")
            result = fallback_analysis(text, self._rng)
            result.provider = self.name.value
            return result

        return DetailedSentimentResult.from_words(
            overall,
            analyze_words_locally(text, self._rng),
            provider=self.name.value,
            model=model,
        )

    async def _analyze_via_relay(self, text: str) -> tuple[SentimentResult, str]:
        response = await self._post(
            self.relay_url, json={"text": text, "apiKey": self._api_key}
        )

        try:
            body = response.json()
        except ValueError as e:
            raise ParseError(f"Relay returned a non-JSON body: {e}") from e

        if not response.is_success or not isinstance(body, dict) or body.get("error"):
            message = body.get("error") if isinstance(body, dict) else None
            raise ProviderHTTPError(
                response.status_code, message or f"API error: {response.status_code}"
            )

        sentiment = body.get("sentiment")
        if not isinstance(sentiment, dict):
            raise ParseError("Relay response is missing the sentiment object")

        try:
            overall = SentimentResult.from_dict(sentiment)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Relay sentiment is malformed: {e}") from e

        return overall, str(body.get("model", ""))

    async def close(self):
        await super().close()
        if self._inference is not None:
            await self._inference.close()
