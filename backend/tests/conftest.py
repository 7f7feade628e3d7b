"""
Pytest configuration and fixtures for SentimentScope backend tests.

This module provides shared fixtures, test utilities, and configuration
for all backend tests including unit, integration, and API tests.
"""

import json
import os
import random
from typing import Callable, Generator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Set test environment before importing app
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("HUGGINGFACE_API_KEY", "hf_test_key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test-key")
os.environ.setdefault("SENTIMENT_BATCH_DELAY", "0")
os.environ.setdefault("HUGGINGFACE_MODEL_LOADING_WAIT", "0")
os.environ.setdefault("DEBUG", "true")

from data.sentiment.base import SentimentProvider  # noqa: E402
from data.sentiment.combined import SentimentAnalysisService  # noqa: E402
from data.sentiment.exceptions import ProviderHTTPError  # noqa: E402
from data.sentiment.models import (  # noqa: E402
    DetailedSentimentResult,
    ProviderName,
    SentimentResult,
)
from data.sentiment.store import SentimentStore  # noqa: E402
from database import InMemoryStorage  # noqa: E402


# ============================================
# Provider Stubs
# ============================================


class StubProvider(SentimentProvider):
    """
    Provider returning canned results without any HTTP.

    ``outcomes`` is consumed in order; an Exception instance is raised, a
    SentimentResult is wrapped into a DetailedSentimentResult.
    """

    def __init__(self, name: ProviderName, outcomes: list, configured: bool = True):
        super().__init__(api_key="stub-key" if configured else None)
        self.name = name
        self._outcomes = list(outcomes)
        self.calls: list[str] = []

    async def analyze(self, text: str) -> DetailedSentimentResult:
        self._check_request(text)
        self.calls.append(text)
        outcome = self._outcomes.pop(0) if len(self._outcomes) > 1 else self._outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return DetailedSentimentResult(
            overall=outcome, provider=self.name.value, model=f"{self.name.value}-stub"
        )


@pytest.fixture
def make_provider() -> Callable[..., StubProvider]:
    """Factory fixture for stub providers."""

    def _make(name: ProviderName, *outcomes, configured: bool = True) -> StubProvider:
        return StubProvider(name, list(outcomes), configured=configured)

    return _make


@pytest.fixture
def positive_result() -> SentimentResult:
    return SentimentResult(sentiment="positive", score=0.8, confidence=0.9)


@pytest.fixture
def negative_result() -> SentimentResult:
    return SentimentResult(sentiment="negative", score=-0.6, confidence=0.5)


@pytest.fixture
def provider_error() -> ProviderHTTPError:
    return ProviderHTTPError(500, "gemini API error: 500 Internal Server Error.")


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(42)


# ============================================
# HTTP Mocking
# ============================================


@pytest.fixture
def mock_http() -> Callable[..., httpx.AsyncClient]:
    """
    Build an httpx.AsyncClient whose requests are answered by a handler.

    The handler receives the httpx.Request and returns an httpx.Response.
    Every request is recorded on ``client.requests``.
    """

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
        client.requests = requests
        return client

    return _build


@pytest.fixture
def gemini_body() -> Callable[[dict | str], dict]:
    """Wrap model output text the way generateContent returns it."""

    def _wrap(payload: dict | str) -> dict:
        text = payload if isinstance(payload, str) else json.dumps(payload)
        return {"candidates": [{"content": {"parts": [{"text": text}]}}]}

    return _wrap


# ============================================
# Store Fixtures
# ============================================


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage) -> SentimentStore:
    return SentimentStore(storage=storage)


@pytest.fixture
def add_entries(store) -> Callable[[int], None]:
    """Add N alternating positive/negative entries to the store."""

    def _add(count: int) -> None:
        for i in range(count):
            positive = i % 2 == 0
            store.add_entry(
                text=f"entry {i}",
                sentiment="positive" if positive else "negative",
                score=0.5 if positive else -0.5,
                confidence=0.8,
            )

    return _add


# ============================================
# Application Fixtures
# ============================================


@pytest.fixture
def service(make_provider, positive_result, negative_result) -> SentimentAnalysisService:
    """Service wired to stub providers."""
    return SentimentAnalysisService(
        providers={
            ProviderName.GEMINI: make_provider(ProviderName.GEMINI, positive_result),
            ProviderName.HUGGINGFACE: make_provider(
                ProviderName.HUGGINGFACE, negative_result
            ),
            ProviderName.OPENAI: make_provider(
                ProviderName.OPENAI, positive_result, configured=False
            ),
        },
        batch_delay=0,
        rng=random.Random(7),
    )


@pytest.fixture
def inference_client() -> MagicMock:
    """Mocked Hugging Face inference client for the relay endpoint."""
    client = MagicMock()
    client.classify = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def app(service, store, storage, inference_client) -> FastAPI:
    """Create a test FastAPI application with stubbed dependencies."""
    from api.huggingface import get_inference_client
    from data.sentiment import (
        RecentAnalysesHistory,
        get_recent_history,
        get_sentiment_service,
        get_sentiment_store,
    )
    from main import create_app

    application = create_app()
    application.dependency_overrides[get_sentiment_service] = lambda: service
    application.dependency_overrides[get_sentiment_store] = lambda: store
    application.dependency_overrides[get_inference_client] = lambda: inference_client
    application.dependency_overrides[get_recent_history] = lambda: RecentAnalysesHistory(
        storage
    )
    return application


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create a synchronous test client (lifespan not started)."""
    yield TestClient(app)
