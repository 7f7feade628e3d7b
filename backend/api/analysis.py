"""
Analysis API endpoints.

Runs text through the sentiment providers and records the results in the
sentiment store.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from data.sentiment import (
    AllProvidersFailedError,
    ConfigurationError,
    EntrySource,
    ParseError,
    ProviderHTTPError,
    ProviderName,
    SentimentAnalysisService,
    SentimentError,
    SentimentStore,
    ValidationError,
    get_sentiment_service,
    get_sentiment_store,
    record_batch,
    record_result,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class AnalyzeRequest(BaseModel):
    """Single text analysis request."""

    text: str
    provider: ProviderName | None = None
    source: EntrySource = EntrySource.NORMAL


class EnsembleRequest(BaseModel):
    """Ensemble analysis request."""

    text: str
    source: EntrySource = EntrySource.NORMAL


class BatchRequest(BaseModel):
    """Batch analysis request."""

    texts: list[str] = Field(..., min_length=1)
    provider: ProviderName | None = None


class AnalyzeResponse(BaseModel):
    """Analysis result plus the stored entry."""

    result: dict[str, Any]
    entry: dict[str, Any]


class BatchResponse(BaseModel):
    """Batch results in input order."""

    results: list[dict[str, Any]]
    stored: int
    failed: int


class ProviderStatusResponse(BaseModel):
    """Which providers have credentials configured."""

    providers: dict[str, bool]
    default_provider: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _raise_http_error(error: SentimentError) -> None:
    """Map sentiment errors to HTTP errors with the message verbatim."""
    if isinstance(error, ValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, ConfigurationError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(error, (ParseError, ProviderHTTPError, AllProvidersFailedError)):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=str(error))


def _require_text(text: str) -> str:
    if not text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Text cannot be empty",
        )
    return text


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/providers", response_model=ProviderStatusResponse)
async def get_provider_status(
    service: Annotated[SentimentAnalysisService, Depends(get_sentiment_service)],
):
    """List providers and whether each is configured."""
    return ProviderStatusResponse(
        providers=service.provider_status(),
        default_provider=service.default_provider.value,
    )


@router.post("", response_model=AnalyzeResponse)
async def analyze_text(
    request: AnalyzeRequest,
    service: Annotated[SentimentAnalysisService, Depends(get_sentiment_service)],
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
):
    """Analyze a text with one provider and record it."""
    text = _require_text(request.text)

    try:
        result = await service.analyze_text(text, request.provider)
    except SentimentError as e:
        _raise_http_error(e)

    entry = record_result(store, text, result, request.source)
    return AnalyzeResponse(result=result.to_dict(), entry=entry.to_dict())


@router.post("/ensemble", response_model=AnalyzeResponse)
async def analyze_ensemble(
    request: EnsembleRequest,
    service: Annotated[SentimentAnalysisService, Depends(get_sentiment_service)],
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
):
    """Analyze a text with the provider ensemble and record it."""
    text = _require_text(request.text)

    try:
        result = await service.analyze_with_ensemble(text)
    except SentimentError as e:
        _raise_http_error(e)

    entry = record_result(store, text, result, request.source)
    return AnalyzeResponse(result=result.to_dict(), entry=entry.to_dict())


@router.post("/batch", response_model=BatchResponse)
async def analyze_batch(
    request: BatchRequest,
    service: Annotated[SentimentAnalysisService, Depends(get_sentiment_service)],
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
):
    """
    Analyze texts one at a time and record the successful ones.

    Failed texts come back as neutral zero-confidence placeholders.
    """
    try:
        service.get_provider(request.provider or service.default_provider)
    except ConfigurationError as e:
        _raise_http_error(e)

    results = await service.batch_analyze(request.texts, request.provider)
    stored = record_batch(store, request.texts, results)

    return BatchResponse(
        results=[r.to_dict() for r in results],
        stored=len(stored),
        failed=sum(1 for r in results if r.is_placeholder),
    )
