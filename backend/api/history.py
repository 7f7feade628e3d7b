"""
History API endpoints.

Read-only views over the sentiment store plus export and clear, and the
standalone recent-analyses history.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from data.sentiment import (
    RecentAnalysesHistory,
    SentimentLabel,
    SentimentStore,
    get_recent_history,
    get_sentiment_store,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class StatsResponse(BaseModel):
    """Aggregate statistics over all stored entries."""

    total: int
    positive: int
    negative: int
    neutral: int
    avgScore: float
    avgConfidence: float


class RecentAnalysisRequest(BaseModel):
    """Entry for the recent-analyses history."""

    text: str
    sentiment: SentimentLabel
    score: float
    confidence: float


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/entries")
async def list_entries(
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
) -> list[dict[str, Any]]:
    """All stored entries, newest first."""
    return [entry.to_dict() for entry in store.get_entries()]


@router.get("/live-feed")
async def get_live_feed(
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
) -> list[dict[str, Any]]:
    """The most recent entries in display form."""
    return [entry.to_dict() for entry in store.get_live_feed()]


@router.get("/chart")
async def get_chart_data(
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
) -> list[dict[str, Any]]:
    """Timeline series of the last 50 entries, oldest first."""
    return store.get_chart_data()


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
):
    return store.get_stats()


@router.get("/export")
async def export_json(
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
) -> dict[str, Any]:
    return store.export_data()


@router.get("/export.csv")
async def export_csv(
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
):
    """Download the entry list as CSV."""
    filename = f"sentiment-history-{datetime.now(timezone.utc).date().isoformat()}.csv"
    return Response(
        content=store.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_history(
    store: Annotated[SentimentStore, Depends(get_sentiment_store)],
):
    """Remove all entries and the live feed."""
    store.clear()
    logger.info("Sentiment history cleared")


@router.get("/recent")
async def list_recent(
    history: Annotated[RecentAnalysesHistory, Depends(get_recent_history)],
) -> list[dict[str, Any]]:
    return [entry.to_dict() for entry in history.get_all()]


@router.post("/recent", status_code=status.HTTP_201_CREATED)
async def add_recent(
    request: RecentAnalysisRequest,
    history: Annotated[RecentAnalysesHistory, Depends(get_recent_history)],
) -> dict[str, Any]:
    entry = history.add(
        request.text, request.sentiment, request.score, request.confidence
    )
    return entry.to_dict()


@router.delete("/recent", status_code=status.HTTP_204_NO_CONTENT)
async def clear_recent(
    history: Annotated[RecentAnalysesHistory, Depends(get_recent_history)],
):
    history.clear()
