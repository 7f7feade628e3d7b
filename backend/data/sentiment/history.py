"""
Recent analyses history.

A short, standalone history kept under its own storage key. It is
independent of the unified SentimentStore.
"""

import json
import logging
from datetime import datetime, timezone

from config import get_settings
from data.sentiment.models import HistoryEntry, SentimentLabel
from database import KeyValueStorage, get_storage

logger = logging.getLogger(__name__)

HISTORY_STORAGE_KEY = "sentimentscope-history"


class RecentAnalysesHistory:
    """Newest-first list of the last few analyses."""

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str = HISTORY_STORAGE_KEY,
        max_items: int = 10,
    ):
        self._storage = storage
        self._storage_key = storage_key
        self.max_items = max_items

    def get_all(self) -> list[HistoryEntry]:
        stored = self._storage.get_item(self._storage_key)
        if not stored:
            return []
        try:
            return [HistoryEntry.from_dict(item) for item in json.loads(stored)]
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            logger.error(f"Failed to parse history: {e}")
            return []

    def add(
        self,
        text: str,
        sentiment: SentimentLabel | str,
        score: float,
        confidence: float,
    ) -> HistoryEntry:
        now = datetime.now(timezone.utc)
        entry = HistoryEntry(
            id=str(int(now.timestamp() * 1000)),
            text=text,
            sentiment=SentimentLabel.coerce(sentiment),
            score=float(score),
            confidence=float(confidence),
            timestamp=now,
        )
        history = [entry, *self.get_all()][: self.max_items]
        self._storage.set_item(
            self._storage_key, json.dumps([item.to_dict() for item in history])
        )
        return entry

    def clear(self) -> None:
        self._storage.remove_item(self._storage_key)


def get_recent_history() -> RecentAnalysesHistory:
    settings = get_settings()
    return RecentAnalysesHistory(
        storage=get_storage(), max_items=settings.recent_history_max_items
    )
