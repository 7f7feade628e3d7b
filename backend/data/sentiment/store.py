"""
Sentiment Store

Single source of truth for analysis history. Holds a bounded, newest-first
entry list and a smaller live feed, persists both after every mutation and
notifies subscribers synchronously.
"""

import csv
import io
import json
import logging
import random
import string
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Iterable

from config import get_settings
from data.sentiment.models import (
    EntrySource,
    LiveFeedEntry,
    SentimentEntry,
    SentimentLabel,
    clamp,
)
from database import KeyValueStorage, get_storage

logger = logging.getLogger(__name__)

STORAGE_KEY = "sentimentscope-unified-store"

MAX_ENTRIES = 100
MAX_LIVE_FEED = 10
CHART_WINDOW = 50
LIVE_FEED_TEXT_LENGTH = 50
CHART_TEXT_LENGTH = 30

SENTIMENT_EMOJI = {
    SentimentLabel.POSITIVE: "😊",
    SentimentLabel.NEGATIVE: "😞",
}
NEUTRAL_EMOJI = "😐"

_ID_ALPHABET = string.ascii_lowercase + string.digits

Listener = Callable[[], None]


def generate_entry_id() -> str:
    """Time-based id with a random base36 suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


def truncate(text: str, length: int) -> str:
    return text[:length] + ("..." if len(text) > length else "")


def sentiment_emoji(sentiment: SentimentLabel) -> str:
    return SENTIMENT_EMOJI.get(sentiment, NEUTRAL_EMOJI)


class SentimentStore:
    """
    Observable, persisted collection of analysis entries.

    Every mutation runs under a lock and completes the full
    update -> persist -> notify sequence before returning, so subscribers
    always see the entry list and live feed in a consistent state.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str = STORAGE_KEY,
        max_entries: int = MAX_ENTRIES,
        max_live_feed: int = MAX_LIVE_FEED,
    ):
        """
        Initialize and hydrate the store.

        Args:
            storage: Key/value persistence backend
            storage_key: Key holding the serialized store
            max_entries: Entry list cap (oldest dropped on overflow)
            max_live_feed: Live feed cap
        """
        self._storage = storage
        self._storage_key = storage_key
        self.max_entries = max_entries
        self.max_live_feed = max_live_feed

        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._entries: list[SentimentEntry] = []
        self._live_feed: list[LiveFeedEntry] = []

        self._load_from_storage()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error(f"Sentiment store listener failed: {e}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_entry(
        self,
        text: str,
        sentiment: SentimentLabel | str,
        score: float,
        confidence: float,
        source: EntrySource | str = EntrySource.NORMAL,
        model: str | None = None,
    ) -> SentimentEntry:
        """
        Record a single analysis.

        Returns:
            The stored entry with its assigned id and timestamp
        """
        entry = self._build_entry(text, sentiment, score, confidence, source, model)

        with self._lock:
            self._entries = [entry, *self._entries][: self.max_entries]
            self._push_live_feed(entry)
            self._save_to_storage()
            self._notify()

        return entry

    def add_batch_entries(self, items: Iterable[dict[str, Any]]) -> list[SentimentEntry]:
        """
        Record a batch of analyses.

        Each item carries ``text``, ``sentiment``, ``score``, ``confidence``
        and optionally ``model``. All entries are tagged as batch and only
        the first one is mirrored into the live feed.
        """
        new_entries = [
            self._build_entry(
                item["text"],
                item["sentiment"],
                item["score"],
                item["confidence"],
                EntrySource.BATCH,
                item.get("model"),
            )
            for item in items
        ]
        if not new_entries:
            return []

        with self._lock:
            self._entries = [*new_entries, *self._entries][: self.max_entries]
            self._push_live_feed(new_entries[0])
            self._save_to_storage()
            self._notify()

        logger.info(f"Added {len(new_entries)} batch entries to sentiment store")
        return new_entries

    def clear(self) -> None:
        """Remove all entries and the live feed."""
        with self._lock:
            self._entries = []
            self._live_feed = []
            self._save_to_storage()
            self._notify()

    def _build_entry(
        self,
        text: str,
        sentiment: SentimentLabel | str,
        score: float,
        confidence: float,
        source: EntrySource | str,
        model: str | None,
    ) -> SentimentEntry:
        return SentimentEntry(
            id=generate_entry_id(),
            text=text,
            sentiment=SentimentLabel.coerce(sentiment),
            score=clamp(float(score), -1.0, 1.0),
            confidence=clamp(float(confidence), 0.0, 1.0),
            timestamp=datetime.now(timezone.utc),
            source=EntrySource(source),
            model=model,
        )

    def _push_live_feed(self, entry: SentimentEntry) -> None:
        feed_entry = LiveFeedEntry(
            id=entry.id,
            text=truncate(entry.text, LIVE_FEED_TEXT_LENGTH),
            sentiment=entry.sentiment,
            score=entry.score,
            emoji=sentiment_emoji(entry.sentiment),
            timestamp=entry.timestamp,
        )
        self._live_feed = [feed_entry, *self._live_feed][: self.max_live_feed]

    # ------------------------------------------------------------------
    # Reads and derived views
    # ------------------------------------------------------------------

    def get_entries(self) -> list[SentimentEntry]:
        with self._lock:
            return list(self._entries)

    def get_live_feed(self) -> list[LiveFeedEntry]:
        with self._lock:
            return list(self._live_feed)

    def get_chart_data(self) -> list[dict[str, Any]]:
        """Most recent 50 entries, oldest first, shaped for a timeline chart."""
        recent = self.get_entries()[:CHART_WINDOW]
        return [
            {
                "time": entry.timestamp.astimezone().strftime("%H:%M"),
                "score": entry.score,
                "confidence": entry.confidence,
                "sentiment": entry.sentiment.value,
                "source": entry.source.value,
                "text": truncate(entry.text, CHART_TEXT_LENGTH),
            }
            for entry in reversed(recent)
        ]

    def get_stats(self) -> dict[str, Any]:
        """Counts and averages over all stored entries (zeros when empty)."""
        entries = self.get_entries()
        total = len(entries)

        return {
            "total": total,
            "positive": sum(1 for e in entries if e.sentiment is SentimentLabel.POSITIVE),
            "negative": sum(1 for e in entries if e.sentiment is SentimentLabel.NEGATIVE),
            "neutral": sum(1 for e in entries if e.sentiment is SentimentLabel.NEUTRAL),
            "avgScore": sum(e.score for e in entries) / total if total else 0,
            "avgConfidence": sum(e.confidence for e in entries) / total if total else 0,
        }

    def export_data(self) -> dict[str, Any]:
        """JSON-ready snapshot of the store for download."""
        with self._lock:
            return {
                "entries": [e.to_dict() for e in self._entries],
                "liveFeed": [e.to_dict() for e in self._live_feed],
                "exportedAt": datetime.now(timezone.utc).isoformat(),
            }

    def export_csv(self) -> str:
        """One-way CSV rendering of the entry list."""
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(
            ["Timestamp", "Text", "Sentiment", "Score", "Confidence", "Source", "Model"]
        )
        for entry in self.get_entries():
            writer.writerow(
                [
                    entry.timestamp.isoformat(),
                    entry.text,
                    entry.sentiment.value,
                    entry.score,
                    entry.confidence,
                    entry.source.value,
                    entry.model or "",
                ]
            )
        return buffer.getvalue()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _save_to_storage(self) -> None:
        payload = json.dumps(
            {
                "entries": [e.to_dict() for e in self._entries],
                "liveFeed": [e.to_dict() for e in self._live_feed],
            }
        )
        try:
            self._storage.set_item(self._storage_key, payload)
        except Exception as e:
            logger.error(f"Failed to save sentiment store: {e}")

    def _load_from_storage(self) -> None:
        try:
            stored = self._storage.get_item(self._storage_key)
            if not stored:
                return

            data = json.loads(stored)
            self._entries = [
                SentimentEntry.from_dict(item) for item in data.get("entries") or []
            ][: self.max_entries]
            self._live_feed = [
                LiveFeedEntry.from_dict(item) for item in data.get("liveFeed") or []
            ][: self.max_live_feed]
            logger.debug(f"Loaded {len(self._entries)} entries from storage")
        except Exception as e:
            logger.error(f"Failed to load sentiment store: {e}")
            self._entries = []
            self._live_feed = []


# Singleton instance for shared use
_store_instance: SentimentStore | None = None


def get_sentiment_store() -> SentimentStore:
    """Get or create the process-wide sentiment store."""
    global _store_instance
    if _store_instance is None:
        settings = get_settings()
        _store_instance = SentimentStore(
            storage=get_storage(),
            max_entries=settings.store_max_entries,
            max_live_feed=settings.store_max_live_feed,
        )
    return _store_instance


def reset_sentiment_store(store: SentimentStore | None = None) -> None:
    """Replace (or drop) the process-wide store."""
    global _store_instance
    _store_instance = store
