"""
Unit tests for storage backends and the recent-analyses history.
"""

import json
from unittest.mock import MagicMock

from data.sentiment.history import HISTORY_STORAGE_KEY, RecentAnalysesHistory
from data.sentiment.models import SentimentLabel
from data.sentiment.store import SentimentStore
from database import InMemoryStorage, JSONFileStorage, SupabaseStorage


class TestJSONFileStorage:
    """Tests for the single-file JSON backend."""

    def test_missing_file_reads_none(self, tmp_path):
        storage = JSONFileStorage(tmp_path / "state.json")

        assert storage.get_item("anything") is None

    def test_set_get_remove(self, tmp_path):
        path = tmp_path / "nested" / "state.json"
        storage = JSONFileStorage(path)

        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")

        assert storage.get_item("a") is None
        assert storage.get_item("b") == "2"
        assert json.loads(path.read_text(encoding="utf-8")) == {"b": "2"}

    def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{broken", encoding="utf-8")
        storage = JSONFileStorage(path)

        assert storage.get_item("a") is None

    def test_no_temp_files_left_behind(self, tmp_path):
        storage = JSONFileStorage(tmp_path / "state.json")

        storage.set_item("a", "1")

        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_store_survives_restart(self, tmp_path):
        """Test a store backed by a file reloads its entries."""
        path = tmp_path / "state.json"
        first = SentimentStore(storage=JSONFileStorage(path))
        first.add_entry("persisted", "positive", 0.5, 0.9)

        second = SentimentStore(storage=JSONFileStorage(path))

        assert second.get_entries() == first.get_entries()


class TestSupabaseStorage:
    """Tests for the Supabase table backend."""

    def test_get_item(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[{"value": '{"entries": []}'}])
        storage = SupabaseStorage(client, table="app_state")

        assert storage.get_item("key") == '{"entries": []}'
        client.table.assert_called_with("app_state")
        client.table.return_value.select.return_value.eq.assert_called_with("key", "key")

    def test_get_missing_item(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[])

        assert SupabaseStorage(client).get_item("key") is None

    def test_set_item_upserts(self):
        client = MagicMock()

        SupabaseStorage(client).set_item("key", "value")

        client.table.return_value.upsert.assert_called_once_with(
            {"key": "key", "value": "value"}
        )

    def test_remove_item(self):
        client = MagicMock()

        SupabaseStorage(client).remove_item("key")

        client.table.return_value.delete.return_value.eq.assert_called_once_with(
            "key", "key"
        )


class TestRecentAnalysesHistory:
    """Tests for the standalone recent history."""

    def test_newest_first_and_capped(self, storage):
        history = RecentAnalysesHistory(storage, max_items=3)

        for i in range(5):
            history.add(f"text {i}", "positive", 0.5, 0.8)

        entries = history.get_all()

        assert [e.text for e in entries] == ["text 4", "text 3", "text 2"]

    def test_add_coerces_label(self, storage):
        entry = RecentAnalysesHistory(storage).add("hmm", "NEGATIVE", -0.3, 0.4)

        assert entry.sentiment is SentimentLabel.NEGATIVE

    def test_clear(self, storage):
        history = RecentAnalysesHistory(storage)
        history.add("text", "neutral", 0.0, 0.5)

        history.clear()

        assert history.get_all() == []
        assert storage.get_item(HISTORY_STORAGE_KEY) is None

    def test_independent_of_store(self, storage, store):
        RecentAnalysesHistory(storage).add("text", "neutral", 0.0, 0.5)

        assert store.get_entries() == []

    def test_malformed_history_reads_empty(self):
        storage = InMemoryStorage({HISTORY_STORAGE_KEY: "not json"})

        assert RecentAnalysesHistory(storage).get_all() == []
