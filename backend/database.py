"""
Key/value persistence for the sentiment store.

Values are opaque JSON strings stored under fixed keys. Backends:
in-memory, a local JSON file, or a Supabase table.
"""

import json
import logging
import os
import tempfile
import threading
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from supabase import Client, create_client

from config import get_settings

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Storage port used by the sentiment store and history."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    """Process-local storage, lost on exit."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JSONFileStorage:
    """
    Stores every key in a single JSON object file.

    Writes go to a temp file in the same directory and are moved into
    place with os.replace, so readers never see a partial file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read storage file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        with self._lock:
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)


class SupabaseStorage:
    """Stores values as rows ``{key, value}`` in a Supabase table."""

    def __init__(self, client: Client, table: str = "app_state"):
        self.client = client
        self.table = table

    def get_item(self, key: str) -> str | None:
        result = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        return result.data[0].get("value")

    def set_item(self, key: str, value: str) -> None:
        self.client.table(self.table).upsert({"key": key, "value": value}).execute()

    def remove_item(self, key: str) -> None:
        self.client.table(self.table).delete().eq("key", key).execute()


@lru_cache
def get_supabase_client() -> Client:
    """Get cached Supabase client instance."""
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_key)


@lru_cache
def get_storage() -> KeyValueStorage:
    """Build the storage backend selected in settings."""
    settings = get_settings()

    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            logger.warning(
                "Supabase storage selected but not configured - using file storage"
            )
        else:
            return SupabaseStorage(get_supabase_client(), settings.supabase_table)

    if settings.storage_backend == "memory":
        return InMemoryStorage()

    return JSONFileStorage(settings.store_path)
