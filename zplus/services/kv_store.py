"""
Durable key-value storage backing the moderation word list.

Every backend maps string keys to string values with get/set/remove:
- MemoryStore: process-local dict, used by tests
- JsonFileStore: a single JSON object on disk (local default)
- SupabaseStore: rows of a Supabase table with `key` and `value` columns

The active backend is chosen by STORAGE_BACKEND and attached to the Flask app
by init_store().
"""

from __future__ import annotations
from typing import Dict, Optional
from pathlib import Path
import json
import os
import tempfile
import threading
from flask import Flask, current_app
from zplus.services import supabase_client

EXTENSION_KEY = "kv_store"
STORAGE_BACKENDS = ("memory", "file", "supabase")


class KeyValueStore:
    """Backing store contract: string keys to string values."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Dict-backed store. Not durable; contents vanish with the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Store all keys in one JSON object file.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a crash never leaves a half-written file. A
    missing file reads as an empty store.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} does not contain a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            # Leave the previous file intact
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class SupabaseStore(KeyValueStore):
    """
    Store keys as rows of a Supabase table.

    Expected schema:
        create table kv_store (key text primary key, value text not null);
    """

    def __init__(self, client, table: str = "kv_store"):
        self.client = client
        self.table = table

    def get(self, key: str) -> Optional[str]:
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        rows = response.data if response and response.data else []
        return rows[0]["value"] if rows else None

    def set(self, key: str, value: str) -> None:
        self.client.table(self.table).upsert({"key": key, "value": value}).execute()

    def remove(self, key: str) -> None:
        self.client.table(self.table).delete().eq("key", key).execute()


def create_store(config) -> KeyValueStore:
    """
    Build the backend named by config["STORAGE_BACKEND"].

    Raises:
        RuntimeError: unknown backend, or Supabase selected but not configured
    """
    backend = (config.get("STORAGE_BACKEND") or "file").strip().lower()

    if backend == "memory":
        return MemoryStore()

    if backend == "file":
        return JsonFileStore(config.get("STORAGE_PATH") or "instance/zplus_store.json")

    if backend == "supabase":
        if not supabase_client.is_configured():
            raise RuntimeError(
                "STORAGE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
            )
        return SupabaseStore(
            supabase_client.get_admin_client(),
            table=config.get("SUPABASE_KV_TABLE", "kv_store"),
        )

    raise RuntimeError(
        f"Unknown STORAGE_BACKEND {backend!r}. Expected one of: {', '.join(STORAGE_BACKENDS)}"
    )


def init_store(app: Flask, store: Optional[KeyValueStore] = None) -> KeyValueStore:
    """
    Attach a key-value store to the app.

    Call this from the Flask app factory. Pass ``store`` to inject a specific
    backend (tests do this with a MemoryStore).
    """
    if store is None:
        if app.config.get("STORAGE_BACKEND") == "supabase":
            supabase_client.init_supabase(app)
        store = create_store(app.config)

    app.extensions[EXTENSION_KEY] = store
    app.logger.info(f"Key-value store ready: {type(store).__name__}")
    return store


def get_store() -> KeyValueStore:
    """Return the store attached to the current app."""
    return current_app.extensions[EXTENSION_KEY]
