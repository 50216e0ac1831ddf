"""Persistent review state: classifications, notes and the manifest text.

``KeyValueStore`` is a small SQLite key-value table with JSON values. It
catches ``aiosqlite.Error`` internally: reads fall back to the caller's
default and writes are logged and dropped, so a broken database never stops a
review session. Errors are logged with ``exc_info=True``.

``AnnotationStore`` sits on top of it. It loads its three keys once in
``load()`` and writes every mutation straight through.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar

import aiosqlite
import structlog
from pydantic import TypeAdapter, ValidationError

from depreview.errors import StorageLoadError
from depreview.models.annotations import Classification, toggle

if TYPE_CHECKING:
    from collections.abc import Mapping

log = structlog.get_logger()

T = TypeVar("T")

CLASSIFICATIONS_KEY = "package_levels"
NOTES_KEY = "package_notes"
MANIFEST_KEY = "package_json"

DEFAULT_MANIFEST_TEXT = "{\n  \n}"

_CREATE_KV_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL
)
"""

_UPSERT = "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)"

_classifications_adapter = TypeAdapter(dict[str, Classification])
_notes_adapter = TypeAdapter(dict[str, str])
_manifest_adapter = TypeAdapter(str)


class KeyValueStore:
    """SQLite-backed ``load(key, default)`` / ``save(key, value)`` store."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create the table and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_KV_TABLE)
        await self._db.commit()

    async def _read(self, key: str) -> Any:
        """Return the decoded value, ``None`` when absent, or raise ``StorageLoadError``."""
        try:
            cursor = await self._db.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StorageLoadError(key, f"Could not read {key}: {exc}") from exc
        if row is None:
            return None
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise StorageLoadError(key, f"Stored value for {key} is not valid JSON") from exc

    async def load(self, key: str, default: T, adapter: TypeAdapter[T] | None = None) -> T:
        """Read ``key``. Absent, unreadable or malformed values give ``default``."""
        try:
            raw = await self._read(key)
            if raw is None:
                return default
            if adapter is None:
                return raw
            try:
                return adapter.validate_python(raw)
            except ValidationError as exc:
                raise StorageLoadError(key, f"Stored value for {key} has the wrong shape") from exc
        except StorageLoadError as exc:
            log.warning("store_read_error", key=key, error=exc.message, exc_info=True)
            return default

    async def save(self, key: str, value: Any) -> None:
        """Write ``key``. Non-fatal on failure."""
        await self.save_many({key: value})

    async def save_many(self, items: Mapping[str, Any]) -> None:
        """Write several keys in one transaction. Non-fatal on failure."""
        now = datetime.now(UTC).isoformat()
        try:
            await self._db.executemany(
                _UPSERT,
                [(key, json.dumps(value), now) for key, value in items.items()],
            )
            await self._db.commit()
        except aiosqlite.Error:
            log.warning("store_write_error", keys=list(items), exc_info=True)


class AnnotationStore:
    """Per-package classifications and notes, plus the raw manifest text."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._classifications: dict[str, Classification] = {}
        self._notes: dict[str, str] = {}
        self._manifest_text = DEFAULT_MANIFEST_TEXT
        self._loaded = False

    async def load(self) -> None:
        """Load persisted state. Must run before the first read."""
        self._classifications = await self._kv.load(
            CLASSIFICATIONS_KEY, {}, _classifications_adapter
        )
        # ``unset`` is never persisted; drop it if an older write left one behind.
        self._classifications = {
            name: value
            for name, value in self._classifications.items()
            if value is not Classification.UNSET
        }
        self._notes = await self._kv.load(NOTES_KEY, {}, _notes_adapter)
        self._manifest_text = await self._kv.load(
            MANIFEST_KEY, DEFAULT_MANIFEST_TEXT, _manifest_adapter
        )
        self._loaded = True
        log.debug(
            "annotations_loaded",
            classifications=len(self._classifications),
            notes=len(self._notes),
        )

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def classifications(self) -> dict[str, Classification]:
        return dict(self._classifications)

    @property
    def notes(self) -> dict[str, str]:
        return dict(self._notes)

    @property
    def manifest_text(self) -> str:
        return self._manifest_text

    def classification(self, name: str) -> Classification:
        return self._classifications.get(name, Classification.UNSET)

    def note(self, name: str) -> str:
        return self._notes.get(name, "")

    # ------------------------------------------------------------------
    # Mutations (write-through)
    # ------------------------------------------------------------------

    async def toggle_classification(self, name: str, value: Classification) -> Classification:
        """Apply the toggle transition for ``name`` and persist it."""
        new_value = toggle(self.classification(name), Classification(value))
        if new_value is Classification.UNSET:
            self._classifications.pop(name, None)
        else:
            self._classifications[name] = new_value
        await self._kv.save(CLASSIFICATIONS_KEY, self._serialised_classifications())
        return new_value

    async def set_note(self, name: str, text: str) -> None:
        self._notes[name] = text
        await self._kv.save(NOTES_KEY, self._notes)

    async def set_manifest_text(self, text: str) -> None:
        self._manifest_text = text
        await self._kv.save(MANIFEST_KEY, text)

    async def clear_all(self) -> None:
        """Reset classifications, notes and manifest text together."""
        self._classifications = {}
        self._notes = {}
        self._manifest_text = ""
        await self._kv.save_many(
            {
                CLASSIFICATIONS_KEY: {},
                NOTES_KEY: {},
                MANIFEST_KEY: "",
            }
        )
        log.info("annotations_cleared")

    def _serialised_classifications(self) -> dict[str, str]:
        return {name: value.value for name, value in self._classifications.items()}
