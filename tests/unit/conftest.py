"""Unit-specific fixtures (no I/O beyond in-memory SQLite)."""

from __future__ import annotations

import aiosqlite
import pytest

from depreview.store import AnnotationStore, KeyValueStore


@pytest.fixture()
async def kv():
    """In-memory key-value store for unit tests."""
    async with aiosqlite.connect(":memory:") as db:
        store = KeyValueStore(db)
        await store.init_db()
        yield store


@pytest.fixture()
async def store(kv: KeyValueStore) -> AnnotationStore:
    annotations = AnnotationStore(kv)
    await annotations.load()
    return annotations
