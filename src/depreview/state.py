"""Application state: every long-lived component, wired once per process."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog

from depreview.orchestrator import BatchOrchestrator, ReviewSession
from depreview.registry import RegistryClient, build_http_client
from depreview.store import AnnotationStore, KeyValueStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    import httpx

    from depreview.config import Settings

log = structlog.get_logger()


@dataclass
class AppState:
    settings: Settings
    http_client: httpx.AsyncClient
    store: AnnotationStore
    registry: RegistryClient
    orchestrator: BatchOrchestrator
    session: ReviewSession


@asynccontextmanager
async def open_app_state(settings: Settings) -> AsyncIterator[AppState]:
    """Open the database and HTTP client, load persisted state, and yield the wiring.

    Missing parent directories of ``store.db_path`` are created. A path SQLite
    cannot write to raises and aborts startup.
    """
    db_path = Path(settings.store.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    async with aiosqlite.connect(db_path) as db:
        kv = KeyValueStore(db)
        await kv.init_db()
        store = AnnotationStore(kv)

        async with build_http_client(settings.registry) as http_client:
            registry = RegistryClient(http_client, settings.registry.url)
            orchestrator = BatchOrchestrator(
                registry,
                package_page_url=settings.registry.package_page_url,
                max_concurrency=settings.registry.max_concurrency,
            )
            session = ReviewSession(orchestrator, store)
            await session.load()
            log.debug("app_state_ready", db_path=str(db_path))
            yield AppState(
                settings=settings,
                http_client=http_client,
                store=store,
                registry=registry,
                orchestrator=orchestrator,
                session=session,
            )
