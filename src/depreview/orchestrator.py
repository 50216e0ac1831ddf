"""Concurrent fetch-and-resolve across a whole manifest.

``BatchOrchestrator`` fans out one registry lookup per dependency on the
running event loop and joins the results by index, so output order always
matches manifest order regardless of which request finishes first.

``ReviewSession`` ties a manifest to the annotation store. Every manifest
edit bumps a generation counter; a batch whose generation has been superseded
by the time it finishes is discarded instead of overwriting newer results.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from depreview.errors import FetchError
from depreview.manifest import parse_manifest
from depreview.models.registry import Dependency
from depreview.models.snapshot import PackageResult
from depreview.resolver import DEFAULT_PACKAGE_PAGE_URL, resolve
from depreview.summary import build_summary

if TYPE_CHECKING:
    from collections.abc import Mapping

    from depreview.models.annotations import ReviewSummary
    from depreview.models.registry import RegistryDocument
    from depreview.registry import RegistryClient
    from depreview.store import AnnotationStore

log = structlog.get_logger()


class BatchOrchestrator:
    def __init__(
        self,
        client: RegistryClient,
        *,
        package_page_url: str = DEFAULT_PACKAGE_PAGE_URL,
        max_concurrency: int | None = None,
    ) -> None:
        self._client = client
        self._package_page_url = package_page_url
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _fetch(self, name: str) -> RegistryDocument:
        if self._semaphore is None:
            return await self._client.fetch(name)
        async with self._semaphore:
            return await self._client.fetch(name)

    async def resolve_one(self, dependency: Dependency) -> PackageResult:
        """Fetch and resolve a single dependency. A ``FetchError`` becomes a failure result."""
        try:
            document = await self._fetch(dependency.name)
        except FetchError as exc:
            return PackageResult.failure(dependency.name, exc)
        snapshot = resolve(dependency, document, package_page_url=self._package_page_url)
        return PackageResult.success(snapshot)

    async def resolve_all(
        self,
        dependencies: Mapping[str, str],
        *,
        strict: bool = False,
    ) -> list[PackageResult]:
        """Resolve every dependency concurrently, preserving input order.

        By default a failed lookup is reported in its own ``PackageResult`` and
        the rest still resolve. With ``strict=True`` the batch is all-or-nothing:
        the first failure (in input order) is raised and nothing is returned.
        """
        deps = [Dependency(name=name, range=rng) for name, rng in dependencies.items()]
        log.info("batch_start", packages=len(deps))
        results = await asyncio.gather(*(self.resolve_one(dep) for dep in deps))

        failed = [result for result in results if not result.ok]
        log.info("batch_complete", packages=len(results), failed=len(failed))

        if strict and failed:
            first = failed[0]
            if first.error is not None:
                raise first.error.to_error(first.name)
        return list(results)


class ReviewSession:
    """A manifest under review plus its latest resolved results."""

    def __init__(self, orchestrator: BatchOrchestrator, store: AnnotationStore) -> None:
        self._orchestrator = orchestrator
        self._store = store
        self._generation = 0
        self.valid = False
        self.results: list[PackageResult] = []

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def manifest_text(self) -> str:
        return self._store.manifest_text

    async def load(self) -> None:
        """Load persisted state and validate the stored manifest without fetching."""
        if not self._store.loaded:
            await self._store.load()
        self.valid = parse_manifest(self._store.manifest_text).valid

    async def update_manifest(
        self, text: str, *, strict: bool = False
    ) -> list[PackageResult] | None:
        """Store ``text`` and resolve it.

        Returns the new results, or ``None`` when the text is invalid or when a
        newer edit arrived while this batch was in flight. In both cases the
        previous results are left untouched.
        """
        await self._store.set_manifest_text(text)
        self._generation += 1
        generation = self._generation

        parsed = parse_manifest(text)
        self.valid = parsed.valid
        if not parsed.valid or parsed.dependencies is None:
            log.info("manifest_invalid", generation=generation, error=parsed.error)
            return None

        try:
            results = await self._orchestrator.resolve_all(parsed.dependencies, strict=strict)
        except FetchError:
            if generation == self._generation:
                raise
            log.info("stale_batch_discarded", generation=generation, current=self._generation)
            return None
        if generation != self._generation:
            log.info("stale_batch_discarded", generation=generation, current=self._generation)
            return None
        self.results = results
        return results

    async def refresh(self, *, strict: bool = False) -> list[PackageResult] | None:
        """Re-fetch the stored manifest."""
        return await self.update_manifest(self._store.manifest_text, strict=strict)

    async def clear_all(self) -> None:
        """Drop results and reset the store. In-flight batches become stale."""
        self._generation += 1
        self.results = []
        self.valid = False
        await self._store.clear_all()

    def summary(self) -> ReviewSummary:
        return build_summary(self.results, self._store.classifications, self._store.notes)
