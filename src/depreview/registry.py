"""npm registry client.

One GET per package, no retries. Every failure mode (transport error,
non-2xx status, undecodable body) is raised as ``FetchError`` so the
orchestrator can isolate it to the package that caused it.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import ValidationError

from depreview.errors import ErrorCode, FetchError
from depreview.models.registry import RegistryDocument, VersionEntry

if TYPE_CHECKING:
    from depreview.config import RegistrySettings

log = structlog.get_logger()

_HEADERS = {"Accept": "application/json"}


def build_http_client(settings: RegistrySettings | None = None) -> httpx.AsyncClient:
    """Create the shared AsyncClient used for all registry lookups."""
    timeout = settings.timeout_seconds if settings is not None else 30.0
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers=_HEADERS,
    )


def normalize_repository_url(url: str | None) -> str | None:
    """Turn a packument ``repository.url`` into a browsable link.

    >>> normalize_repository_url("git+https://github.com/expressjs/express.git")
    'https://github.com/expressjs/express'
    """
    if not url:
        return None
    return url.removeprefix("git+").removesuffix(".git")


def _parse_timestamp(value: Any) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _repository_url(repository: Any) -> str | None:
    if isinstance(repository, str):
        return repository
    if isinstance(repository, dict) and isinstance(repository.get("url"), str):
        return repository["url"]
    return None


def parse_document(name: str, data: dict[str, Any]) -> RegistryDocument:
    """Normalise a raw packument into a ``RegistryDocument``.

    Fields that are missing or of the wrong shape are left empty rather than
    rejected.
    """
    raw_versions = data.get("versions")
    versions: list[VersionEntry] = []
    if isinstance(raw_versions, dict):
        for version, meta in raw_versions.items():
            peers = meta.get("peerDependencies") if isinstance(meta, dict) else None
            versions.append(
                VersionEntry(
                    version=version,
                    peer_dependencies=(
                        {dep: rng for dep, rng in peers.items() if isinstance(rng, str)}
                        if isinstance(peers, dict)
                        else None
                    ),
                )
            )

    published: dict[str, datetime] = {}
    raw_time = data.get("time")
    if isinstance(raw_time, dict):
        for key, value in raw_time.items():
            timestamp = _parse_timestamp(value)
            if timestamp is not None:
                published[key] = timestamp

    raw_tags = data.get("dist-tags")
    dist_tags = (
        {tag: v for tag, v in raw_tags.items() if isinstance(v, str)}
        if isinstance(raw_tags, dict)
        else {}
    )

    return RegistryDocument(
        name=name,
        versions=versions,
        published=published,
        dist_tags=dist_tags,
        repository_url=normalize_repository_url(_repository_url(data.get("repository"))),
    )


class RegistryClient:
    """Fetches packuments from an npm-compatible registry."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = "https://registry.npmjs.org"):
        self._client = client
        self._base_url = base_url.rstrip("/")

    def package_url(self, name: str) -> str:
        return f"{self._base_url}/{name}"

    async def fetch(self, name: str) -> RegistryDocument:
        url = self.package_url(name)
        log.debug("registry_fetch_start", package=name, url=url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            log.warning("registry_fetch_failed", package=name, error=str(exc))
            raise FetchError(
                name,
                ErrorCode.REGISTRY_FETCH_FAILED,
                f"Request for {name} failed: {exc}",
            ) from exc

        if response.status_code == 404:
            log.info("registry_package_not_found", package=name)
            raise FetchError(
                name,
                ErrorCode.PACKAGE_NOT_FOUND,
                f"Package {name} not found in registry",
                recoverable=False,
            )
        if not response.is_success:
            log.warning("registry_fetch_failed", package=name, status_code=response.status_code)
            raise FetchError(
                name,
                ErrorCode.REGISTRY_FETCH_FAILED,
                f"Registry returned HTTP {response.status_code} for {name}",
            )

        try:
            data = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log.warning("registry_invalid_response", package=name, error=str(exc))
            raise FetchError(
                name,
                ErrorCode.REGISTRY_INVALID_RESPONSE,
                f"Registry response for {name} is not valid JSON",
            ) from exc
        if not isinstance(data, dict):
            raise FetchError(
                name,
                ErrorCode.REGISTRY_INVALID_RESPONSE,
                f"Registry response for {name} is not a JSON object",
            )

        try:
            document = parse_document(name, data)
        except ValidationError as exc:
            log.warning("registry_invalid_response", package=name, error=str(exc))
            raise FetchError(
                name,
                ErrorCode.REGISTRY_INVALID_RESPONSE,
                f"Registry response for {name} has an unexpected shape",
            ) from exc
        log.debug("registry_fetch_complete", package=name, versions=len(document.versions))
        return document
