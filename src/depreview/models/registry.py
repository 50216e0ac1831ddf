from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Dependency(BaseModel):
    """Single manifest entry: package name and its declared version range."""

    name: str
    range: str  # e.g. "^1.2.3"


class VersionEntry(BaseModel):
    version: str
    peer_dependencies: dict[str, str] | None = None


class RegistryDocument(BaseModel):
    """The parts of an npm packument that depreview consumes.

    ``versions`` keeps the order the registry returned. That order is
    chronological by publish, not semver-sorted, and next-version lookup
    relies on it.
    """

    name: str
    versions: list[VersionEntry] = []
    published: dict[str, datetime] = {}  # the packument "time" map
    dist_tags: dict[str, str] = {}
    repository_url: str | None = None

    def entry(self, version: str | None) -> VersionEntry | None:
        if version is None:
            return None
        for item in self.versions:
            if item.version == version:
                return item
        return None

    def index_of(self, version: str) -> int | None:
        for index, item in enumerate(self.versions):
            if item.version == version:
                return index
        return None
