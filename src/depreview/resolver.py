"""Current / next / latest version resolution.

"Next" is the entry that follows the current version in the order the
registry listed the versions. Registries list versions by publish time, so a
backported patch published after a newer major shows up as the successor of
that major. This is a publish-order successor, not a semver successor.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from depreview.models.registry import Dependency, RegistryDocument
from depreview.models.snapshot import PackageSnapshot

if TYPE_CHECKING:
    from datetime import datetime

DEFAULT_PACKAGE_PAGE_URL = "https://www.npmjs.com/package/{name}"

_RANGE_PREFIX = re.compile(r"^\s*(?:[\^~=v]\s*)*")


def strip_range(version_range: str) -> str:
    """Extract the literal version from a range such as ``^1.2.3``.

    No range semantics are applied: ``~1.2.3``, ``=1.2.3`` and ``v1.2.3`` all
    give ``1.2.3``.
    """
    return _RANGE_PREFIX.sub("", version_range).strip()


def next_version(document: RegistryDocument, version: str) -> str | None:
    index = document.index_of(version)
    if index is None or index + 1 >= len(document.versions):
        return None
    return document.versions[index + 1].version


def latest_version(document: RegistryDocument) -> str | None:
    tagged = document.dist_tags.get("latest")
    if tagged:
        return tagged
    if document.versions:
        return document.versions[-1].version
    return None


def resolve(
    dependency: Dependency,
    document: RegistryDocument,
    *,
    package_page_url: str = DEFAULT_PACKAGE_PAGE_URL,
) -> PackageSnapshot:
    """Build the snapshot for ``dependency``. Missing data leaves fields as None."""
    current = strip_range(dependency.range)
    following = next_version(document, current)
    latest = latest_version(document)

    def peers(version: str | None) -> dict[str, str] | None:
        entry = document.entry(version)
        return entry.peer_dependencies if entry is not None else None

    def published(version: str | None) -> datetime | None:
        return document.published.get(version) if version is not None else None

    return PackageSnapshot(
        name=dependency.name,
        version=current,
        version_published=published(current),
        peer_dependencies=peers(current),
        next_version=following,
        next_version_published=published(following),
        next_version_peer_dependencies=peers(following),
        latest_version=latest,
        latest_version_published=published(latest),
        latest_version_peer_dependencies=peers(latest),
        link=package_page_url.format(name=dependency.name),
        repository_link=document.repository_url,
    )
