"""Shared fixtures: registry packuments and manifests."""

from __future__ import annotations

from typing import Any

import pytest


def make_packument(
    versions: list[str],
    *,
    latest: str | None = None,
    peers: dict[str, dict[str, str]] | None = None,
    repository: Any = None,
) -> dict[str, Any]:
    """Build a minimal packument with one publish date per version, in list order."""
    peers = peers or {}
    document: dict[str, Any] = {
        "versions": {
            v: ({"peerDependencies": peers[v]} if v in peers else {}) for v in versions
        },
        "time": {
            "created": "2020-01-01T00:00:00.000Z",
            "modified": "2024-01-01T00:00:00.000Z",
            **{v: f"2021-0{i + 1}-15T12:00:00.000Z" for i, v in enumerate(versions)},
        },
        "dist-tags": {"latest": latest} if latest else {},
    }
    if repository is not None:
        document["repository"] = repository
    return document


@pytest.fixture()
def react_dom_packument() -> dict[str, Any]:
    return make_packument(
        ["1.0.0", "1.1.0", "2.0.0"],
        latest="2.0.0",
        peers={"1.0.0": {"react": "^1.0.0"}, "2.0.0": {"react": "^2.0.0"}},
        repository={"type": "git", "url": "git+https://github.com/facebook/react.git"},
    )


@pytest.fixture()
def manifest_text() -> str:
    return """{
  "name": "demo",
  "dependencies": {"react-dom": "^1.0.0", "left-pad": "1.3.0"},
  "devDependencies": {"typescript": "~5.4.0"}
}"""


@pytest.fixture()
def packument():
    """Factory fixture wrapping ``make_packument``."""
    return make_packument
