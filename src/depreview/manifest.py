"""package.json parsing.

Only ``dependencies`` and ``devDependencies`` are read. Dev entries are merged
after production entries and win on a name collision.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from depreview.errors import ManifestParseError
from depreview.models.manifest import ManifestParseResult

log = structlog.get_logger()

_SECTIONS = ("dependencies", "devDependencies")


def _collect(data: Any) -> dict[str, str]:
    dependencies: dict[str, str] = {}
    if not isinstance(data, dict):
        return dependencies
    for section in _SECTIONS:
        entries = data.get(section)
        if not isinstance(entries, dict):
            continue
        for name, version_range in entries.items():
            if not isinstance(version_range, str):
                log.warning("manifest_entry_skipped", package=name, section=section)
                continue
            dependencies[name] = version_range
    return dependencies


def parse_manifest(text: str) -> ManifestParseResult:
    """Parse manifest text. Never raises; invalid JSON yields ``valid=False``."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return ManifestParseResult(valid=False, error=str(exc))
    return ManifestParseResult(valid=True, dependencies=_collect(data))


def load_manifest(text: str) -> dict[str, str]:
    """Like ``parse_manifest`` but raises ``ManifestParseError`` on invalid JSON."""
    result = parse_manifest(text)
    if not result.valid or result.dependencies is None:
        raise ManifestParseError(f"Invalid JSON: {result.error}")
    return result.dependencies
