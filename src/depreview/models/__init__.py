from __future__ import annotations

from depreview.models.annotations import Classification, ReviewSummary, SummaryItem, toggle
from depreview.models.manifest import ManifestParseResult
from depreview.models.registry import Dependency, RegistryDocument, VersionEntry
from depreview.models.snapshot import FetchFailure, PackageResult, PackageSnapshot

__all__ = [
    # registry
    "Dependency",
    "VersionEntry",
    "RegistryDocument",
    # manifest
    "ManifestParseResult",
    # snapshots
    "PackageSnapshot",
    "PackageResult",
    "FetchFailure",
    # annotations
    "Classification",
    "toggle",
    "SummaryItem",
    "ReviewSummary",
]
