from __future__ import annotations

from typing import TYPE_CHECKING

from depreview.models.annotations import Classification, ReviewSummary, SummaryItem

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from depreview.models.snapshot import PackageResult


def build_summary(
    results: Iterable[PackageResult],
    classifications: Mapping[str, Classification],
    notes: Mapping[str, str],
) -> ReviewSummary:
    """Group resolved packages by classification, keeping result order.

    Failed lookups and unclassified packages are not listed.
    """
    summary = ReviewSummary()
    buckets = {
        Classification.OK: summary.ok,
        Classification.WARN: summary.warn,
        Classification.DANGER: summary.danger,
    }
    for result in results:
        if not result.ok:
            continue
        bucket = buckets.get(classifications.get(result.name, Classification.UNSET))
        if bucket is not None:
            bucket.append(SummaryItem(name=result.name, note=notes.get(result.name, "")))
    return summary
