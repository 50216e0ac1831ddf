from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class Classification(StrEnum):
    """User-assigned review status for a package."""

    OK = "ok"
    WARN = "warn"
    DANGER = "danger"
    UNSET = "unset"


def toggle(current: Classification, requested: Classification) -> Classification:
    """Return the classification after the user picks ``requested``.

    Picking the active value clears it; anything else replaces it.
    """
    if requested is Classification.UNSET or current is requested:
        return Classification.UNSET
    return requested


class SummaryItem(BaseModel):
    name: str
    note: str = ""


class ReviewSummary(BaseModel):
    """Resolved packages grouped by classification. Unclassified ones are left out."""

    ok: list[SummaryItem] = []
    warn: list[SummaryItem] = []
    danger: list[SummaryItem] = []
