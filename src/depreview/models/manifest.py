from __future__ import annotations

from pydantic import BaseModel


class ManifestParseResult(BaseModel):
    valid: bool
    dependencies: dict[str, str] | None = None  # None when invalid
    error: str | None = None
