from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator

from depreview.errors import ErrorCode, FetchError


class PackageSnapshot(BaseModel):
    """Current, next and latest version details for one package."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    version_published: datetime | None = None
    peer_dependencies: dict[str, str] | None = None
    latest_version: str | None = None
    latest_version_published: datetime | None = None
    latest_version_peer_dependencies: dict[str, str] | None = None
    next_version: str | None = None
    next_version_published: datetime | None = None
    next_version_peer_dependencies: dict[str, str] | None = None
    link: str
    repository_link: str | None = None


class FetchFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    recoverable: bool

    @classmethod
    def from_error(cls, exc: FetchError) -> FetchFailure:
        return cls(code=exc.code, message=exc.message, recoverable=exc.recoverable)

    def to_error(self, package: str) -> FetchError:
        return FetchError(package, self.code, self.message, recoverable=self.recoverable)


class PackageResult(BaseModel):
    """Outcome of one fetch-and-resolve pipeline: a snapshot or a failure."""

    model_config = ConfigDict(frozen=True)

    name: str
    snapshot: PackageSnapshot | None = None
    error: FetchFailure | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> PackageResult:
        if (self.snapshot is None) == (self.error is None):
            raise ValueError("exactly one of snapshot or error must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.snapshot is not None

    @classmethod
    def success(cls, snapshot: PackageSnapshot) -> PackageResult:
        return cls(name=snapshot.name, snapshot=snapshot)

    @classmethod
    def failure(cls, name: str, exc: FetchError) -> PackageResult:
        return cls(name=name, error=FetchFailure.from_error(exc))
