"""Error types shared across depreview.

Every error raised by depreview carries a machine-readable ``ErrorCode`` and a
``recoverable`` flag so callers can decide whether a retry makes sense
without parsing messages.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    MANIFEST_INVALID = "MANIFEST_INVALID"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    REGISTRY_FETCH_FAILED = "REGISTRY_FETCH_FAILED"
    REGISTRY_INVALID_RESPONSE = "REGISTRY_INVALID_RESPONSE"
    STORAGE_LOAD_FAILED = "STORAGE_LOAD_FAILED"


class DepReviewError(Exception):
    """Base error with a stable code and a recoverability hint."""

    def __init__(self, code: ErrorCode, message: str, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!s}, message={self.message!r}, "
            f"recoverable={self.recoverable})"
        )


class ManifestParseError(DepReviewError):
    """The manifest text is not valid JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.MANIFEST_INVALID, message, recoverable=False)


class FetchError(DepReviewError):
    """Registry lookup for a single package failed."""

    def __init__(
        self,
        package: str,
        code: ErrorCode,
        message: str,
        recoverable: bool = True,
    ) -> None:
        super().__init__(code, message, recoverable=recoverable)
        self.package = package


class StorageLoadError(DepReviewError):
    """A persisted value could not be read or decoded."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(ErrorCode.STORAGE_LOAD_FAILED, message, recoverable=True)
        self.key = key
