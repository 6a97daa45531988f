"""Domain models for image uploads."""

from dataclasses import dataclass, field
from enum import StrEnum


class UploadErrorKind(StrEnum):
    """Classification of a failed upload."""

    TOO_LARGE = "too_large"
    TIMEOUT = "timeout"
    REJECTED = "rejected"
    MALFORMED = "malformed"
    CONFIG_MISSING = "config_missing"


@dataclass(frozen=True)
class UploadFile:
    """An image selected for upload."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class UploadCredential:
    """Short-lived signed-upload credential issued by the signature endpoint."""

    signature: str
    timestamp: int
    api_key: str | None = None
    upload_preset: str | None = None
    cloud_name: str | None = None


@dataclass(frozen=True)
class UploadResult:
    """Outcome of uploading a single file."""

    url: str | None = None
    error_kind: UploadErrorKind | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.url is not None

    @classmethod
    def success(cls, url: str) -> "UploadResult":
        return cls(url=url)

    @classmethod
    def failure(cls, kind: UploadErrorKind, message: str) -> "UploadResult":
        return cls(error_kind=kind, message=message)


class BatchOutcome(StrEnum):
    """How a caller should treat a batch upload."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class BatchUploadResult:
    """Successful URLs in input order plus per-file failures."""

    urls: list[str]
    failures: int
    errors: list[UploadResult] = field(default_factory=list)

    @property
    def outcome(self) -> BatchOutcome:
        """Partial batches should be retried as a whole, not accepted."""
        if self.failures == 0:
            return BatchOutcome.COMPLETE
        if self.urls:
            return BatchOutcome.PARTIAL
        return BatchOutcome.FAILED


@dataclass
class UploadStatus:
    """Busy/idle state shared between the uploaders and their observers.

    Nested ``begin``/``end`` pairs keep the flag set for a whole batch.
    """

    active: int = 0
    last_error: str | None = None

    @property
    def in_flight(self) -> bool:
        return self.active > 0

    def begin(self) -> None:
        if self.active == 0:
            self.last_error = None
        self.active += 1

    def end(self) -> None:
        self.active = max(self.active - 1, 0)
