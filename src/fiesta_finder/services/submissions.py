"""Moderation queue for user-submitted festivals."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from fiesta_finder.domain.festivals import (
    FestivalDraft,
    FestivalRecord,
    PendingSubmission,
)
from fiesta_finder.domain.identifiers import make_submission_id
from fiesta_finder.services.catalog import CatalogStore

_logger = logging.getLogger(__name__)


class SubmissionPersistence(Protocol):
    """Persistence interface for pending submissions."""

    def load(self) -> list[PendingSubmission] | None:
        """Return stored submissions, or None when nothing usable is stored."""

    def save(self, submissions: list[PendingSubmission]) -> None:
        """Replace the stored submissions."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SubmissionQueue:
    """Pending proposals, most recent first.

    Approval publishes through the catalog store; approval and rejection both
    remove the entry. Another in-process copy of the queue may write the same
    storage key, so ``refresh`` re-reads it and ``submit`` refreshes first.
    """

    persistence: SubmissionPersistence
    catalog: CatalogStore
    clock: Callable[[], datetime] = _utcnow
    _pending: list[PendingSubmission] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._pending = self.persistence.load() or []

    def submit(self, draft: FestivalDraft | Mapping[str, object]) -> PendingSubmission:
        """Queue a proposal for moderation."""
        if not isinstance(draft, FestivalDraft):
            draft = FestivalDraft.model_validate(draft)
        self.refresh()
        submission = PendingSubmission.model_validate(
            {
                **draft.model_dump(exclude={"submitted_by"}),
                "id": make_submission_id(draft.name),
                "submitted_by": draft.submitted_by or "anonymous",
                "submitted_at": self.clock(),
            }
        )
        self._pending = [submission, *self._pending]
        self._save()
        return submission.model_copy(deep=True)

    def approve(self, submission_id: str) -> FestivalRecord | None:
        """Publish a submission and drop it from the queue."""
        submission = self._find(submission_id)
        if submission is None:
            return None
        record = self.catalog.create(submission.to_draft())
        self._remove(submission_id)
        _logger.info("Approved submission %s as festival %s", submission_id, record.id)
        return record

    def reject(self, submission_id: str) -> bool:
        """Drop a submission without publishing it."""
        if self._find(submission_id) is None:
            return False
        self._remove(submission_id)
        _logger.info("Rejected submission %s", submission_id)
        return True

    def refresh(self) -> None:
        """Reload from storage; keep the in-memory queue if storage is unusable."""
        stored = self.persistence.load()
        if stored is not None:
            self._pending = stored

    def list_pending(self) -> list[PendingSubmission]:
        return [submission.model_copy(deep=True) for submission in self._pending]

    def get(self, submission_id: str) -> PendingSubmission | None:
        submission = self._find(submission_id)
        return submission.model_copy(deep=True) if submission else None

    def _find(self, submission_id: str) -> PendingSubmission | None:
        return next(
            (item for item in self._pending if item.id == submission_id), None
        )

    def _remove(self, submission_id: str) -> None:
        self._pending = [item for item in self._pending if item.id != submission_id]
        self._save()

    def _save(self) -> None:
        self.persistence.save(list(self._pending))
