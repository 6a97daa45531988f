"""Catalog of published festivals."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from statistics import fmean
from typing import Protocol

from fiesta_finder.domain.festivals import (
    FestivalDraft,
    FestivalPatch,
    FestivalRecord,
    JoinedUser,
)
from fiesta_finder.domain.identifiers import DEFAULT_BASE, make_id

_logger = logging.getLogger(__name__)


class CatalogPersistence(Protocol):
    """Persistence interface for the full set of published festivals."""

    def load(self) -> list[FestivalRecord] | None:
        """Return the stored festivals, or None when nothing usable is stored."""

    def save(self, records: list[FestivalRecord]) -> None:
        """Replace the stored festivals."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class CatalogStore:
    """Owns published festivals and writes them through on every mutation.

    Callers only ever receive copies; mutation goes through the store's own
    operations. Operations on an unknown id are no-ops that return False.
    """

    persistence: CatalogPersistence
    clock: Callable[[], datetime] = _utcnow
    _records: dict[str, FestivalRecord] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._records = {
            record.id: record for record in self.persistence.load() or []
        }

    def create(self, draft: FestivalDraft | Mapping[str, object]) -> FestivalRecord:
        """Publish a festival from a draft and return the new record."""
        if not isinstance(draft, FestivalDraft):
            draft = FestivalDraft.model_validate(draft)
        record = FestivalRecord.model_validate(
            {
                **draft.model_dump(exclude={"submitted_by"}),
                "id": self._unique_id(make_id(draft.name) or DEFAULT_BASE),
                "year": self.clock().year,
                "rating": 0.0,
                "joined_users": [],
            }
        )
        self._records[record.id] = record
        self._save()
        return record.model_copy(deep=True)

    def update(
        self, festival_id: str, patch: FestivalPatch | Mapping[str, object]
    ) -> bool:
        """Merge supplied fields into a festival; images replace the old list."""
        current = self._records.get(festival_id)
        if current is None:
            return False
        if not isinstance(patch, FestivalPatch):
            patch = FestivalPatch.model_validate(patch)
        self._records[festival_id] = current.model_copy(update=patch.changes())
        self._save()
        return True

    def delete(self, festival_id: str) -> bool:
        """Remove a festival."""
        if self._records.pop(festival_id, None) is None:
            return False
        self._save()
        return True

    def get_by_id(self, festival_id: str) -> FestivalRecord | None:
        record = self._records.get(festival_id)
        return record.model_copy(deep=True) if record else None

    def list_festivals(self) -> list[FestivalRecord]:
        """Return all festivals in creation order."""
        return [record.model_copy(deep=True) for record in self._records.values()]

    def join(self, festival_id: str, user_id: str) -> bool:
        """Add a participant; joining twice leaves a single entry."""
        current = self._records.get(festival_id)
        if current is None:
            return False
        if any(user.user_id == user_id for user in current.joined_users):
            return True
        joined = [
            *current.joined_users,
            JoinedUser(user_id=user_id, joined_at=self.clock(), rating=None),
        ]
        self._records[festival_id] = current.model_copy(
            update={"joined_users": joined}
        )
        self._save()
        return True

    def rate(self, festival_id: str, user_id: str, value: float) -> bool:
        """Record a participant's rating and recompute the festival average.

        The average covers every participant rating that is set. If none is
        set (the rater has not joined and nobody else rated), the submitted
        value alone becomes the rating. Range checks belong to the caller.
        """
        current = self._records.get(festival_id)
        if current is None:
            return False
        joined = [
            user.model_copy(update={"rating": float(value)})
            if user.user_id == user_id
            else user
            for user in current.joined_users
        ]
        ratings = [user.rating for user in joined if user.rating is not None]
        average = fmean(ratings) if ratings else float(value)
        self._records[festival_id] = current.model_copy(
            update={"joined_users": joined, "rating": average}
        )
        self._save()
        return True

    def _unique_id(self, base: str) -> str:
        if base not in self._records:
            return base
        suffix = 2
        while f"{base}-{suffix}" in self._records:
            suffix += 1
        candidate = f"{base}-{suffix}"
        _logger.info("Festival id %s is taken; using %s", base, candidate)
        return candidate

    def _save(self) -> None:
        self.persistence.save(list(self._records.values()))
