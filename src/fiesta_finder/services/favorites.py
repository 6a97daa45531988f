"""Favorites saved by each user."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from fiesta_finder.domain.favorites import UserFavorites
from fiesta_finder.domain.festivals import FestivalRecord
from fiesta_finder.services.catalog import CatalogStore

_logger = logging.getLogger(__name__)


class FavoritesPersistence(Protocol):
    """Persistence interface for every user's favorites."""

    def load(self) -> list[UserFavorites] | None:
        """Return stored favorites, or None when nothing usable is stored."""

    def save(self, entries: list[UserFavorites]) -> None:
        """Replace the stored favorites."""


@dataclass
class FavoritesStore:
    """Toggles favorites per user and tracks how many the user has seen.

    Only published festivals can be added. An id whose festival was deleted
    can still be toggled off, and is left out of ``list_favorites``.
    """

    persistence: FavoritesPersistence
    catalog: CatalogStore
    _entries: dict[str, UserFavorites] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._entries = {
            entry.user_id: entry for entry in self.persistence.load() or []
        }

    def toggle(self, user_id: str, festival_id: str) -> bool | None:
        """Flip a festival in or out of the user's favorites.

        Returns True when it is now a favorite, False when it was removed, and
        None when the festival is unknown and was not a favorite.
        """
        entry = self._entries.get(user_id) or UserFavorites(user_id=user_id)
        if festival_id in entry.festival_ids:
            ids = [item for item in entry.festival_ids if item != festival_id]
            favorited = False
        elif self.catalog.get_by_id(festival_id) is None:
            return None
        else:
            ids = [*entry.festival_ids, festival_id]
            favorited = True
        # Removing below the seen mark must not hide later additions.
        self._entries[user_id] = entry.model_copy(
            update={
                "festival_ids": ids,
                "last_seen_count": min(entry.last_seen_count, len(ids)),
            }
        )
        self._save()
        _logger.debug("User %s favorite %s -> %s", user_id, festival_id, favorited)
        return favorited

    def favorite_ids(self, user_id: str) -> list[str]:
        entry = self._entries.get(user_id)
        return list(entry.festival_ids) if entry else []

    def list_favorites(self, user_id: str) -> list[FestivalRecord]:
        """Return the user's favorite festivals that are still published."""
        records = (self.catalog.get_by_id(item) for item in self.favorite_ids(user_id))
        return [record for record in records if record is not None]

    def unseen_count(self, user_id: str) -> int:
        entry = self._entries.get(user_id)
        return entry.unseen_count if entry else 0

    def mark_seen(self, user_id: str) -> None:
        """Record that the user has viewed every current favorite."""
        entry = self._entries.get(user_id)
        if entry is None or entry.unseen_count == 0:
            return
        self._entries[user_id] = entry.model_copy(
            update={"last_seen_count": len(entry.festival_ids)}
        )
        self._save()

    def _save(self) -> None:
        self.persistence.save(list(self._entries.values()))
