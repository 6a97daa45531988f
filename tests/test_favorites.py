"""Tests for per-user favorites."""

from collections.abc import Callable

from fiesta_finder.services.catalog import CatalogStore
from fiesta_finder.services.favorites import FavoritesStore
from tests.conftest import festival_draft


def test_toggle_adds_then_removes(
    catalog: CatalogStore, favorites: FavoritesStore
) -> None:
    record = catalog.create(festival_draft())

    assert favorites.toggle("ana", record.id) is True
    assert favorites.favorite_ids("ana") == [record.id]
    assert favorites.toggle("ana", record.id) is False
    assert favorites.favorite_ids("ana") == []


def test_toggle_unknown_festival_is_rejected(favorites: FavoritesStore) -> None:
    assert favorites.toggle("ana", "missing") is None
    assert favorites.favorite_ids("ana") == []


def test_favorites_are_per_user_and_persisted(
    catalog: CatalogStore,
    favorites: FavoritesStore,
    favorites_factory: Callable[[], FavoritesStore],
) -> None:
    first = catalog.create(festival_draft("Ati-Atihan"))
    second = catalog.create(festival_draft("Masskara"))

    favorites.toggle("ana", first.id)
    favorites.toggle("ana", second.id)
    favorites.toggle("ben", second.id)
    reopened = favorites_factory()

    assert reopened.favorite_ids("ana") == ["ati-atihan", "masskara"]
    assert reopened.favorite_ids("ben") == ["masskara"]
    assert [record.id for record in reopened.list_favorites("ana")] == [
        "ati-atihan",
        "masskara",
    ]


def test_unseen_count_and_mark_seen(
    catalog: CatalogStore, favorites: FavoritesStore
) -> None:
    first = catalog.create(festival_draft("Ati-Atihan"))
    second = catalog.create(festival_draft("Masskara"))

    favorites.toggle("ana", first.id)
    favorites.toggle("ana", second.id)
    assert favorites.unseen_count("ana") == 2

    favorites.mark_seen("ana")
    assert favorites.unseen_count("ana") == 0

    favorites.toggle("ana", first.id)
    favorites.toggle("ana", first.id)
    assert favorites.unseen_count("ana") == 1
    assert favorites.unseen_count("nobody") == 0


def test_deleted_festival_is_left_out_but_can_be_removed(
    catalog: CatalogStore, favorites: FavoritesStore
) -> None:
    record = catalog.create(festival_draft())
    favorites.toggle("ana", record.id)
    catalog.delete(record.id)

    assert favorites.list_favorites("ana") == []
    assert favorites.toggle("ana", record.id) is False
    assert favorites.favorite_ids("ana") == []
