"""Tests for festival draft normalization."""

import pytest
from pydantic import ValidationError

from fiesta_finder.domain.festivals import (
    Category,
    FestivalDraft,
    FestivalPatch,
    coerce_attendees,
)


def test_draft_accepts_image_previews_and_drops_blob_urls() -> None:
    draft = FestivalDraft.model_validate(
        {
            "name": "Ati-Atihan",
            "category": "Religious",
            "imagePreviews": ["blob:http://localhost/123", "https://cdn.test/1.jpg"],
        }
    )

    assert draft.image_urls == ["https://cdn.test/1.jpg"]
    assert draft.category is Category.RELIGIOUS


def test_draft_prefers_non_empty_image_list() -> None:
    draft = FestivalDraft.model_validate(
        {
            "name": "Ati-Atihan",
            "category": "Cultural",
            "imageUrls": [],
            "imagePreviews": ["https://cdn.test/2.jpg"],
        }
    )

    assert draft.image_urls == ["https://cdn.test/2.jpg"]


def test_draft_wraps_legacy_single_image() -> None:
    draft = FestivalDraft.model_validate(
        {
            "name": "Ati-Atihan",
            "category": "Cultural",
            "imagePreview": "https://cdn.test/3.jpg",
        }
    )

    assert draft.image_urls == ["https://cdn.test/3.jpg"]


def test_draft_rejects_unknown_category() -> None:
    with pytest.raises(ValidationError):
        FestivalDraft.model_validate({"name": "X", "category": "Sports"})


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1200", 1200), (35, 35), ("12.7", 12), ("lots", 0), (None, 0), (-4, 0)],
)
def test_coerce_attendees(raw: object, expected: int) -> None:
    assert coerce_attendees(raw) == expected


def test_patch_only_reports_supplied_fields() -> None:
    patch = FestivalPatch.model_validate({"location": "Naga City"})

    assert patch.changes() == {"location": "Naga City"}


def test_patch_with_empty_image_list_clears_images() -> None:
    patch = FestivalPatch.model_validate({"imagePreviews": []})

    assert patch.changes() == {"image_urls": []}


def test_patch_ignores_empty_legacy_image() -> None:
    patch = FestivalPatch.model_validate({"imagePreview": "", "month": "May"})

    assert patch.changes() == {"month": "May"}


def test_null_image_list_counts_as_not_supplied() -> None:
    patch = FestivalPatch.model_validate({"imageUrls": None, "month": "May"})

    assert patch.changes() == {"month": "May"}
