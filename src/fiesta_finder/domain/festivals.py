"""Domain models for published festivals and pending submissions.

Persisted and wire payloads use camelCase keys (``imageUrls``,
``expectedAttendees``, ``joinedUsers``); Python code uses snake_case names.
"""

from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

_TRANSIENT_PREFIXES = ("blob:",)
_LIST_IMAGE_KEYS = ("imageUrls", "image_urls", "imagePreviews", "image_previews")
_LEGACY_IMAGE_KEYS = ("imagePreview", "image_preview")

_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(StrEnum):
    """Festival category."""

    RELIGIOUS = "Religious"
    CULTURAL = "Cultural"
    HISTORICAL = "Historical"
    NATURE = "Nature"


def is_transient_image_ref(url: str) -> bool:
    """Return True for local preview handles that must never be persisted."""
    return url.startswith(_TRANSIENT_PREFIXES)


def clean_image_urls(urls: object) -> list[str]:
    """Keep non-empty, non-transient image URLs in their original order."""
    if isinstance(urls, str):
        urls = [urls]
    if not isinstance(urls, list | tuple):
        return []
    return [
        url
        for url in urls
        if isinstance(url, str) and url and not is_transient_image_ref(url)
    ]


def coerce_attendees(value: object) -> int:
    """Coerce an attendee count to a non-negative integer, 0 when not numeric."""
    if isinstance(value, bool):
        return 0
    try:
        count = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(count, 0)


def _collapse_image_fields(data: object) -> object:
    """Rewrite every image field spelling in a raw payload as ``imageUrls``."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    supplied, urls = _pop_image_fields(data)
    if supplied:
        data["imageUrls"] = urls
    return data


def _pop_image_fields(data: dict[str, object]) -> tuple[bool, list[str]]:
    """Collapse every image field spelling into one list.

    Returns whether any image field was supplied at all. A non-empty list field
    wins over an empty one; the legacy single value is used only when no list
    field was supplied. A null list and an empty legacy value both count as
    "not supplied".
    """
    lists = [
        value
        for value in (data.pop(key) for key in _LIST_IMAGE_KEYS if key in data)
        if value is not None
    ]
    legacy = [data.pop(key) for key in _LEGACY_IMAGE_KEYS if key in data]
    for candidate in lists:
        if clean_image_urls(candidate):
            return True, clean_image_urls(candidate)
    if lists:
        return True, []
    for candidate in legacy:
        if candidate:
            return True, clean_image_urls(candidate)
    return False, []


class _FestivalFields(BaseModel):
    model_config = _MODEL_CONFIG

    name: str
    location: str = ""
    month: str = ""
    description: str = ""
    category: Category
    expected_attendees: int = 0
    contact_email: str | None = None
    organizer_name: str | None = None
    website: str | None = None
    image_urls: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_images(cls, data: object) -> object:
        return _collapse_image_fields(data)

    @field_validator("expected_attendees", mode="before")
    @classmethod
    def _coerce_attendees(cls, value: object) -> int:
        return coerce_attendees(value)

    @field_validator("image_urls", mode="after")
    @classmethod
    def _drop_transient(cls, value: list[str]) -> list[str]:
        return clean_image_urls(value)


class FestivalDraft(_FestivalFields):
    """Caller-supplied fields for creating or submitting a festival."""

    submitted_by: str | None = None


class JoinedUser(BaseModel):
    """A participant of a festival and their optional rating.

    Older stored entries name the participant ``id`` instead of ``userId``.
    """

    model_config = _MODEL_CONFIG

    user_id: str = Field(validation_alias=AliasChoices("userId", "user_id", "id"))
    joined_at: datetime
    rating: float | None = None


class FestivalRecord(_FestivalFields):
    """A published festival owned by the catalog store."""

    id: str
    year: int
    rating: float = 0.0
    joined_users: list[JoinedUser] = Field(default_factory=list)


class PendingSubmission(_FestivalFields):
    """A user proposal awaiting moderation."""

    id: str
    status: Literal["pending"] = "pending"
    submitted_by: str = "anonymous"
    submitted_at: datetime

    def to_draft(self) -> FestivalDraft:
        """Build the draft used to publish this submission."""
        return FestivalDraft.model_validate(
            self.model_dump(exclude={"id", "status", "submitted_at"})
        )


class FestivalPatch(BaseModel):
    """Partial update for a published festival.

    Only supplied fields are applied. Images replace the existing list.
    """

    model_config = _MODEL_CONFIG

    name: str | None = None
    location: str | None = None
    month: str | None = None
    description: str | None = None
    category: Category | None = None
    expected_attendees: int | None = None
    contact_email: str | None = None
    organizer_name: str | None = None
    website: str | None = None
    image_urls: list[str] | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_images(cls, data: object) -> object:
        return _collapse_image_fields(data)

    @field_validator("expected_attendees", mode="before")
    @classmethod
    def _coerce_attendees(cls, value: object) -> int | None:
        return None if value is None else coerce_attendees(value)

    def changes(self) -> dict[str, object]:
        """Return the supplied fields keyed by attribute name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)
