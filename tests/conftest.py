"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from fiesta_finder.adapters.cloudinary_client import MediaHostClient, MediaHostResponse
from fiesta_finder.adapters.local_storage import JsonListPersistence, KeyValueStorage
from fiesta_finder.adapters.signature_client import SignatureClient
from fiesta_finder.config import Settings
from fiesta_finder.containers import (
    FAVORITES_KEY,
    FESTIVALS_KEY,
    PENDING_SUBMISSIONS_KEY,
    AppContainer,
)
from fiesta_finder.domain.favorites import UserFavorites
from fiesta_finder.domain.festivals import FestivalRecord, PendingSubmission
from fiesta_finder.domain.uploads import UploadFile
from fiesta_finder.services.catalog import CatalogStore
from fiesta_finder.services.favorites import FavoritesStore
from fiesta_finder.services.image_flows import FestivalImageFlows
from fiesta_finder.services.signing import SignatureService
from fiesta_finder.services.submissions import SubmissionQueue
from fiesta_finder.services.uploads import (
    BatchUploader,
    ImageUploader,
    UploadNegotiator,
)

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@dataclass
class InMemoryKeyValueStorage(KeyValueStorage):
    """Process-local blob storage."""

    blobs: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.blobs.get(key)

    def set(self, key: str, value: str) -> None:
        self.blobs[key] = value


@dataclass
class FakeSignatureClient(SignatureClient):
    """Fake signature endpoint returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "signature": "abc123",
            "timestamp": 1700000000,
            "upload_preset": "signed-preset",
            "cloud_name": "demo",
            "api_key": "key-1",
        }
    )
    error: Exception | None = None
    hang: bool = False
    timestamps: list[int] = field(default_factory=list)

    async def request_signature(self, timestamp: int) -> dict[str, object]:
        self.timestamps.append(timestamp)
        if self.hang:
            await asyncio.Event().wait()
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FakeMediaHostClient(MediaHostClient):
    """Fake media host that answers per filename."""

    responses: dict[str, MediaHostResponse] = field(default_factory=dict)
    hang_for: set[str] = field(default_factory=set)
    calls: list[tuple[str, str, dict[str, str]]] = field(default_factory=list)

    async def upload(
        self, cloud_name: str, file: UploadFile, fields: dict[str, str]
    ) -> MediaHostResponse:
        self.calls.append((cloud_name, file.filename, dict(fields)))
        if file.filename in self.hang_for:
            await asyncio.Event().wait()
        return self.responses.get(
            file.filename,
            MediaHostResponse(
                status_code=200,
                payload={"secure_url": f"https://cdn.test/{file.filename}"},
            ),
        )


@dataclass
class FakeClock:
    """Settable clock for deterministic timestamps."""

    now: datetime = FIXED_NOW

    def __call__(self) -> datetime:
        return self.now


def make_file(name: str = "photo.jpg", size: int = 16) -> UploadFile:
    return UploadFile(filename=name, content=b"x" * size, content_type="image/jpeg")


def festival_draft(name: str = "Tinagba Festival", **overrides: object) -> dict:
    draft: dict[str, object] = {
        "name": name,
        "location": "Iriga City",
        "month": "February",
        "description": "Harvest thanksgiving parade.",
        "category": "Cultural",
        "expectedAttendees": "5000",
        "imageUrls": ["https://cdn.test/a.jpg"],
    }
    draft.update(overrides)
    return draft


@pytest.fixture
def settings() -> Settings:
    return Settings(
        admin_token="admin-token",
        cloudinary_cloud_name="demo",
        cloudinary_upload_preset="unsigned-preset",
        cloudinary_api_key="key-1",
        cloudinary_api_secret="secret",
        storage_dir="unused",
    )


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog_factory(
    storage: InMemoryKeyValueStorage, clock: FakeClock
) -> Callable[[], CatalogStore]:
    def build() -> CatalogStore:
        return CatalogStore(
            JsonListPersistence(storage, FESTIVALS_KEY, FestivalRecord), clock=clock
        )

    return build


@pytest.fixture
def catalog(catalog_factory: Callable[[], CatalogStore]) -> CatalogStore:
    return catalog_factory()


@pytest.fixture
def queue_factory(
    storage: InMemoryKeyValueStorage, catalog: CatalogStore, clock: FakeClock
) -> Callable[[], SubmissionQueue]:
    def build() -> SubmissionQueue:
        return SubmissionQueue(
            persistence=JsonListPersistence(
                storage, PENDING_SUBMISSIONS_KEY, PendingSubmission
            ),
            catalog=catalog,
            clock=clock,
        )

    return build


@pytest.fixture
def submission_queue(
    queue_factory: Callable[[], SubmissionQueue],
) -> SubmissionQueue:
    return queue_factory()


@pytest.fixture
def favorites_factory(
    storage: InMemoryKeyValueStorage, catalog: CatalogStore
) -> Callable[[], FavoritesStore]:
    def build() -> FavoritesStore:
        return FavoritesStore(
            persistence=JsonListPersistence(storage, FAVORITES_KEY, UserFavorites),
            catalog=catalog,
        )

    return build


@pytest.fixture
def favorites(favorites_factory: Callable[[], FavoritesStore]) -> FavoritesStore:
    return favorites_factory()


@pytest.fixture
def image_flows(
    image_uploader: ImageUploader,
    submission_queue: SubmissionQueue,
    catalog: CatalogStore,
) -> FestivalImageFlows:
    return FestivalImageFlows(
        batch_uploader=BatchUploader(image_uploader),
        submission_queue=submission_queue,
        catalog=catalog,
    )


@pytest.fixture
def signature_client() -> FakeSignatureClient:
    return FakeSignatureClient()


@pytest.fixture
def media_client() -> FakeMediaHostClient:
    return FakeMediaHostClient()


@pytest.fixture
def image_uploader(
    signature_client: FakeSignatureClient, media_client: FakeMediaHostClient
) -> ImageUploader:
    return ImageUploader(
        negotiator=UploadNegotiator(client=signature_client, timeout_seconds=0.05),
        media_client=media_client,
        cloud_name="demo",
        upload_preset="unsigned-preset",
        timeout_seconds=0.2,
        clock=lambda: 1700000000.0,
    )


@pytest.fixture
def container(
    settings: Settings,
    catalog: CatalogStore,
    submission_queue: SubmissionQueue,
    favorites: FavoritesStore,
    image_uploader: ImageUploader,
    image_flows: FestivalImageFlows,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        catalog_store=catalog,
        submission_queue=submission_queue,
        favorites_store=favorites,
        image_uploader=image_uploader,
        image_flows=image_flows,
        signature_service=SignatureService(
            cloud_name=settings.cloudinary_cloud_name,
            upload_preset=settings.cloudinary_upload_preset,
            api_secret=settings.cloudinary_api_secret,
            api_key=settings.cloudinary_api_key,
        ),
        close_resources=close_resources,
    )
