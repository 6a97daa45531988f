"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from fiesta_finder.adapters.cloudinary_client import HttpxCloudinaryClient
from fiesta_finder.adapters.local_storage import (
    FileKeyValueStorage,
    JsonListPersistence,
)
from fiesta_finder.adapters.signature_client import HttpxSignatureClient
from fiesta_finder.config import Settings
from fiesta_finder.domain.favorites import UserFavorites
from fiesta_finder.domain.festivals import FestivalRecord, PendingSubmission
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

FESTIVALS_KEY = "festivals"
PENDING_SUBMISSIONS_KEY = "pendingSubmissions"
FAVORITES_KEY = "favorites"


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_store: CatalogStore
    submission_queue: SubmissionQueue
    favorites_store: FavoritesStore
    image_uploader: ImageUploader
    image_flows: FestivalImageFlows
    signature_service: SignatureService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage = FileKeyValueStorage(Path(resolved_settings.storage_dir))
    catalog_store = CatalogStore(
        JsonListPersistence(storage, FESTIVALS_KEY, FestivalRecord)
    )
    submission_queue = SubmissionQueue(
        persistence=JsonListPersistence(
            storage, PENDING_SUBMISSIONS_KEY, PendingSubmission
        ),
        catalog=catalog_store,
    )
    favorites_store = FavoritesStore(
        persistence=JsonListPersistence(storage, FAVORITES_KEY, UserFavorites),
        catalog=catalog_store,
    )
    signature_client = (
        HttpxSignatureClient.create(resolved_settings.signature_url)
        if resolved_settings.signature_url
        else None
    )
    cloudinary_client = HttpxCloudinaryClient.create(
        resolved_settings.cloudinary_base_url
    )
    image_uploader = ImageUploader(
        negotiator=UploadNegotiator(
            client=signature_client,
            timeout_seconds=resolved_settings.signature_timeout_seconds,
        ),
        media_client=cloudinary_client,
        cloud_name=resolved_settings.cloudinary_cloud_name,
        upload_preset=resolved_settings.cloudinary_upload_preset,
        timeout_seconds=resolved_settings.upload_timeout_seconds,
        max_bytes=resolved_settings.max_upload_bytes,
    )
    signature_service = SignatureService(
        cloud_name=resolved_settings.cloudinary_cloud_name,
        upload_preset=resolved_settings.cloudinary_upload_preset,
        api_secret=resolved_settings.cloudinary_api_secret,
        api_key=resolved_settings.cloudinary_api_key,
    )

    async def close_resources() -> None:
        if signature_client is not None:
            await signature_client.close()
        await cloudinary_client.close()

    return AppContainer(
        settings=resolved_settings,
        catalog_store=catalog_store,
        submission_queue=submission_queue,
        favorites_store=favorites_store,
        image_uploader=image_uploader,
        image_flows=FestivalImageFlows(
            batch_uploader=BatchUploader(image_uploader),
            submission_queue=submission_queue,
            catalog=catalog_store,
        ),
        signature_service=signature_service,
        close_resources=close_resources,
    )
