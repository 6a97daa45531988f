"""Upload a festival's images, then submit or update it.

A batch with any failed file is not used: nothing is submitted or updated,
and the caller retries the whole set.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fiesta_finder.domain.festivals import (
    FestivalDraft,
    FestivalPatch,
    PendingSubmission,
)
from fiesta_finder.domain.uploads import BatchOutcome, BatchUploadResult, UploadFile
from fiesta_finder.services.catalog import CatalogStore
from fiesta_finder.services.submissions import SubmissionQueue
from fiesta_finder.services.uploads import BatchUploader

_logger = logging.getLogger(__name__)


class ImageBatchError(Exception):
    """Raised when a batch upload did not fully succeed."""

    def __init__(self, result: BatchUploadResult) -> None:
        self.result = result
        if result.outcome is BatchOutcome.FAILED:
            message = "All image uploads failed"
        else:
            total = len(result.urls) + result.failures
            message = (
                f"{result.failures} of {total} images failed to upload; "
                "please try again"
            )
        super().__init__(message)

    @property
    def outcome(self) -> BatchOutcome:
        return self.result.outcome


@dataclass
class FestivalImageFlows:
    """Joins the batch uploader to the submission queue and the catalog."""

    batch_uploader: BatchUploader
    submission_queue: SubmissionQueue
    catalog: CatalogStore

    async def submit(
        self, draft: FestivalDraft, files: Sequence[UploadFile]
    ) -> PendingSubmission:
        """Upload the files and queue the draft with their URLs appended."""
        urls = await self._upload(files)
        draft = draft.model_copy(update={"image_urls": [*draft.image_urls, *urls]})
        return self.submission_queue.submit(draft)

    async def update(
        self, festival_id: str, patch: FestivalPatch, files: Sequence[UploadFile]
    ) -> bool:
        """Upload the files and apply the patch with their URLs appended.

        The uploaded URLs extend the patch's image list, or the festival's
        current list when the patch has none. Unknown ids upload nothing.
        """
        current = self.catalog.get_by_id(festival_id)
        if current is None:
            return False
        changes = patch.changes()
        if files:
            urls = await self._upload(files)
            base = current.image_urls if patch.image_urls is None else patch.image_urls
            changes["image_urls"] = [*base, *urls]
        return self.catalog.update(festival_id, changes)

    async def _upload(self, files: Sequence[UploadFile]) -> list[str]:
        result = await self.batch_uploader.upload_all(files)
        if result.outcome is not BatchOutcome.COMPLETE:
            _logger.warning(
                "Image batch %s: %d uploaded, %d failed",
                result.outcome,
                len(result.urls),
                result.failures,
            )
            raise ImageBatchError(result)
        return result.urls
