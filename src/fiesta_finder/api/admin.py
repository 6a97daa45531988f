"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Header,
    HTTPException,
    Request,
    UploadFile,
    status,
)

from fiesta_finder.api.forms import parse_form_json, read_images
from fiesta_finder.domain.festivals import FestivalDraft, FestivalPatch

if TYPE_CHECKING:
    from fiesta_finder.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


def is_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> bool:
    """Resolve the single admin flag from the request headers."""
    return bool(x_admin_token) and x_admin_token == admin_token


async def require_admin(admin: bool = Depends(is_admin)) -> None:
    """Reject requests from anyone but the administrator."""
    if not admin:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.get("/submissions", dependencies=[Depends(require_admin)])
async def list_submissions(request: Request) -> dict[str, object]:
    """Return pending submissions, most recent first."""
    queue = _container(request).submission_queue
    queue.refresh()
    return {
        "submissions": [
            submission.model_dump(mode="json", by_alias=True)
            for submission in queue.list_pending()
        ]
    }


@router.post(
    "/submissions/{submission_id}/approve", dependencies=[Depends(require_admin)]
)
async def approve_submission(submission_id: str, request: Request) -> dict[str, object]:
    """Publish a pending submission."""
    record = _container(request).submission_queue.approve(submission_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return record.model_dump(mode="json", by_alias=True)


@router.post(
    "/submissions/{submission_id}/reject", dependencies=[Depends(require_admin)]
)
async def reject_submission(submission_id: str, request: Request) -> dict[str, str]:
    """Discard a pending submission."""
    if not _container(request).submission_queue.reject(submission_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"status": "rejected"}


@router.post(
    "/festivals",
    dependencies=[Depends(require_admin)],
    status_code=status.HTTP_201_CREATED,
)
async def create_festival(draft: FestivalDraft, request: Request) -> dict[str, object]:
    """Publish a festival directly, bypassing moderation."""
    record = _container(request).catalog_store.create(draft)
    return record.model_dump(mode="json", by_alias=True)


@router.patch("/festivals/{festival_id}", dependencies=[Depends(require_admin)])
async def update_festival(
    festival_id: str, patch: FestivalPatch, request: Request
) -> dict[str, object]:
    """Apply a partial update; a supplied image list replaces the old one."""
    store = _container(request).catalog_store
    if not store.update(festival_id, patch):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    record = store.get_by_id(festival_id)
    return record.model_dump(mode="json", by_alias=True) if record else {}


@router.post("/festivals/{festival_id}/images", dependencies=[Depends(require_admin)])
async def update_festival_with_images(
    festival_id: str,
    request: Request,
    patch: str = Form(default="{}"),
    images: list[UploadFile] = File(default=[]),
) -> dict[str, object]:
    """Upload new images and apply a partial update that appends them."""
    container = _container(request)
    changes = parse_form_json(FestivalPatch, patch)
    updated = await container.image_flows.update(
        festival_id, changes, await read_images(images)
    )
    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    record = container.catalog_store.get_by_id(festival_id)
    return record.model_dump(mode="json", by_alias=True) if record else {}


@router.delete("/festivals/{festival_id}", dependencies=[Depends(require_admin)])
async def delete_festival(festival_id: str, request: Request) -> dict[str, str]:
    """Remove a published festival."""
    if not _container(request).catalog_store.delete(festival_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"status": "deleted"}
