"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import (
    FastAPI,
    File,
    Form,
    HTTPException,
    Query,
    Request,
    UploadFile,
    status,
)
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from fiesta_finder.api.admin import router as admin_router
from fiesta_finder.api.forms import parse_form_json, read_images
from fiesta_finder.app_logging import configure_logging
from fiesta_finder.containers import AppContainer
from fiesta_finder.domain.festivals import FestivalDraft
from fiesta_finder.services.image_flows import ImageBatchError
from fiesta_finder.services.signing import SigningConfigError


class SignatureRequest(BaseModel):
    """Body of a signature request."""

    timestamp: int | None = None


class UserRequest(BaseModel):
    """Body naming the acting user; the identity comes from the session layer."""

    user_id: str = Field(alias="userId")


class RatingRequest(UserRequest):
    """Body of a rating request."""

    rating: float = Field(ge=1, le=5)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(ImageBatchError)
    async def image_batch_failed(
        request: Request, exc: ImageBatchError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "error": str(exc),
                "outcome": exc.outcome.value,
                "failures": exc.result.failures,
            },
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/cloudinary/signature", response_model=None)
    async def cloudinary_signature(
        body: SignatureRequest, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Issue signed-upload parameters for a client-chosen timestamp."""
        state_container: AppContainer = request.app.state.container
        if not body.timestamp:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "Missing timestamp"},
            )
        try:
            return state_container.signature_service.issue(body.timestamp)
        except SigningConfigError as exc:
            logger.error("Cloudinary config missing on the server")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": str(exc)},
            )

    @app.get("/api/festivals")
    async def list_festivals(request: Request) -> dict[str, object]:
        """Return all published festivals."""
        state_container: AppContainer = request.app.state.container
        return {
            "festivals": [
                record.model_dump(mode="json", by_alias=True)
                for record in state_container.catalog_store.list_festivals()
            ]
        }

    @app.get("/api/festivals/{festival_id}")
    async def get_festival(festival_id: str, request: Request) -> dict[str, object]:
        """Return one published festival."""
        state_container: AppContainer = request.app.state.container
        record = state_container.catalog_store.get_by_id(festival_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return record.model_dump(mode="json", by_alias=True)

    @app.post("/api/festivals/{festival_id}/join")
    async def join_festival(
        festival_id: str, body: UserRequest, request: Request
    ) -> dict[str, str]:
        """Add the caller to a festival's participants."""
        state_container: AppContainer = request.app.state.container
        if not state_container.catalog_store.join(festival_id, body.user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"status": "ok"}

    @app.post("/api/festivals/{festival_id}/rating")
    async def rate_festival(
        festival_id: str, body: RatingRequest, request: Request
    ) -> dict[str, object]:
        """Record the caller's rating and return the new average."""
        state_container: AppContainer = request.app.state.container
        store = state_container.catalog_store
        if not store.rate(festival_id, body.user_id, body.rating):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        record = store.get_by_id(festival_id)
        return {"rating": record.rating if record else body.rating}

    @app.post("/api/submissions", status_code=status.HTTP_201_CREATED)
    async def submit_festival(
        draft: FestivalDraft, request: Request
    ) -> dict[str, object]:
        """Queue a festival proposal for moderation."""
        state_container: AppContainer = request.app.state.container
        submission = state_container.submission_queue.submit(draft)
        return submission.model_dump(mode="json", by_alias=True)

    @app.post("/api/submissions/with-images", status_code=status.HTTP_201_CREATED)
    async def submit_festival_with_images(
        request: Request,
        festival: str = Form(...),
        images: list[UploadFile] = File(default=[]),
    ) -> dict[str, object]:
        """Upload the attached images, then queue the proposal.

        Nothing is queued unless every image uploads; the caller retries the
        whole set.
        """
        state_container: AppContainer = request.app.state.container
        draft = parse_form_json(FestivalDraft, festival)
        submission = await state_container.image_flows.submit(
            draft, await read_images(images)
        )
        return submission.model_dump(mode="json", by_alias=True)

    @app.get("/api/me/favorites")
    async def list_favorites(
        request: Request, user_id: str = Query(alias="userId")
    ) -> dict[str, object]:
        """Return the caller's favorite festivals and the unseen count."""
        store = request.app.state.container.favorites_store
        return {
            "favorites": [
                record.model_dump(mode="json", by_alias=True)
                for record in store.list_favorites(user_id)
            ],
            "unseenCount": store.unseen_count(user_id),
        }

    @app.post("/api/me/favorites/seen")
    async def mark_favorites_seen(
        body: UserRequest, request: Request
    ) -> dict[str, int]:
        store = request.app.state.container.favorites_store
        store.mark_seen(body.user_id)
        return {"unseenCount": store.unseen_count(body.user_id)}

    @app.post("/api/me/favorites/{festival_id}/toggle")
    async def toggle_favorite(
        festival_id: str, body: UserRequest, request: Request
    ) -> dict[str, bool]:
        """Add or remove a festival from the caller's favorites."""
        store = request.app.state.container.favorites_store
        favorited = store.toggle(body.user_id, festival_id)
        if favorited is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return {"favorited": favorited}

    return app
