"""Multipart form helpers shared by the public and admin routes."""

from typing import TypeVar

from fastapi import UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from fiesta_finder.domain import uploads

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_form_json(model: type[ModelT], raw: str) -> ModelT:
    """Validate a JSON-encoded form field, answering 422 when it is invalid."""
    try:
        return model.model_validate_json(raw)
    except ValidationError as exc:
        raise RequestValidationError(
            exc.errors(include_url=False, include_context=False)
        ) from exc


async def read_images(files: list[UploadFile]) -> list[uploads.UploadFile]:
    """Read every uploaded form file into memory, keeping form order."""
    return [
        uploads.UploadFile(
            filename=file.filename or "image",
            content=await file.read(),
            content_type=file.content_type or "application/octet-stream",
        )
        for file in files
    ]
