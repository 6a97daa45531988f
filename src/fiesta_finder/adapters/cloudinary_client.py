"""Cloudinary image upload client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from fiesta_finder.domain.uploads import UploadFile

DEFAULT_BASE_URL = "https://api.cloudinary.com/v1_1"


@dataclass(frozen=True)
class MediaHostResponse:
    """Status code and parsed body of an upload response."""

    status_code: int
    payload: dict[str, object] | None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class MediaHostClient(Protocol):
    """Interface for posting an image to the media host."""

    async def upload(
        self, cloud_name: str, file: UploadFile, fields: dict[str, str]
    ) -> MediaHostResponse:
        """Upload a file with the given form fields."""


@dataclass
class HttpxCloudinaryClient(MediaHostClient):
    """Cloudinary client using httpx multipart uploads."""

    http_client: httpx.AsyncClient
    base_url: str = DEFAULT_BASE_URL

    @classmethod
    def create(cls, base_url: str = DEFAULT_BASE_URL) -> "HttpxCloudinaryClient":
        """Create a Cloudinary client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), base_url=base_url)

    async def upload(
        self, cloud_name: str, file: UploadFile, fields: dict[str, str]
    ) -> MediaHostResponse:
        """POST the file to the image upload endpoint.

        Non-2xx responses are returned, not raised, so callers can read the
        host's error message.
        """
        url = f"{self.base_url}/{cloud_name}/image/upload"
        response = await self.http_client.post(
            url,
            data=fields,
            files={"file": (file.filename, file.content, file.content_type)},
            timeout=None,
        )
        return MediaHostResponse(
            status_code=response.status_code, payload=_parse_json(response)
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _parse_json(response: httpx.Response) -> dict[str, object] | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None
