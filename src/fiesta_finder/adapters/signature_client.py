"""Client for the signed-upload signature endpoint."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class SignatureClient(Protocol):
    """Interface for requesting signed-upload parameters."""

    async def request_signature(self, timestamp: int) -> dict[str, object]:
        """Return the raw signature payload for a UNIX timestamp."""


@dataclass
class HttpxSignatureClient(SignatureClient):
    """Signature client using httpx."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxSignatureClient":
        """Create a signature client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def request_signature(self, timestamp: int) -> dict[str, object]:
        """POST the timestamp and return the signature payload."""
        response = await self.http_client.post(self.url, json={"timestamp": timestamp})
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Signature endpoint returned a non-object payload")
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
