"""Signed-upload parameters for the media host."""

import hashlib
import hmac
from dataclasses import dataclass


def sign_upload(upload_preset: str, timestamp: int, api_secret: str) -> str:
    """Return the HMAC-SHA1 hex digest of ``upload_preset=..&timestamp=..``."""
    string_to_sign = f"upload_preset={upload_preset}&timestamp={timestamp}"
    return hmac.new(
        api_secret.encode("utf-8"), string_to_sign.encode("utf-8"), hashlib.sha1
    ).hexdigest()


class SigningConfigError(Exception):
    """Raised when the server-side media host config is incomplete."""


@dataclass
class SignatureService:
    """Issues signed-upload parameters from server-held config."""

    cloud_name: str | None
    upload_preset: str | None
    api_secret: str | None
    api_key: str | None = None

    def issue(self, timestamp: int) -> dict[str, object]:
        """Return the params a client needs for a signed upload."""
        if not self.cloud_name or not self.upload_preset or not self.api_secret:
            raise SigningConfigError("Server Cloudinary config incomplete")
        return {
            "signature": sign_upload(self.upload_preset, timestamp, self.api_secret),
            "timestamp": timestamp,
            "upload_preset": self.upload_preset,
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
        }
