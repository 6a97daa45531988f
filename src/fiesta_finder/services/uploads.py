"""Image ingestion: signed/unsigned negotiation, single and batch uploads."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import httpx

from fiesta_finder.adapters.cloudinary_client import MediaHostClient
from fiesta_finder.adapters.signature_client import SignatureClient
from fiesta_finder.domain.uploads import (
    BatchUploadResult,
    UploadCredential,
    UploadErrorKind,
    UploadFile,
    UploadResult,
    UploadStatus,
)
from fiesta_finder.services.deadlines import OperationTimeoutError, start_with_deadline

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
SIGNATURE_TIMEOUT_SECONDS = 2.5
UPLOAD_TIMEOUT_SECONDS = 30.0

_logger = logging.getLogger(__name__)


@dataclass
class UploadNegotiator:
    """Requests a signed-upload credential, degrading to unsigned on any failure.

    A single attempt is made with a short timeout; signed upload is an
    optimization, so no failure here is ever surfaced to the caller.
    """

    client: SignatureClient | None
    timeout_seconds: float = SIGNATURE_TIMEOUT_SECONDS

    async def negotiate(self, timestamp: int) -> UploadCredential | None:
        """Return a credential for ``timestamp`` or None to upload unsigned."""
        if self.client is None:
            return None
        operation = start_with_deadline(
            self.client.request_signature(timestamp), self.timeout_seconds
        )
        try:
            payload = await operation.wait()
        except OperationTimeoutError:
            _logger.warning(
                "Signature request timed out after %ss; uploading unsigned",
                self.timeout_seconds,
            )
            return None
        except Exception as exc:  # noqa: BLE001
            _logger.warning("Signature request failed (%s); uploading unsigned", exc)
            return None

        signature = payload.get("signature")
        if not isinstance(signature, str) or not signature:
            _logger.warning("Signature response had no signature; uploading unsigned")
            return None
        return UploadCredential(
            signature=signature,
            timestamp=_as_int(payload.get("timestamp"), default=timestamp),
            api_key=_as_str(payload.get("api_key")),
            upload_preset=_as_str(payload.get("upload_preset")),
            cloud_name=_as_str(payload.get("cloud_name")),
        )


@dataclass
class ImageUploader:
    """Uploads one file to the media host and normalizes the outcome."""

    negotiator: UploadNegotiator
    media_client: MediaHostClient
    cloud_name: str | None
    upload_preset: str | None
    timeout_seconds: float = UPLOAD_TIMEOUT_SECONDS
    max_bytes: int = MAX_UPLOAD_BYTES
    status: UploadStatus = field(default_factory=UploadStatus)
    clock: Callable[[], float] = time.time

    async def upload(self, file: UploadFile) -> UploadResult:
        """Upload a file; every failure is returned as a typed result."""
        self.status.begin()
        try:
            result = await self._upload(file)
        finally:
            self.status.end()
        if not result.ok:
            self.status.last_error = result.message
            _logger.warning(
                "Upload of %s failed (%s): %s",
                file.filename,
                result.error_kind,
                result.message,
            )
        return result

    async def _upload(self, file: UploadFile) -> UploadResult:
        if file.size > self.max_bytes:
            return UploadResult.failure(
                UploadErrorKind.TOO_LARGE,
                f"{file.filename} is larger than the "
                f"{self.max_bytes // (1024 * 1024)} MiB limit",
            )
        if not self.cloud_name or not self.upload_preset:
            return UploadResult.failure(
                UploadErrorKind.CONFIG_MISSING,
                "Cloudinary config missing: set CLOUDINARY_CLOUD_NAME "
                "and CLOUDINARY_UPLOAD_PRESET",
            )

        cloud_name = self.cloud_name
        fields = {"upload_preset": self.upload_preset}
        credential = await self.negotiator.negotiate(int(self.clock()))
        if credential is not None:
            cloud_name = credential.cloud_name or cloud_name
            fields["upload_preset"] = credential.upload_preset or self.upload_preset
            fields["signature"] = credential.signature
            fields["timestamp"] = str(credential.timestamp)
            if credential.api_key:
                fields["api_key"] = credential.api_key

        operation = start_with_deadline(
            self.media_client.upload(cloud_name, file, fields), self.timeout_seconds
        )
        try:
            response = await operation.wait()
        except OperationTimeoutError as exc:
            return UploadResult.failure(UploadErrorKind.TIMEOUT, str(exc))
        except httpx.HTTPError as exc:
            return UploadResult.failure(
                UploadErrorKind.REJECTED, f"Upload request failed: {exc}"
            )

        payload = response.payload or {}
        if not response.is_success:
            return UploadResult.failure(
                UploadErrorKind.REJECTED,
                _error_message(payload)
                or f"Upload failed with status {response.status_code}",
            )
        secure_url = payload.get("secure_url")
        if not isinstance(secure_url, str) or not secure_url:
            return UploadResult.failure(
                UploadErrorKind.MALFORMED,
                "Upload succeeded but the response had no secure_url",
            )
        return UploadResult.success(secure_url)


@dataclass
class BatchUploader:
    """Uploads files strictly one at a time, in input order."""

    uploader: ImageUploader

    async def upload_all(self, files: Sequence[UploadFile]) -> BatchUploadResult:
        """Upload every file; individual failures never abort the batch."""
        if isinstance(files, str | bytes) or not isinstance(files, Sequence):
            raise TypeError("files must be a sequence of UploadFile")
        for file in files:
            if not isinstance(file, UploadFile):
                raise TypeError(f"expected UploadFile, got {type(file).__name__}")

        urls: list[str] = []
        errors: list[UploadResult] = []
        status = self.uploader.status
        status.begin()
        try:
            for file in files:
                result = await self.uploader.upload(file)
                if result.ok and result.url is not None:
                    urls.append(result.url)
                else:
                    errors.append(result)
        finally:
            status.end()
        if errors:
            status.last_error = (
                f"{len(errors)} of {len(files)} images failed to upload"
            )
        return BatchUploadResult(urls=urls, failures=len(errors), errors=errors)


def _error_message(payload: dict[str, object]) -> str | None:
    error = payload.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    if isinstance(error, str) and error:
        return error
    return None


def _as_str(value: object) -> str | None:
    return str(value) if value not in (None, "") else None


def _as_int(value: object, default: int) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
