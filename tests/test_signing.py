"""Tests for signed-upload parameters."""

import hashlib
import hmac

import pytest

from fiesta_finder.services.signing import (
    SignatureService,
    SigningConfigError,
    sign_upload,
)


def test_sign_upload_matches_hmac_sha1() -> None:
    expected = hmac.new(
        b"secret", b"upload_preset=fiesta&timestamp=1700000000", hashlib.sha1
    ).hexdigest()

    assert sign_upload("fiesta", 1700000000, "secret") == expected


def test_signature_service_issues_params() -> None:
    service = SignatureService(
        cloud_name="demo", upload_preset="fiesta", api_secret="secret", api_key="k"
    )

    params = service.issue(1700000000)

    assert params == {
        "signature": sign_upload("fiesta", 1700000000, "secret"),
        "timestamp": 1700000000,
        "upload_preset": "fiesta",
        "cloud_name": "demo",
        "api_key": "k",
    }


def test_signature_service_requires_config() -> None:
    service = SignatureService(cloud_name="demo", upload_preset=None, api_secret="s")

    with pytest.raises(SigningConfigError):
        service.issue(1700000000)
