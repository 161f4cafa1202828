"""Tests for Cloudinary image uploads."""

import hashlib
from urllib.parse import parse_qs

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import text

from squeak.core.deps import get_image_uploader
from squeak.core.exceptions import UploadError
from squeak.main import app
from squeak.services.image_service import CloudinaryConfig, CloudinaryUploader, sign_params

CLOUDINARY_BASE = "https://cloudinary.test/v1_1"
CONFIG = CloudinaryConfig(cloud_name="demo", api_key="1234", api_secret="s3cret")
IMAGE = "data:image/png;base64,iVBORw0KGgo="


def _uploader(handler) -> CloudinaryUploader:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudinaryUploader(http_client=http_client, base_url=CLOUDINARY_BASE)


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "public_id": "abc123",
            "format": "png",
            "version": 1700000000,
            "secure_url": "https://res.cloudinary.com/demo/image/upload/abc123.png",
        },
    )


def test_sign_params_sorts_keys_and_appends_secret():
    expected = hashlib.sha1(b"folder=widget&timestamp=100s3cret").hexdigest()

    assert sign_params({"timestamp": 100, "folder": "widget"}, "s3cret") == expected


@pytest.mark.asyncio
async def test_upload_image_signs_request():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _ok(request)

    uploaded = await _uploader(handler).upload_image(IMAGE, CONFIG)

    assert uploaded.public_id == "abc123"
    assert uploaded.version == 1700000000
    request = seen[0]
    assert request.url.path == "/v1_1/demo/image/upload"
    form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
    assert form["file"] == IMAGE
    assert form["api_key"] == "1234"
    assert form["signature"] == sign_params({"timestamp": form["timestamp"]}, "s3cret")
    assert "api_secret" not in form


@pytest.mark.asyncio
async def test_upload_image_error_raises_upload_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "Invalid image file"}})

    with pytest.raises(UploadError) as exc_info:
        await _uploader(handler).upload_image(IMAGE, CONFIG)

    assert exc_info.value.message == "Invalid image file"


@pytest.mark.asyncio
async def test_upload_image_network_error_raises_upload_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(UploadError):
        await _uploader(handler).upload_image(IMAGE, CONFIG)


# =============================================================================
# Endpoint
# =============================================================================

@pytest.fixture
def cloudinary_configured(db, member):
    config = member.org.config
    config.cloudinary_cloud_name = CONFIG.cloud_name
    config.cloudinary_api_key = CONFIG.api_key
    config.cloudinary_api_secret = CONFIG.api_secret
    db.commit()
    return config


@pytest.mark.asyncio
async def test_upload_endpoint_returns_cdn_metadata(client: AsyncClient, member, cloudinary_configured):
    app.dependency_overrides[get_image_uploader] = lambda: _uploader(_ok)

    res = await client.post(
        "/api/image",
        json={"organizationId": member.org.id, "image": IMAGE},
        headers=member.headers,
    )

    assert res.status_code == 200
    assert res.json() == {
        "public_id": "abc123",
        "format": "png",
        "version": 1700000000,
        "secure_url": "https://res.cloudinary.com/demo/image/upload/abc123.png",
    }


@pytest.mark.asyncio
async def test_upload_endpoint_reports_upstream_failure(client: AsyncClient, member, cloudinary_configured):
    app.dependency_overrides[get_image_uploader] = lambda: _uploader(
        lambda request: httpx.Response(500, text="oops")
    )

    res = await client.post(
        "/api/image",
        json={"organizationId": member.org.id, "image": IMAGE},
        headers=member.headers,
    )

    assert res.status_code == 502
    assert res.json() == {"error": "Image upload failed (500)"}


@pytest.mark.asyncio
async def test_upload_endpoint_without_credentials(client: AsyncClient, member):
    app.dependency_overrides[get_image_uploader] = lambda: _uploader(_ok)

    res = await client.post(
        "/api/image",
        json={"organizationId": member.org.id, "image": IMAGE},
        headers=member.headers,
    )

    assert res.status_code == 500
    assert res.json() == {"error": "Image uploads are not configured"}


@pytest.mark.asyncio
async def test_upload_endpoint_requires_session(client: AsyncClient, test_org):
    res = await client.post("/api/image", json={"organizationId": test_org.id, "image": IMAGE})

    assert res.status_code == 401


def test_cloudinary_secret_is_encrypted_at_rest(db, cloudinary_configured):
    stored = db.execute(
        text("SELECT cloudinary_api_secret FROM squeak_config WHERE id = :id"),
        {"id": cloudinary_configured.id},
    ).scalar_one()

    assert stored.startswith("enc:")
    assert "s3cret" not in stored
