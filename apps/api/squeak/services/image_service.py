"""Image uploads to Cloudinary via its signed upload REST endpoint."""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from squeak.core.config import settings
from squeak.core.exceptions import ConfigMissingError, UploadError
from squeak.db.models import SqueakConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CloudinaryConfig:
    cloud_name: str
    api_key: str
    api_secret: str


@dataclass(frozen=True)
class UploadedImage:
    public_id: str
    format: str
    version: int
    secure_url: str | None = None


def cloudinary_config_for(config: SqueakConfig) -> CloudinaryConfig:
    """
    Raises:
        ConfigMissingError: Organization has no Cloudinary credentials
    """
    if not (
        config.cloudinary_cloud_name
        and config.cloudinary_api_key
        and config.cloudinary_api_secret
    ):
        raise ConfigMissingError("Image uploads are not configured")
    return CloudinaryConfig(
        cloud_name=config.cloudinary_cloud_name,
        api_key=config.cloudinary_api_key,
        api_secret=config.cloudinary_api_secret,
    )


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """Cloudinary request signature: sorted ``k=v`` pairs joined by ``&`` plus the secret, SHA-1."""
    to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryUploader:
    def __init__(self, http_client: httpx.AsyncClient, base_url: str | None = None):
        self.http_client = http_client
        self.base_url = (base_url or settings.CLOUDINARY_API_BASE_URL).rstrip("/")

    async def upload_image(self, image: str, config: CloudinaryConfig) -> UploadedImage:
        """
        Upload an image given as a data URI or a remote URL.

        Raises:
            UploadError: Cloudinary rejected the upload or was unreachable
        """
        params = {"timestamp": int(time.time())}
        form = {
            "file": image,
            "api_key": config.api_key,
            "timestamp": str(params["timestamp"]),
            "signature": sign_params(params, config.api_secret),
        }
        url = f"{self.base_url}/{config.cloud_name}/image/upload"
        try:
            response = await self.http_client.post(url, data=form)
        except httpx.RequestError as e:
            logger.error("Cloudinary upload request failed (%s)", type(e).__name__)
            raise UploadError() from e

        if response.status_code >= 400:
            raise UploadError(_error_message(response))

        data = response.json()
        return UploadedImage(
            public_id=data["public_id"],
            format=data["format"],
            version=int(data["version"]),
            secure_url=data.get("secure_url"),
        )


def _error_message(response: httpx.Response) -> str:
    try:
        error = response.json().get("error")
    except ValueError:
        error = None
    message = error.get("message") if isinstance(error, dict) else error
    return message or f"Image upload failed ({response.status_code})"
