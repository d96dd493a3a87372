"""Image hosting via the Cloudinary upload API."""

import hashlib
import logging
import time
from typing import Protocol

import httpx

from parcel_notify.exceptions import ImageUploadError

logger = logging.getLogger(__name__)

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"

DEFAULT_TIMEOUT = 30.0


class ImageUploader(Protocol):
    """Anything that can publish an image and return its public URL."""

    async def upload(self, content: bytes, filename: str, folder: str) -> str:
        ...


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Cloudinary request signature.

    Parameters are sorted by name, joined as key=value with '&', the API
    secret appended, and the result SHA-1 hashed.
    """
    payload = "&".join(f"{key}={params[key]}" for key in sorted(params))
    return hashlib.sha1(f"{payload}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryUploader:
    """Signed uploads to Cloudinary."""

    def __init__(
        self,
        cloud_name: str | None,
        api_key: str | None,
        api_secret: str | None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self._cloud_name and self._api_key and self._api_secret)

    async def upload(self, content: bytes, filename: str, folder: str) -> str:
        """Upload image bytes and return the secure URL.

        Raises:
            ImageUploadError: If not configured or the API call fails.
        """
        if not self.configured:
            raise ImageUploadError("Cloudinary credentials not configured")

        params = {"folder": folder, "timestamp": str(int(time.time()))}
        data = {
            **params,
            "api_key": self._api_key,
            "signature": sign_params(params, self._api_secret),
        }
        url = CLOUDINARY_UPLOAD_URL.format(cloud_name=self._cloud_name)

        logger.info(f"Uploading {filename} ({len(content)} bytes) to {folder}")
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    data=data,
                    files={"file": (filename, content)},
                )
        except httpx.TimeoutException as e:
            raise ImageUploadError("Image upload timed out") from e
        except httpx.HTTPError as e:
            raise ImageUploadError(f"Image upload failed: {e}") from e

        if response.status_code != 200:
            raise ImageUploadError(
                f"Cloudinary API error: {response.status_code}"
            )

        try:
            secure_url = response.json().get("secure_url")
        except (AttributeError, ValueError) as e:
            raise ImageUploadError("Cloudinary returned an invalid response") from e
        if not secure_url:
            raise ImageUploadError("Cloudinary response missing secure_url")

        logger.info(f"Image uploaded: {secure_url}")
        return secure_url
