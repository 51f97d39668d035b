"""
Asset Storage

Uploads cover images to bucket-style object storage (storage REST API of the
hosted backend) and returns their public URLs. Object keys are random so an
upload never overwrites an existing object.
"""

import logging
import mimetypes
import os
import uuid
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class AssetUploadError(Exception):
    """Raised when the storage service rejects or fails an upload"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


@dataclass
class ImageFile:
    """Binary image chosen by the admin"""
    filename: str
    content: bytes
    content_type: Optional[str] = None


def random_object_name(filename: str) -> str:
    """Random key that keeps the original file extension."""
    _, ext = os.path.splitext(filename or "")
    ext = ext.lower().lstrip(".")
    name = uuid.uuid4().hex
    return f"{name}.{ext}" if ext else name


class AssetStorage:
    """Object storage client for project images"""

    def __init__(
        self,
        base_url: str,
        bucket: str,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket
        self.api_key = api_key
        self._transport = transport
        self._timeout = timeout

    def _headers(self, content_type: str) -> dict:
        headers = {
            "Content-Type": content_type,
            "x-upsert": "false",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        return headers

    def public_url(self, object_name: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{object_name}"

    async def upload_image(self, image: ImageFile) -> str:
        """
        Store an image under a fresh random name

        Args:
            image: The file to upload

        Returns:
            Public URL of the stored object
        """
        object_name = random_object_name(image.filename)
        content_type = (
            image.content_type
            or mimetypes.guess_type(image.filename or "")[0]
            or "application/octet-stream"
        )

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    f"{self.base_url}/storage/v1/object/{self.bucket}/{object_name}",
                    headers=self._headers(content_type),
                    content=image.content,
                )
        except httpx.HTTPError as e:
            logger.error("Image upload failed for %s: %s", image.filename, e)
            raise AssetUploadError(f"Image upload failed: {e}") from e

        if response.status_code >= 400:
            logger.error("Storage rejected %s: %s %s", object_name, response.status_code, response.text)
            raise AssetUploadError(
                f"Image upload failed: {response.status_code}",
                status_code=response.status_code,
            )

        url = self.public_url(object_name)
        logger.info("Uploaded image %s", url)
        return url
