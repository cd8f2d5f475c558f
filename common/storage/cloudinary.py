"""
Cloudinary media storage.

Talks to the Cloudinary REST API with signed requests.

Example:
    storage = CloudinaryStorage(
        cloud_name="demo",
        api_key="1234",
        api_secret="secret",
        folder="avatars",
    )
    result = await storage.upload("/tmp/avatar.png")
    print(result.url)  # https://res.cloudinary.com/demo/image/upload/...
"""

import asyncio
import hashlib
import logging
import time
from pathlib import Path
from typing import Dict, Optional, Union

import httpx

from common.storage.base import MediaStorage, MediaUploadError, UploadResult

logger = logging.getLogger(__name__)


class CloudinaryStorage(MediaStorage):
    """Stores media in Cloudinary."""

    API_BASE_URL = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize Cloudinary storage.

        Args:
            cloud_name: Cloudinary cloud name
            api_key: API key
            api_secret: API secret used to sign requests
            folder: Optional folder for uploaded assets
            timeout: HTTP timeout in seconds
        """
        if not cloud_name or not api_key or not api_secret:
            raise ValueError("Cloudinary cloud name, API key and API secret are required")

        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._folder = folder
        self._timeout = timeout

    def _sign(self, params: Dict[str, str]) -> str:
        """
        Compute the request signature.

        Parameters are sorted by name, joined as key=value with '&',
        and the API secret is appended before hashing with SHA-1.
        """
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self._api_secret}".encode("utf-8")).hexdigest()

    def _signed_params(self, **params: str) -> Dict[str, str]:
        params = {k: v for k, v in params.items() if v}
        params["timestamp"] = str(int(time.time()))
        signed = dict(params)
        signed["signature"] = self._sign(params)
        signed["api_key"] = self._api_key
        return signed

    async def upload(self, local_path: Union[str, Path]) -> UploadResult:
        source = Path(local_path)
        if not source.is_file():
            raise MediaUploadError(f"File not found: {source.name}")

        content = await asyncio.to_thread(source.read_bytes)
        url = f"{self.API_BASE_URL}/{self._cloud_name}/auto/upload"
        data = self._signed_params(folder=self._folder or "")

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    url,
                    data=data,
                    files={"file": (source.name, content)},
                )
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload request failed: {e}")
            raise MediaUploadError("Media upload failed") from e

        if response.status_code != 200:
            try:
                message = response.json().get("error", {}).get("message", "Unknown error")
            except ValueError:
                message = response.text or "Unknown error"
            logger.error(f"Cloudinary upload rejected ({response.status_code}): {message}")
            raise MediaUploadError(f"Media upload failed: {message}")

        body = response.json()
        logger.info(f"Uploaded media to Cloudinary: {body.get('public_id')}")
        return UploadResult(url=body["secure_url"], public_id=body["public_id"])

    async def delete(self, public_id: str) -> None:
        url = f"{self.API_BASE_URL}/{self._cloud_name}/image/destroy"
        data = self._signed_params(public_id=public_id)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(url, data=data)
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary destroy request failed: {e}")
            raise MediaUploadError("Media delete failed") from e

        if response.status_code != 200:
            raise MediaUploadError(f"Media delete failed with status {response.status_code}")

        logger.info(f"Deleted media from Cloudinary: {public_id}")
