"""
Local disk media storage.

Copies uploads into a public directory that the application serves as
static files. Intended for development and single-host deployments.

Example:
    storage = LocalMediaStorage(root_dir="public/uploads", base_url="/static/uploads")
    result = await storage.upload("/tmp/avatar.png")
    print(result.url)  # /static/uploads/3f2a....png
"""

import asyncio
import logging
import secrets
import shutil
from pathlib import Path
from typing import Union

from common.storage.base import MediaStorage, MediaUploadError, UploadResult

logger = logging.getLogger(__name__)


class LocalMediaStorage(MediaStorage):
    """Stores media files on the local filesystem."""

    def __init__(self, root_dir: Union[str, Path], base_url: str = "/static/uploads"):
        """
        Args:
            root_dir: Directory that receives uploaded files
            base_url: URL prefix under which root_dir is served
        """
        self._root = Path(root_dir)
        self._base_url = base_url.rstrip("/")
        self._root.mkdir(parents=True, exist_ok=True)

    async def upload(self, local_path: Union[str, Path]) -> UploadResult:
        source = Path(local_path)
        if not source.is_file():
            raise MediaUploadError(f"File not found: {source.name}")

        public_id = f"{secrets.token_hex(16)}{source.suffix.lower()}"
        target = self._root / public_id

        try:
            await asyncio.to_thread(shutil.copyfile, source, target)
        except OSError as e:
            logger.error(f"Failed to store media file {source.name}: {e}")
            raise MediaUploadError("Failed to store media file") from e

        logger.debug(f"Stored media file as {public_id}")
        return UploadResult(url=f"{self._base_url}/{public_id}", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        # public ids are bare file names; refuse anything that could escape root
        if Path(public_id).name != public_id:
            raise MediaUploadError("Invalid media id")
        try:
            (self._root / public_id).unlink(missing_ok=True)
        except OSError as e:
            raise MediaUploadError("Failed to delete media file") from e
        logger.debug(f"Deleted media file {public_id}")
