"""
Multipart upload staging.

Incoming files are written to a temporary directory so storage providers
can read them by path. The staged copy is removed when the block exits,
whether or not the upload succeeded.
"""

import logging
import secrets
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Union

from fastapi import UploadFile

from common.utils.exceptions import PayloadTooLargeException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@asynccontextmanager
async def stage_upload(
    upload: Optional[UploadFile],
    temp_dir: Union[str, Path],
    max_bytes: int,
) -> AsyncIterator[Optional[Path]]:
    """
    Write an uploaded file to temp_dir for the duration of the block.

    Args:
        upload: File from the multipart form, or None when not sent
        temp_dir: Directory for staged files
        max_bytes: Maximum accepted file size

    Yields:
        Path of the staged file, or None if no file was sent

    Raises:
        PayloadTooLargeException: File exceeds max_bytes
    """
    if upload is None or not upload.filename:
        yield None
        return

    directory = Path(temp_dir)
    directory.mkdir(parents=True, exist_ok=True)

    suffix = Path(upload.filename).suffix.lower()
    staged = directory / f"{secrets.token_hex(16)}{suffix}"

    try:
        written = 0
        with staged.open("wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise PayloadTooLargeException(
                        message="Uploaded file too large",
                        max_bytes=max_bytes,
                    )
                out.write(chunk)

        logger.debug(f"Staged upload {upload.filename} ({written} bytes)")
        yield staged
    finally:
        staged.unlink(missing_ok=True)
