"""
Abstract media storage interface.

Defines the contract that media storage providers must implement.
This allows swapping between local disk and hosted object storage
without changing application code.

Example:
    from common.storage import MediaStorage, LocalMediaStorage, CloudinaryStorage

    def get_media_storage(settings) -> MediaStorage:
        if settings.MEDIA_PROVIDER == "cloudinary":
            return CloudinaryStorage(
                cloud_name=settings.CLOUDINARY_CLOUD_NAME,
                api_key=settings.CLOUDINARY_API_KEY,
                api_secret=settings.CLOUDINARY_API_SECRET,
            )
        return LocalMediaStorage(root_dir=settings.MEDIA_ROOT)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Union


class MediaUploadError(Exception):
    """Raised when a file cannot be stored or removed."""


@dataclass(frozen=True)
class UploadResult:
    """Location of a stored media object."""

    url: str
    public_id: str


class MediaStorage(ABC):
    """
    Abstract media storage provider.

    Uploads read from a local file path; the caller owns that file and
    removes it afterwards.
    """

    @abstractmethod
    async def upload(self, local_path: Union[str, Path]) -> UploadResult:
        """
        Store a local file.

        Args:
            local_path: Path of the file to upload

        Returns:
            UploadResult with the public URL and provider id

        Raises:
            MediaUploadError: If the file is missing or the provider rejects it
        """
        pass

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """
        Remove a previously stored object.

        Args:
            public_id: Provider id returned by upload()

        Raises:
            MediaUploadError: If the provider rejects the request
        """
        pass
