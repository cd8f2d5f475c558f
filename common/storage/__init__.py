"""
Storage module - Pluggable media storage providers (local disk, Cloudinary).
"""

from common.storage.base import MediaStorage, MediaUploadError, UploadResult
from common.storage.local import LocalMediaStorage
from common.storage.cloudinary import CloudinaryStorage

__all__ = [
    "MediaStorage",
    "MediaUploadError",
    "UploadResult",
    "LocalMediaStorage",
    "CloudinaryStorage",
]
