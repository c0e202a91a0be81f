"""Blob helpers shared by the services that own images."""

import logging
from typing import Optional

from database.blob_store import BlobNotFound, BlobStream
from content_api.errors import NotFound, StorageError
from content_api.uploads import ImageUpload

logger = logging.getLogger(__name__)


def store_image(blobs, image: ImageUpload) -> str:
    """Upload an image and return its blob id."""
    try:
        return blobs.put(image.data, image.filename, image.content_type)
    except Exception as e:
        logger.error(f"Error storing image {image.filename}: {e}")
        raise StorageError("Failed to store image") from e


def open_image(blobs, blob_id: str) -> BlobStream:
    try:
        return blobs.get(blob_id)
    except BlobNotFound:
        raise NotFound("Image not found in storage")


def discard_image(blobs, blob_id: Optional[str]) -> bool:
    """
    Best-effort blob removal: failures are logged and never raised, so the
    record-level operation that triggered it still succeeds.
    """
    if not blob_id:
        return False
    try:
        blobs.delete(blob_id)
        return True
    except Exception as e:
        logger.error(f"Error deleting image {blob_id}: {e}")
        return False
