"""
Gallery service: image-backed gallery items.
Every item owns exactly one blob; the blob goes when the item goes.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from database.blob_store import BlobStream
from database.schemas import GALLERY
from content_api.errors import NotFound, ValidationError
from content_api.services.images import discard_image, open_image, store_image
from content_api.uploads import ImageUpload
from content_api.utils.decorators import log_bulk_operation

logger = logging.getLogger(__name__)


class GalleryService:
    """Service for managing gallery items and their images"""

    def __init__(self, records, blobs):
        self.records = records
        self.blobs = blobs

    def list_items(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        """All gallery items, newest first, optionally for one category"""
        query = {"category": category} if category else {}
        return self.records.query_documents(GALLERY, query)

    def get_item(self, item_id: str) -> Dict[str, Any]:
        item = self.records.get_document(GALLERY, item_id)
        if item is None:
            raise NotFound("Gallery item not found")
        return item

    def get_image(self, blob_id: str) -> BlobStream:
        return open_image(self.blobs, blob_id)

    def create_item(self, title: Optional[str], category: Optional[str],
                    image: Optional[ImageUpload], description: Optional[str] = None) -> Dict[str, Any]:
        """
        Store the image, then the record that references it.

        If the record insert fails after the upload succeeded the blob is left
        orphaned; nothing reconciles it.
        """
        if not title or not category or image is None:
            raise ValidationError("Title, category, and image are required")

        image_id = store_image(self.blobs, image)
        now = datetime.now(timezone.utc)
        document = {
            "title": title,
            "description": description or "",
            "category": category,
            "image_id": image_id,
            "image_filename": image.filename,
            "created_at": now,
            "updated_at": now,
        }
        item_id = self.records.create_document(GALLERY, document)
        logger.info(f"Created gallery item {item_id} with image {image_id}")
        return {"id": item_id, **document}

    def update_item(self, item_id: str, title: Optional[str] = None, description: Optional[str] = None,
                    category: Optional[str] = None, image: Optional[ImageUpload] = None) -> Dict[str, Any]:
        """Apply the supplied fields; a new image replaces the old blob."""
        item = self.get_item(item_id)
        patch: Dict[str, Any] = {}

        if image is not None:
            discard_image(self.blobs, item.get("image_id"))
            patch["image_id"] = store_image(self.blobs, image)
            patch["image_filename"] = image.filename

        if title:
            patch["title"] = title
        if description is not None:
            patch["description"] = description
        if category:
            patch["category"] = category

        if not self.records.update_document(GALLERY, item_id, patch):
            raise NotFound("Gallery item not found")
        return self.get_item(item_id)

    def delete_item(self, item_id: str) -> None:
        item = self.get_item(item_id)
        discard_image(self.blobs, item.get("image_id"))
        if not self.records.delete_document(GALLERY, item_id):
            raise NotFound("Gallery item not found")

    @log_bulk_operation
    def delete_all(self) -> int:
        """Wipe every gallery item; blob failures are logged and do not stop the wipe."""
        items = self.records.query_documents(GALLERY)
        failed = 0
        for item in items:
            if item.get("image_id") and not discard_image(self.blobs, item["image_id"]):
                failed += 1
        if failed:
            logger.warning(f"{failed} gallery images could not be deleted during cleanup")
        return self.records.delete_documents(GALLERY)

    def list_categories(self) -> List[str]:
        return self.records.distinct_values(GALLERY, "category")
