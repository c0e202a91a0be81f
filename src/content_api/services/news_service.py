"""
News service: articles with an optional image and a published flag that
hides drafts from unauthenticated readers.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from database.blob_store import BlobStream
from database.schemas import DEFAULT_NEWS_AUTHOR, NEWS
from content_api.errors import Forbidden, NotFound, ValidationError
from content_api.services.images import discard_image, open_image, store_image
from content_api.uploads import ImageUpload
from content_api.utils.decorators import log_bulk_operation

logger = logging.getLogger(__name__)


def parse_published(value: Union[bool, str, None]) -> bool:
    """Form and JSON bodies send the flag as a bool or the string "true"."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


class NewsService:
    """Service for managing news items"""

    def __init__(self, records, blobs):
        self.records = records
        self.blobs = blobs

    def list_items(self, include_unpublished: bool = False) -> List[Dict[str, Any]]:
        query = {} if include_unpublished else {"published": True}
        return self.records.query_documents(NEWS, query)

    def get_item(self, item_id: str, include_unpublished: bool = True) -> Dict[str, Any]:
        item = self.records.get_document(NEWS, item_id)
        if item is None:
            raise NotFound("News item not found")
        if not item.get("published") and not include_unpublished:
            raise Forbidden("This news item is not published")
        return item

    def get_image(self, blob_id: str) -> BlobStream:
        return open_image(self.blobs, blob_id)

    def create_item(self, title: Optional[str], content: Optional[str], excerpt: Optional[str] = None,
                    author: Optional[str] = None, published: Union[bool, str, None] = None,
                    image: Optional[ImageUpload] = None) -> Dict[str, Any]:
        if not title or not content:
            raise ValidationError("Title and content are required")

        image_id = store_image(self.blobs, image) if image is not None else None
        now = datetime.now(timezone.utc)
        document = {
            "title": title,
            "content": content,
            "excerpt": excerpt or "",
            "image_id": image_id,
            "image_filename": image.filename if image is not None else None,
            "author": author or DEFAULT_NEWS_AUTHOR,
            "published": parse_published(published),
            "created_at": now,
            "updated_at": now,
        }
        item_id = self.records.create_document(NEWS, document)
        logger.info(f"Created news item {item_id}")
        return {"id": item_id, **document}

    def update_item(self, item_id: str, title: Optional[str] = None, content: Optional[str] = None,
                    excerpt: Optional[str] = None, author: Optional[str] = None,
                    published: Union[bool, str, None] = None,
                    image: Optional[ImageUpload] = None) -> Dict[str, Any]:
        item = self.get_item(item_id)
        patch: Dict[str, Any] = {}

        if image is not None:
            discard_image(self.blobs, item.get("image_id"))
            patch["image_id"] = store_image(self.blobs, image)
            patch["image_filename"] = image.filename

        if title:
            patch["title"] = title
        if content:
            patch["content"] = content
        if excerpt is not None:
            patch["excerpt"] = excerpt
        if author:
            patch["author"] = author
        if published is not None:
            patch["published"] = parse_published(published)

        if not self.records.update_document(NEWS, item_id, patch):
            raise NotFound("News item not found")
        return self.get_item(item_id)

    def delete_item(self, item_id: str) -> None:
        item = self.get_item(item_id)
        discard_image(self.blobs, item.get("image_id"))
        if not self.records.delete_document(NEWS, item_id):
            raise NotFound("News item not found")

    @log_bulk_operation
    def delete_all(self) -> int:
        for item in self.records.query_documents(NEWS):
            discard_image(self.blobs, item.get("image_id"))
        return self.records.delete_documents(NEWS)
