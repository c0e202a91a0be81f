"""Career service: job postings with the same published gate as news."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from database.schemas import CAREERS, CareerType
from content_api.errors import Forbidden, NotFound, ValidationError
from content_api.services.news_service import parse_published

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "location", "type", "department")
TEXT_FIELDS = ("title", "location", "department", "description", "salary_range")
LIST_FIELDS = ("requirements", "responsibilities")


def _validate_type(value: str) -> str:
    try:
        return CareerType(value).value
    except ValueError:
        allowed = ", ".join(t.value for t in CareerType)
        raise ValidationError(f"Type must be one of: {allowed}")


class CareerService:
    """Service for managing career postings"""

    def __init__(self, records):
        self.records = records

    def list_items(self, include_unpublished: bool = False) -> List[Dict[str, Any]]:
        query = {} if include_unpublished else {"published": True}
        return self.records.query_documents(CAREERS, query)

    def get_item(self, item_id: str, include_unpublished: bool = True) -> Dict[str, Any]:
        item = self.records.get_document(CAREERS, item_id)
        if item is None:
            raise NotFound("Career not found")
        if not item.get("published") and not include_unpublished:
            raise Forbidden("This career is not published")
        return item

    def create_item(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        if any(not fields.get(name) for name in REQUIRED_FIELDS):
            raise ValidationError("Title, location, type, and department are required")

        now = datetime.now(timezone.utc)
        document = {
            "title": fields["title"],
            "location": fields["location"],
            "type": _validate_type(fields["type"]),
            "department": fields["department"],
            "description": fields.get("description") or "",
            "requirements": list(fields.get("requirements") or []),
            "responsibilities": list(fields.get("responsibilities") or []),
            "salary_range": fields.get("salary_range") or "",
            "published": parse_published(fields.get("published")),
            "created_at": now,
            "updated_at": now,
        }
        item_id = self.records.create_document(CAREERS, document)
        logger.info(f"Created career {item_id}")
        return {"id": item_id, **document}

    def update_item(self, item_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Only the fields present in ``fields`` overwrite stored values."""
        self.get_item(item_id)
        patch: Dict[str, Any] = {}

        for name in TEXT_FIELDS:
            if name in fields and fields[name] is not None:
                if name in REQUIRED_FIELDS and not fields[name]:
                    raise ValidationError(f"{name.capitalize()} cannot be empty")
                patch[name] = fields[name]
        for name in LIST_FIELDS:
            if name in fields and fields[name] is not None:
                patch[name] = list(fields[name])
        if fields.get("type") is not None:
            patch["type"] = _validate_type(fields["type"])
        if fields.get("published") is not None:
            patch["published"] = parse_published(fields["published"])

        if not self.records.update_document(CAREERS, item_id, patch):
            raise NotFound("Career not found")
        return self.get_item(item_id)

    def delete_item(self, item_id: str) -> None:
        if not self.records.delete_document(CAREERS, item_id):
            raise NotFound("Career not found")
