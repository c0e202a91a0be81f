"""
JSON schemas for content document validation.
This module defines schemas for validating documents in the gallery, news and careers collections.
"""

from typing import Dict, Any
from datetime import datetime
from enum import Enum
import jsonschema


GALLERY = 'gallery'
NEWS = 'news'
CAREERS = 'careers'

COLLECTIONS = (GALLERY, NEWS, CAREERS)


class CareerType(str, Enum):
    """Enumeration for career employment types"""
    FULL_TIME = 'Full-time'
    PART_TIME = 'Part-time'
    CONTRACT = 'Contract'
    INTERNSHIP = 'Internship'


DEFAULT_NEWS_AUTHOR = "King Arthur Capital"

TIMESTAMP = {"type": "string", "format": "date-time"}
OBJECT_ID = {"type": "string", "pattern": "^[0-9a-f]{24}$"}


GALLERY_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "category": {"type": "string", "minLength": 1},
        "image_id": OBJECT_ID,
        "image_filename": {"type": "string", "minLength": 1},
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP
    },
    "required": ["title", "description", "category", "image_id", "image_filename", "created_at", "updated_at"],
    "additionalProperties": False
}

NEWS_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "content": {"type": "string", "minLength": 1},
        "excerpt": {"type": "string"},
        "image_id": {"anyOf": [OBJECT_ID, {"type": "null"}]},
        "image_filename": {"type": ["string", "null"]},
        "author": {"type": "string"},
        "published": {"type": "boolean"},
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP
    },
    "required": ["title", "content", "excerpt", "image_id", "image_filename", "author", "published",
                 "created_at", "updated_at"],
    "additionalProperties": False
}

CAREER_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "location": {"type": "string", "minLength": 1},
        "type": {"type": "string", "enum": [t.value for t in CareerType]},
        "department": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "requirements": {"type": "array", "items": {"type": "string"}},
        "responsibilities": {"type": "array", "items": {"type": "string"}},
        "salary_range": {"type": "string"},
        "published": {"type": "boolean"},
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP
    },
    "required": ["title", "location", "type", "department", "description", "requirements",
                 "responsibilities", "salary_range", "published", "created_at", "updated_at"],
    "additionalProperties": False
}


# Schema mapping for easy access
DOCUMENT_SCHEMAS = {
    GALLERY: GALLERY_JSON_SCHEMA,
    NEWS: NEWS_JSON_SCHEMA,
    CAREERS: CAREER_JSON_SCHEMA
}


def _jsonable(value: Any) -> Any:
    """Render datetimes as ISO strings so documents can be checked against the JSON schemas"""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value


def validate_document(collection: str, document: Dict[str, Any], partial: bool = False) -> None:
    """
    Validate a document against its collection schema.

    With ``partial=True`` only the supplied fields are checked, which is what
    a ``$set``-style patch needs.
    """
    schema = DOCUMENT_SCHEMAS[collection]
    if partial:
        schema = {key: value for key, value in schema.items() if key != "required"}
    jsonschema.validate(_jsonable(document), schema)


def validate_gallery_document(document: Dict[str, Any], partial: bool = False) -> None:
    """Validate a gallery document against the schema"""
    validate_document(GALLERY, document, partial)


def validate_news_document(document: Dict[str, Any], partial: bool = False) -> None:
    """Validate a news document against the schema"""
    validate_document(NEWS, document, partial)


def validate_career_document(document: Dict[str, Any], partial: bool = False) -> None:
    """Validate a career document against the schema"""
    validate_document(CAREERS, document, partial)


DOCUMENT_VALIDATORS = {
    GALLERY: validate_gallery_document,
    NEWS: validate_news_document,
    CAREERS: validate_career_document
}
