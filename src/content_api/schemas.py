####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from database.schemas import DEFAULT_NEWS_AUTHOR


class LoginRequest(BaseModel):
    """Request model for `POST /auth/login`."""
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    message: str = "Login successful"


class VerifyResponse(BaseModel):
    valid: bool


class GalleryItemResponse(BaseModel):
    """A gallery item as returned by the API; `image_url` is derived, never stored."""
    id: str
    title: str
    description: str = ""
    category: str
    image_url: str
    image_id: str = Field(serialization_alias="imageId")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "665f1c2e9b1e8a3d4c5b6a79",
                "title": "Annual summit",
                "description": "Opening keynote",
                "category": "Events",
                "image_url": "/api/gallery/image/665f1c2e9b1e8a3d4c5b6a70",
                "imageId": "665f1c2e9b1e8a3d4c5b6a70",
                "created_at": "2024-06-04T10:00:00Z",
                "updated_at": "2024-06-04T10:00:00Z",
            }
        }
    )


class NewsItemResponse(BaseModel):
    id: str
    title: str
    content: str
    excerpt: str = ""
    image_url: Optional[str] = None
    image_id: Optional[str] = Field(default=None, serialization_alias="imageId")
    author: str = DEFAULT_NEWS_AUTHOR
    published: bool = False
    created_at: datetime
    updated_at: datetime


class CareerItemResponse(BaseModel):
    id: str
    title: str
    location: str
    type: str
    department: str
    description: str = ""
    requirements: List[str] = Field(default_factory=list)
    responsibilities: List[str] = Field(default_factory=list)
    salary_range: str = ""
    published: bool = False
    created_at: datetime
    updated_at: datetime


class CareerRequest(BaseModel):
    """
    Body of `POST /careers` and `PUT /careers/{id}`.

    Every field is optional at this layer: required fields are enforced by the
    service on create, and on update only the fields present in the body are applied.
    """
    title: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    department: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    salary_range: Optional[str] = None
    published: Optional[Union[bool, str]] = None


class ItemCreatedResponse(BaseModel):
    success: bool = True
    id: str
    message: str


class ImageItemCreatedResponse(ItemCreatedResponse):
    image_url: Optional[str] = None


class ItemUpdatedResponse(BaseModel):
    success: bool = True
    id: str
    message: str


class ImageItemUpdatedResponse(ItemUpdatedResponse):
    image_url: Optional[str] = None


class ItemDeletedResponse(BaseModel):
    success: bool = True
    message: str


class CleanupResponse(BaseModel):
    success: bool = True
    message: str
    deleted_count: int = Field(serialization_alias="deletedCount")
