"""Reading image uploads from multipart requests."""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Optional

from fastapi import Request, UploadFile

from content_api.config.settings import Settings
from content_api.errors import PayloadTooLarge, ValidationError


@dataclass
class ImageUpload:
    data: bytes
    filename: str
    content_type: str


async def submitted_text(request: Request, name: str, value: Optional[str]) -> Optional[str]:
    """Form() reads an empty field as absent; keep an explicitly submitted empty string."""
    if value is None and (await request.form()).get(name) == "":
        return ""
    return value


def read_image_upload(upload: Optional[UploadFile], settings: Settings) -> Optional[ImageUpload]:
    """
    Buffer an uploaded image after checking its type and size.

    Returns None when the request carried no file. The multipart parser has
    already spooled the body; reading one byte past the limit is enough to tell
    an oversized upload apart without copying it into memory. Reads block, so
    async handlers call this through a threadpool.
    """
    if upload is None or not upload.filename:
        return None

    content_type = (upload.content_type or "").lower()
    if content_type not in settings.allowed_mime_type_list:
        raise ValidationError("Only image files are allowed (jpeg, jpg, png, gif, webp)")

    data = upload.file.read(settings.max_file_size + 1)
    if len(data) > settings.max_file_size:
        raise PayloadTooLarge(f"File too large. Maximum size is {settings.max_file_size} bytes")
    if not data:
        raise ValidationError("Uploaded image is empty")

    return ImageUpload(
        data=data,
        filename=PurePath(upload.filename).name,
        content_type=content_type,
    )
