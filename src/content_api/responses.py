"""Response assembly shared by the content routers."""

from typing import Optional

from fastapi import Request
from fastapi.responses import StreamingResponse

from database.blob_store import BlobStream
from content_api.config.settings import Settings

DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


def image_url(settings: Settings, resource: str, image_id: Optional[str]) -> Optional[str]:
    """Public download path for a stored image, e.g. ``/api/gallery/image/<id>``."""
    if not image_id:
        return None
    return f"{settings.api_prefix}/{resource}/image/{image_id}"


def stream_image(request: Request, blob: BlobStream) -> StreamingResponse:
    """
    Stream an opened blob back to the client.

    The blob is already open, so a missing image has been reported as 404
    before any header is sent.
    """
    settings: Settings = request.app.state.settings
    headers = {
        "Cache-Control": f"public, max-age={settings.image_cache_max_age}",
        "Content-Length": str(blob.length),
    }
    return StreamingResponse(
        blob.chunks,
        media_type=blob.content_type or DEFAULT_IMAGE_CONTENT_TYPE,
        headers=headers,
    )
