from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Path,
    Query,
    Request,
    UploadFile,
    status
)
from starlette.concurrency import run_in_threadpool
from typing import List, Optional

from content_api.config.settings import Settings
from content_api.dependencies import get_gallery_service, get_settings_from_app, require_admin
from content_api.responses import image_url, stream_image
from content_api.schemas import (
    CleanupResponse,
    GalleryItemResponse,
    ImageItemCreatedResponse,
    ImageItemUpdatedResponse,
    ItemDeletedResponse,
)
from content_api.services import GalleryService
from content_api.uploads import read_image_upload, submitted_text

router = APIRouter(prefix="/gallery")


def to_response(item: dict, settings: Settings) -> GalleryItemResponse:
    return GalleryItemResponse(image_url=image_url(settings, "gallery", item["image_id"]), **item)


@router.get("", response_model=List[GalleryItemResponse])
def list_gallery(
    category: Optional[str] = Query(None, description="Only items in this category"),
    service: GalleryService = Depends(get_gallery_service),
    settings: Settings = Depends(get_settings_from_app),
):
    """List gallery items, newest first."""
    return [to_response(item, settings) for item in service.list_items(category)]


@router.get("/meta/categories", response_model=List[str])
def list_categories(service: GalleryService = Depends(get_gallery_service)):
    return service.list_categories()


@router.get("/image/{image_id}")
def get_gallery_image(
    request: Request,
    image_id: str = Path(..., description="Blob id of the stored image"),
    service: GalleryService = Depends(get_gallery_service),
):
    return stream_image(request, service.get_image(image_id))


@router.get("/{item_id}", response_model=GalleryItemResponse)
def get_gallery_item(
    item_id: str,
    service: GalleryService = Depends(get_gallery_service),
    settings: Settings = Depends(get_settings_from_app),
):
    return to_response(service.get_item(item_id), settings)


@router.post("", response_model=ImageItemCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_gallery_item(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    _role: str = Depends(require_admin),
    service: GalleryService = Depends(get_gallery_service),
    settings: Settings = Depends(get_settings_from_app),
):
    """
    Create a gallery item from a multipart form.

    Title, category and image are required; the request is rejected before
    anything is stored when one of them is missing.
    """
    upload = read_image_upload(image, settings)
    item = service.create_item(title=title, category=category, image=upload, description=description)
    return ImageItemCreatedResponse(
        id=item["id"],
        message="Gallery item created successfully",
        image_url=image_url(settings, "gallery", item["image_id"]),
    )


@router.put("/{item_id}", response_model=ImageItemUpdatedResponse)
async def update_gallery_item(
    request: Request,
    item_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    _role: str = Depends(require_admin),
    service: GalleryService = Depends(get_gallery_service),
    settings: Settings = Depends(get_settings_from_app),
):
    """Partial update; an empty description clears it, empty title or category is ignored."""
    description = await submitted_text(request, "description", description)
    upload = await run_in_threadpool(read_image_upload, image, settings)
    item = await run_in_threadpool(
        service.update_item, item_id, title=title, description=description, category=category, image=upload
    )
    return ImageItemUpdatedResponse(
        id=item["id"],
        message="Gallery item updated successfully",
        image_url=image_url(settings, "gallery", item["image_id"]),
    )


# Declared before /{item_id} so "cleanup" is never taken for an id
@router.delete("/cleanup/all", response_model=CleanupResponse)
def cleanup_gallery(
    _role: str = Depends(require_admin),
    service: GalleryService = Depends(get_gallery_service),
):
    """Delete every gallery item and its image."""
    deleted = service.delete_all()
    return CleanupResponse(message=f"Deleted {deleted} gallery items", deleted_count=deleted)


@router.delete("/{item_id}", response_model=ItemDeletedResponse)
def delete_gallery_item(
    item_id: str,
    _role: str = Depends(require_admin),
    service: GalleryService = Depends(get_gallery_service),
):
    service.delete_item(item_id)
    return ItemDeletedResponse(message="Gallery item deleted successfully")
