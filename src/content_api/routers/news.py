from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Path,
    Request,
    UploadFile,
    status
)
from starlette.concurrency import run_in_threadpool
from typing import List, Optional

from content_api.config.settings import Settings
from content_api.dependencies import get_news_service, get_settings_from_app, optional_role, require_admin
from content_api.responses import image_url, stream_image
from content_api.schemas import (
    ImageItemCreatedResponse,
    ImageItemUpdatedResponse,
    ItemDeletedResponse,
    NewsItemResponse,
)
from content_api.services import NewsService
from content_api.uploads import read_image_upload, submitted_text

router = APIRouter(prefix="/news")


def to_response(item: dict, settings: Settings) -> NewsItemResponse:
    return NewsItemResponse(image_url=image_url(settings, "news", item.get("image_id")), **item)


@router.get("", response_model=List[NewsItemResponse])
def list_news(
    role: Optional[str] = Depends(optional_role),
    service: NewsService = Depends(get_news_service),
    settings: Settings = Depends(get_settings_from_app),
):
    """
    List news items, newest first.

    Anonymous callers only see published items; an admin token shows drafts too.
    """
    items = service.list_items(include_unpublished=role is not None)
    return [to_response(item, settings) for item in items]


@router.get("/image/{image_id}")
def get_news_image(
    request: Request,
    image_id: str = Path(..., description="Blob id of the stored image"),
    service: NewsService = Depends(get_news_service),
):
    return stream_image(request, service.get_image(image_id))


@router.get("/{item_id}", response_model=NewsItemResponse)
def get_news_item(
    item_id: str,
    role: Optional[str] = Depends(optional_role),
    service: NewsService = Depends(get_news_service),
    settings: Settings = Depends(get_settings_from_app),
):
    item = service.get_item(item_id, include_unpublished=role is not None)
    return to_response(item, settings)


@router.post("", response_model=ImageItemCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_news_item(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    published: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    _role: str = Depends(require_admin),
    service: NewsService = Depends(get_news_service),
    settings: Settings = Depends(get_settings_from_app),
):
    upload = read_image_upload(image, settings)
    item = service.create_item(
        title=title,
        content=content,
        excerpt=excerpt,
        author=author,
        published=published,
        image=upload,
    )
    return ImageItemCreatedResponse(
        id=item["id"],
        message="News created successfully",
        image_url=image_url(settings, "news", item["image_id"]),
    )


@router.put("/{item_id}", response_model=ImageItemUpdatedResponse)
async def update_news_item(
    request: Request,
    item_id: str,
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    excerpt: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    published: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    _role: str = Depends(require_admin),
    service: NewsService = Depends(get_news_service),
    settings: Settings = Depends(get_settings_from_app),
):
    excerpt = await submitted_text(request, "excerpt", excerpt)
    upload = await run_in_threadpool(read_image_upload, image, settings)
    item = await run_in_threadpool(
        service.update_item,
        item_id,
        title=title,
        content=content,
        excerpt=excerpt,
        author=author,
        published=published,
        image=upload,
    )
    return ImageItemUpdatedResponse(
        id=item["id"],
        message="News updated successfully",
        image_url=image_url(settings, "news", item.get("image_id")),
    )


@router.delete("/{item_id}", response_model=ItemDeletedResponse)
def delete_news_item(
    item_id: str,
    _role: str = Depends(require_admin),
    service: NewsService = Depends(get_news_service),
):
    service.delete_item(item_id)
    return ItemDeletedResponse(message="News deleted successfully")
