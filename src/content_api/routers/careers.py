from fastapi import APIRouter, Depends, status
from typing import List, Optional

from content_api.dependencies import get_career_service, optional_role, require_admin
from content_api.schemas import (
    CareerItemResponse,
    CareerRequest,
    ItemCreatedResponse,
    ItemDeletedResponse,
    ItemUpdatedResponse,
)
from content_api.services import CareerService

router = APIRouter(prefix="/careers")


@router.get("", response_model=List[CareerItemResponse])
def list_careers(
    role: Optional[str] = Depends(optional_role),
    service: CareerService = Depends(get_career_service),
):
    """List career postings; drafts only with an admin token."""
    items = service.list_items(include_unpublished=role is not None)
    return [CareerItemResponse(**item) for item in items]


@router.get("/{item_id}", response_model=CareerItemResponse)
def get_career(
    item_id: str,
    role: Optional[str] = Depends(optional_role),
    service: CareerService = Depends(get_career_service),
):
    return CareerItemResponse(**service.get_item(item_id, include_unpublished=role is not None))


@router.post("", response_model=ItemCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_career(
    body: CareerRequest,
    _role: str = Depends(require_admin),
    service: CareerService = Depends(get_career_service),
):
    item = service.create_item(body.model_dump())
    return ItemCreatedResponse(id=item["id"], message="Career created successfully")


@router.put("/{item_id}", response_model=ItemUpdatedResponse)
def update_career(
    item_id: str,
    body: CareerRequest,
    _role: str = Depends(require_admin),
    service: CareerService = Depends(get_career_service),
):
    """Partial update: only the fields present in the body change."""
    item = service.update_item(item_id, body.model_dump(exclude_unset=True))
    return ItemUpdatedResponse(id=item["id"], message="Career updated successfully")


@router.delete("/{item_id}", response_model=ItemDeletedResponse)
def delete_career(
    item_id: str,
    _role: str = Depends(require_admin),
    service: CareerService = Depends(get_career_service),
):
    service.delete_item(item_id)
    return ItemDeletedResponse(message="Career deleted successfully")
