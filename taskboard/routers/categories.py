"""Category router."""
from typing import List

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from taskboard.middleware.auth import CurrentUser, get_current_user
from taskboard.routers.deps import get_category_service
from taskboard.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from taskboard.schemas.task import DeleteResponse
from taskboard.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    """Get all categories for the current user, sorted by name."""
    return await run_in_threadpool(service.list_categories, current_user.user_id)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    return await run_in_threadpool(
        service.create_category,
        current_user.user_id,
        category_data.name,
        category_data.color
    )


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    category_data: CategoryUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    return await run_in_threadpool(
        service.update_category,
        category_id,
        current_user.user_id,
        category_data.name,
        category_data.color
    )


@router.delete("/{category_id}", response_model=DeleteResponse)
async def delete_category(
    category_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: CategoryService = Depends(get_category_service),
):
    """Delete a category; its tasks are kept with the category cleared."""
    deleted_id = await run_in_threadpool(service.delete_category, category_id, current_user.user_id)
    return DeleteResponse(message="Category deleted successfully", id=deleted_id)
