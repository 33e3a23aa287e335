from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stockdesk.api.deps import get_client
from stockdesk.client.protocol import DataClient
from stockdesk.schemas.category import Category, CategoryCreate, CategoryUpdate, CategoryWithCount
from stockdesk.services import category_service
from stockdesk.services.exceptions import ConflictError

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[Category])
async def list_categories(project_id: int = Query(...), client: DataClient = Depends(get_client)):
    return await category_service.list_categories(client, project_id)


@router.get("/with-counts", response_model=list[CategoryWithCount])
async def list_with_counts(project_id: int = Query(...), client: DataClient = Depends(get_client)):
    return await category_service.list_with_product_count(client, project_id)


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: int, project_id: int = Query(...), client: DataClient = Depends(get_client)):
    category = await category_service.get_category(client, category_id, project_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, client: DataClient = Depends(get_client)):
    if await category_service.name_exists(client, payload.name, payload.project_id):
        raise ConflictError("Category name already exists")
    return await category_service.create_category(client, payload)


@router.put("/{category_id}", response_model=Category)
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    project_id: int = Query(...),
    client: DataClient = Depends(get_client),
):
    if await category_service.name_exists(client, payload.name, project_id, exclude_id=category_id):
        raise ConflictError("Category name already exists")
    return await category_service.update_category(client, category_id, payload)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, project_id: int = Query(...), client: DataClient = Depends(get_client)):
    await category_service.delete_category(client, category_id, project_id)
