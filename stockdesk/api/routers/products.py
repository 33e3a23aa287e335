from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stockdesk.api.deps import get_client
from stockdesk.client.protocol import DataClient
from stockdesk.schemas.product import Product, ProductCreate, ProductFilters, ProductUpdate
from stockdesk.services import product_service
from stockdesk.services.exceptions import ConflictError

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[Product])
async def list_products(
    project_id: int = Query(...),
    category_id: int | None = Query(None),
    search: str | None = Query(None, max_length=100),
    min_stock: int | None = Query(None, ge=0),
    show_zero_stock: bool = Query(False),
    client: DataClient = Depends(get_client),
):
    filters = ProductFilters(
        project_id=project_id,
        category_id=category_id,
        search_term=search,
        min_stock=min_stock,
        show_zero_stock=show_zero_stock,
    )
    return await product_service.list_products(client, filters)


@router.get("/low-stock", response_model=list[Product])
async def low_stock(project_id: int = Query(...), client: DataClient = Depends(get_client)):
    return await product_service.list_low_stock(client, project_id)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: int, project_id: int = Query(...), client: DataClient = Depends(get_client)):
    product = await product_service.get_product(client, product_id, project_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductCreate, client: DataClient = Depends(get_client)):
    if payload.code and await product_service.code_exists(client, payload.code, payload.project_id):
        raise ConflictError("Product code already exists")
    return await product_service.create_product(client, payload)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    project_id: int = Query(...),
    client: DataClient = Depends(get_client),
):
    if payload.code and await product_service.code_exists(client, payload.code, project_id, exclude_id=product_id):
        raise ConflictError("Product code already exists")
    return await product_service.update_product(client, product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int, project_id: int = Query(...), client: DataClient = Depends(get_client)):
    await product_service.delete_product(client, product_id, project_id)
