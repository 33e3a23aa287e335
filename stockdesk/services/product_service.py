from __future__ import annotations

from typing import Any

from stockdesk.client.protocol import DataClient
from stockdesk.core.logging import get_logger
from stockdesk.domain import tables
from stockdesk.domain.records import parse_record
from stockdesk.schemas.common import NOT_FOUND_CODE
from stockdesk.schemas.product import Product, ProductCreate, ProductFilters, ProductUpdate
from stockdesk.services.errors import raise_for_error
from stockdesk.services.exceptions import DomainValidationError

logger = get_logger(__name__)

PRODUCT_COLUMNS = "*, categories:category_id(id, name)"


# ---------------- Utils ----------------
def _with_category_name(row: dict[str, Any]) -> dict[str, Any]:
    if "categories" not in row:
        # no embed selected; leave whatever the row carries
        return row
    category = row.get("categories") or {}
    return {**row, "category_name": category.get("name") or row.get("category_name") or tables.UNCATEGORIZED}


def _to_product(row: dict[str, Any]) -> Product:
    return parse_record(Product, _with_category_name(row))


# ---------------- Reads ----------------
async def list_products(client: DataClient, filters: ProductFilters) -> list[Product]:
    logger.debug("list_products", extra={"filters": filters.model_dump()})
    query = client.from_(tables.PRODUCTS).select(PRODUCT_COLUMNS).eq("project_id", filters.project_id)

    if filters.category_id:
        query = query.eq("category_id", filters.category_id)
    if filters.search_term:
        term = filters.search_term.strip()
        query = query.or_(f"name.ilike.%{term}%,code.ilike.%{term}%")
    if not filters.show_zero_stock:
        query = query.gt("stock_quantity", 0)
    if filters.min_stock is not None:
        query = query.gte("stock_quantity", filters.min_stock)

    rows = raise_for_error(
        await query.order("name").execute(),
        fallback_code="PRODUCT_FETCH_ERROR",
        operation="list_products",
    )
    products = [_to_product(row) for row in rows or []]
    logger.debug("list_products fetched %d products", len(products))
    return products


async def get_product(client: DataClient, product_id: int, project_id: int) -> Product | None:
    result = await (
        client.from_(tables.PRODUCTS)
        .select(PRODUCT_COLUMNS)
        .eq("id", product_id)
        .eq("project_id", project_id)
        .single()
    )
    if result.error is not None and result.error.code == NOT_FOUND_CODE:
        return None
    row = raise_for_error(result, fallback_code="PRODUCT_FETCH_ERROR", operation="get_product")
    return _to_product(row)


async def list_low_stock(client: DataClient, project_id: int) -> list[Product]:
    """Products whose stock is at or below their own ``min_stock_level``.

    PostgREST cannot compare two columns of a row, so the comparison runs here.
    """
    rows = raise_for_error(
        await (
            client.from_(tables.PRODUCTS)
            .select(PRODUCT_COLUMNS)
            .eq("project_id", project_id)
            .order("stock_quantity")
            .execute()
        ),
        fallback_code="PRODUCT_FETCH_ERROR",
        operation="list_low_stock",
    )
    products = [_to_product(row) for row in rows or []]
    low = [product for product in products if product.stock_quantity <= product.min_stock_level]
    return sorted(low, key=lambda product: product.stock_quantity)


async def code_exists(client: DataClient, code: str, project_id: int, exclude_id: int | None = None) -> bool:
    query = client.from_(tables.PRODUCTS).select("id").eq("code", code).eq("project_id", project_id)
    if exclude_id:
        query = query.neq("id", exclude_id)
    result = await query.execute()
    if result.error is not None:
        logger.error("code_exists failed: %s", result.error.message, extra={"code": result.error.code})
        return False
    return bool(result.data)


# ---------------- Mutations ----------------
async def create_product(client: DataClient, payload: ProductCreate) -> Product:
    data = payload.model_dump(mode="json", exclude_none=True)
    row = raise_for_error(
        await client.from_(tables.PRODUCTS).insert([data]).select(PRODUCT_COLUMNS).single(),
        fallback_code="PRODUCT_CREATE_ERROR",
        operation="create_product",
    )
    product = _to_product(row)
    logger.info("Created product %s", product.id, extra={"project_id": payload.project_id})
    return product


async def update_product(client: DataClient, product_id: int, payload: ProductUpdate) -> Product:
    changes = payload.model_dump(mode="json", exclude_unset=True)
    if not changes:
        raise DomainValidationError("No fields to update")
    row = raise_for_error(
        await (
            client.from_(tables.PRODUCTS)
            .update(changes)
            .eq("id", product_id)
            .select(PRODUCT_COLUMNS)
            .single()
        ),
        fallback_code="PRODUCT_UPDATE_ERROR",
        operation="update_product",
    )
    logger.info("Updated product %s", product_id, extra={"fields": sorted(changes)})
    return _to_product(row)


async def update_stock(client: DataClient, product_id: int, project_id: int, new_quantity: int) -> Product:
    row = raise_for_error(
        await (
            client.from_(tables.PRODUCTS)
            .update({"stock_quantity": new_quantity})
            .eq("id", product_id)
            .eq("project_id", project_id)
            .select(PRODUCT_COLUMNS)
            .single()
        ),
        fallback_code="PRODUCT_STOCK_UPDATE_ERROR",
        operation="update_stock",
    )
    logger.info("Stock for product %s set to %s", product_id, new_quantity)
    return _to_product(row)


async def delete_product(client: DataClient, product_id: int, project_id: int) -> None:
    raise_for_error(
        await client.from_(tables.PRODUCTS).delete().eq("id", product_id).eq("project_id", project_id).execute(),
        fallback_code="PRODUCT_DELETE_ERROR",
        operation="delete_product",
    )
    logger.info("Deleted product %s", product_id)

