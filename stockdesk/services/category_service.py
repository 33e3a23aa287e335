from __future__ import annotations

from typing import Any

from stockdesk.client.protocol import DataClient
from stockdesk.core.logging import get_logger
from stockdesk.domain import tables
from stockdesk.domain.records import parse_record, parse_records
from stockdesk.schemas.category import Category, CategoryCreate, CategoryUpdate, CategoryWithCount
from stockdesk.schemas.common import NOT_FOUND_CODE
from stockdesk.services.errors import raise_for_error
from stockdesk.services.exceptions import ConflictError

logger = get_logger(__name__)


def _product_count(row: dict[str, Any]) -> int:
    # embedded aggregate comes back as [{"count": n}]
    embedded = row.get("products") or []
    if isinstance(embedded, list) and embedded and isinstance(embedded[0], dict):
        return int(embedded[0].get("count") or 0)
    return 0


# ---------------- Reads ----------------
async def list_categories(client: DataClient, project_id: int) -> list[Category]:
    rows = raise_for_error(
        await client.from_(tables.CATEGORIES).select("*").eq("project_id", project_id).order("name").execute(),
        fallback_code="CATEGORY_FETCH_ERROR",
        operation="list_categories",
    )
    categories = parse_records(Category, rows)
    logger.debug("list_categories fetched %d categories", len(categories))
    return categories


async def get_category(client: DataClient, category_id: int, project_id: int) -> Category | None:
    result = await (
        client.from_(tables.CATEGORIES)
        .select("*")
        .eq("id", category_id)
        .eq("project_id", project_id)
        .single()
    )
    if result.error is not None and result.error.code == NOT_FOUND_CODE:
        return None
    return parse_record(Category, raise_for_error(result, fallback_code="CATEGORY_FETCH_ERROR", operation="get_category"))


async def list_with_product_count(client: DataClient, project_id: int) -> list[CategoryWithCount]:
    rows = raise_for_error(
        await (
            client.from_(tables.CATEGORIES)
            .select("*, products:products(count)")
            .eq("project_id", project_id)
            .order("name")
            .execute()
        ),
        fallback_code="CATEGORY_FETCH_ERROR",
        operation="list_with_product_count",
    )
    return [
        parse_record(CategoryWithCount, {**row, "product_count": _product_count(row)})
        for row in rows or []
    ]


async def name_exists(client: DataClient, name: str, project_id: int, exclude_id: int | None = None) -> bool:
    query = client.from_(tables.CATEGORIES).select("id").eq("name", name).eq("project_id", project_id)
    if exclude_id:
        query = query.neq("id", exclude_id)
    result = await query.execute()
    if result.error is not None:
        logger.error("name_exists failed: %s", result.error.message, extra={"code": result.error.code})
        return False
    return bool(result.data)


# ---------------- Mutations ----------------
async def create_category(client: DataClient, payload: CategoryCreate) -> Category:
    row = raise_for_error(
        await client.from_(tables.CATEGORIES).insert([payload.model_dump()]).select().single(),
        fallback_code="CATEGORY_CREATE_ERROR",
        operation="create_category",
    )
    category = parse_record(Category, row)
    logger.info("Created category %s", category.id, extra={"project_id": payload.project_id})
    return category


async def update_category(client: DataClient, category_id: int, payload: CategoryUpdate) -> Category:
    row = raise_for_error(
        await (
            client.from_(tables.CATEGORIES)
            .update(payload.model_dump(exclude_unset=True))
            .eq("id", category_id)
            .select()
            .single()
        ),
        fallback_code="CATEGORY_UPDATE_ERROR",
        operation="update_category",
    )
    logger.info("Updated category %s", category_id)
    return parse_record(Category, row)


async def delete_category(client: DataClient, category_id: int, project_id: int) -> None:
    products = raise_for_error(
        await (
            client.from_(tables.PRODUCTS)
            .select("id")
            .eq("category_id", category_id)
            .eq("project_id", project_id)
            .limit(1)
            .execute()
        ),
        fallback_code="CATEGORY_CHECK_ERROR",
        operation="delete_category",
    )
    if products:
        raise ConflictError("Category still has products. Delete them or move them to another category first.")

    raise_for_error(
        await client.from_(tables.CATEGORIES).delete().eq("id", category_id).eq("project_id", project_id).execute(),
        fallback_code="CATEGORY_DELETE_ERROR",
        operation="delete_category",
    )
    logger.info("Deleted category %s", category_id)
