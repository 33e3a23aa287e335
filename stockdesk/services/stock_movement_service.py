from __future__ import annotations

from datetime import datetime, timezone

from stockdesk.client.protocol import DataClient
from stockdesk.core.logging import get_logger
from stockdesk.domain import tables
from stockdesk.domain.records import parse_record, parse_records, reverse_type, stock_delta
from stockdesk.schemas.common import NOT_FOUND_CODE
from stockdesk.schemas.stock_movement import (
    BulkMovement,
    StockMovement,
    StockMovementCreate,
    StockMovementFilters,
)
from stockdesk.services.errors import raise_for_error
from stockdesk.services.exceptions import ConflictError, ResourceNotFoundError

logger = get_logger(__name__)

MOVEMENT_COLUMNS = "*, products(id, name, unit, price, stock_quantity)"


# ---------------- Reads ----------------
async def list_movements(client: DataClient, filters: StockMovementFilters) -> list[StockMovement]:
    query = client.from_(tables.STOCK_MOVEMENTS).select(MOVEMENT_COLUMNS).eq("project_id", filters.project_id)

    if filters.product_id:
        query = query.eq("product_id", filters.product_id)
    if filters.type is not None:
        query = query.eq("type", filters.type)
    if filters.start_date:
        query = query.gte("date", filters.start_date)
    if filters.end_date:
        query = query.lte("date", filters.end_date)
    if filters.is_bulk is not None:
        query = query.eq("is_bulk", filters.is_bulk)
    if filters.bulk_id:
        query = query.eq("bulk_id", filters.bulk_id)

    rows = raise_for_error(
        await query.order("date", desc=True).execute(),
        fallback_code="STOCK_MOVEMENT_FETCH_ERROR",
        operation="list_movements",
    )
    movements = parse_records(StockMovement, rows)
    logger.debug("list_movements fetched %d movements", len(movements))
    return movements


async def get_movement(client: DataClient, movement_id: int) -> StockMovement | None:
    result = await client.from_(tables.STOCK_MOVEMENTS).select(MOVEMENT_COLUMNS).eq("id", movement_id).single()
    if result.error is not None and result.error.code == NOT_FOUND_CODE:
        return None
    row = raise_for_error(result, fallback_code="STOCK_MOVEMENT_FETCH_ERROR", operation="get_movement")
    return parse_record(StockMovement, row)


async def list_by_bulk_id(client: DataClient, bulk_id: str, project_id: int) -> list[StockMovement]:
    rows = raise_for_error(
        await (
            client.from_(tables.STOCK_MOVEMENTS)
            .select(MOVEMENT_COLUMNS)
            .eq("bulk_id", bulk_id)
            .eq("project_id", project_id)
            .order("date", desc=True)
            .execute()
        ),
        fallback_code="STOCK_MOVEMENT_FETCH_ERROR",
        operation="list_by_bulk_id",
    )
    return parse_records(StockMovement, rows)


async def list_bulk_movements(client: DataClient, project_id: int) -> list[BulkMovement]:
    rows = raise_for_error(
        await (
            client.from_(tables.BULK_MOVEMENTS)
            .select("*")
            .eq("project_id", project_id)
            .order("date", desc=True)
            .execute()
        ),
        fallback_code="BULK_MOVEMENT_FETCH_ERROR",
        operation="list_bulk_movements",
    )
    return parse_records(BulkMovement, rows)


# ---------------- Mutations ----------------
async def create_movement(client: DataClient, payload: StockMovementCreate) -> StockMovement:
    row = raise_for_error(
        await (
            client.from_(tables.STOCK_MOVEMENTS)
            .insert([payload.model_dump(mode="json", exclude_none=True)])
            .select()
            .single()
        ),
        fallback_code="STOCK_MOVEMENT_CREATE_ERROR",
        operation="create_movement",
    )
    movement = parse_record(StockMovement, row)
    logger.info(
        "Recorded stock movement %s",
        movement.id,
        extra={"product_id": payload.product_id, "type": payload.type.value, "quantity": payload.quantity},
    )
    return movement


async def _adjust_product_stock(client: DataClient, product_id: int, project_id: int, change: int) -> None:
    product = raise_for_error(
        await (
            client.from_(tables.PRODUCTS)
            .select("id, stock_quantity")
            .eq("id", product_id)
            .eq("project_id", project_id)
            .single()
        ),
        fallback_code="STOCK_UPDATE_ERROR",
        operation="reverse_bulk_movement",
    )
    raise_for_error(
        await (
            client.from_(tables.PRODUCTS)
            .update({"stock_quantity": int(product["stock_quantity"]) + change})
            .eq("id", product_id)
            .eq("project_id", project_id)
            .execute()
        ),
        fallback_code="STOCK_UPDATE_ERROR",
        operation="reverse_bulk_movement",
    )


async def reverse_bulk_movement(client: DataClient, bulk_id: int, project_id: int) -> int:
    """Undo every movement of a bulk operation and return how many were reversed."""
    result = await (
        client.from_(tables.BULK_MOVEMENTS)
        .select("*")
        .eq("id", bulk_id)
        .eq("project_id", project_id)
        .single()
    )
    if result.error is not None and result.error.code == NOT_FOUND_CODE:
        raise ResourceNotFoundError(f"Bulk movement {bulk_id} not found")
    bulk = parse_record(
        BulkMovement,
        raise_for_error(result, fallback_code="BULK_MOVEMENT_CHECK_ERROR", operation="reverse_bulk_movement"),
    )
    if not bulk.can_be_reversed:
        raise ConflictError("This bulk movement cannot be reversed")

    movements = parse_records(
        StockMovement,
        raise_for_error(
            await (
                client.from_(tables.STOCK_MOVEMENTS)
                .select("*")
                .eq("bulk_id", str(bulk_id))
                .eq("project_id", project_id)
                .execute()
            ),
            fallback_code="MOVEMENTS_FETCH_ERROR",
            operation="reverse_bulk_movement",
        ),
    )

    now = datetime.now(timezone.utc)
    for movement in movements:
        await _adjust_product_stock(
            client, movement.product_id, project_id, -stock_delta(movement.type, movement.quantity)
        )
        reversal = StockMovementCreate(
            product_id=movement.product_id,
            type=reverse_type(movement.type),
            quantity=movement.quantity,
            date=now,
            notes=f"Reversal: {movement.notes or ''}",
            user_id=movement.user_id,
            project_id=project_id,
            is_bulk=True,
            bulk_id=f"reverse_{bulk_id}",
        )
        raise_for_error(
            await client.from_(tables.STOCK_MOVEMENTS).insert([reversal.model_dump(mode="json")]).execute(),
            fallback_code="REVERSE_MOVEMENT_ERROR",
            operation="reverse_bulk_movement",
        )

    marked = await client.from_(tables.BULK_MOVEMENTS).update({"can_be_reversed": False}).eq("id", bulk_id).execute()
    if marked.error is not None:
        # movements are already reversed at this point; report but do not fail
        logger.error("Could not mark bulk movement %s as reversed: %s", bulk_id, marked.error.message)

    logger.info("Reversed bulk movement %s", bulk_id, extra={"movements": len(movements)})
    return len(movements)
