from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from stockdesk.api.deps import get_client
from stockdesk.client.protocol import DataClient
from stockdesk.domain.enums import MovementType
from stockdesk.schemas.stock_movement import (
    BulkMovement,
    StockMovement,
    StockMovementCreate,
    StockMovementFilters,
)
from stockdesk.services import stock_movement_service

router = APIRouter(prefix="/stock-movements", tags=["stock-movements"])


@router.get("", response_model=list[StockMovement])
async def list_movements(
    project_id: int = Query(...),
    product_id: int | None = Query(None),
    type: MovementType | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    is_bulk: bool | None = Query(None),
    bulk_id: str | None = Query(None),
    client: DataClient = Depends(get_client),
):
    filters = StockMovementFilters(
        project_id=project_id,
        product_id=product_id,
        type=type,
        start_date=start_date,
        end_date=end_date,
        is_bulk=is_bulk,
        bulk_id=bulk_id,
    )
    return await stock_movement_service.list_movements(client, filters)


@router.post("", response_model=StockMovement, status_code=status.HTTP_201_CREATED)
async def create_movement(payload: StockMovementCreate, client: DataClient = Depends(get_client)):
    return await stock_movement_service.create_movement(client, payload)


# --- Bulk operations ---
@router.get("/bulk", response_model=list[BulkMovement])
async def list_bulk(project_id: int = Query(...), client: DataClient = Depends(get_client)):
    return await stock_movement_service.list_bulk_movements(client, project_id)


@router.get("/bulk/{bulk_id}", response_model=list[StockMovement])
async def list_bulk_items(bulk_id: str, project_id: int = Query(...), client: DataClient = Depends(get_client)):
    return await stock_movement_service.list_by_bulk_id(client, bulk_id, project_id)


@router.post("/bulk/{bulk_id}/reverse")
async def reverse_bulk(bulk_id: int, project_id: int = Query(...), client: DataClient = Depends(get_client)):
    reversed_count = await stock_movement_service.reverse_bulk_movement(client, bulk_id, project_id)
    return {"bulk_id": bulk_id, "reversed": reversed_count}


@router.get("/{movement_id}", response_model=StockMovement)
async def get_movement(movement_id: int, client: DataClient = Depends(get_client)):
    movement = await stock_movement_service.get_movement(client, movement_id)
    if movement is None:
        raise HTTPException(status_code=404, detail="Stock movement not found")
    return movement
