# stockdesk/schemas/stock_movement.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from stockdesk.domain.enums import MovementType
from stockdesk.schemas.product import ProductSnapshot


class StockMovement(BaseModel):
    id: int
    product_id: int
    type: MovementType
    quantity: int
    date: datetime
    user_id: str
    notes: str | None = None
    is_bulk: bool | None = None
    bulk_id: str | None = None
    products: ProductSnapshot | None = None

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class StockMovementCreate(BaseModel):
    product_id: int
    type: MovementType
    quantity: int = Field(gt=0)
    date: datetime
    user_id: str
    project_id: int
    notes: str | None = None
    is_bulk: bool = False
    bulk_id: str | None = None


class StockMovementFilters(BaseModel):
    project_id: int
    product_id: int | None = None
    type: MovementType | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_bulk: bool | None = None
    bulk_id: str | None = None


class BulkMovement(BaseModel):
    id: int
    date: datetime
    type: MovementType
    user_id: str
    project_id: int
    notes: str | None = None
    can_be_reversed: bool = False
    operation_type: str | None = None

    model_config = ConfigDict(extra="allow")
