# stockdesk/schemas/product.py
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class Product(BaseModel):
    id: int
    name: str
    code: str | None
    category_id: int | None
    category_name: str | None = None
    price: float
    unit_price: float | None = None
    stock_quantity: int
    min_stock_level: int = 0
    expiry_date: date | None
    created_at: datetime

    # the store returns project_id, unit, brand, updated_at and embedded relations too
    model_config = ConfigDict(extra="allow")


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str | None = Field(default=None, max_length=64)
    category_id: int
    price: float = Field(ge=0)
    unit_price: float | None = Field(default=None, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    min_stock_level: int | None = Field(default=None, ge=0)
    unit: str | None = None
    brand: str | None = None
    expiry_date: date | None = None
    reception_date: date | None = None
    project_id: int


class ProductUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, max_length=64)
    category_id: int | None = None
    price: float | None = Field(default=None, ge=0)
    unit_price: float | None = Field(default=None, ge=0)
    stock_quantity: int | None = Field(default=None, ge=0)
    min_stock_level: int | None = Field(default=None, ge=0)
    unit: str | None = None
    brand: str | None = None
    expiry_date: date | None = None
    reception_date: date | None = None


class ProductFilters(BaseModel):
    project_id: int
    category_id: int | None = None
    search_term: str | None = None
    min_stock: int | None = Field(default=None, ge=0)
    show_zero_stock: bool = False


class ProductSnapshot(BaseModel):
    """Partial product embedded in other rows for display."""

    id: int
    name: str
    unit: str | None = None
    price: float | None = None
    stock_quantity: int | None = None

    model_config = ConfigDict(extra="allow")
