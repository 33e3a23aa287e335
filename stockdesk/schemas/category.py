# stockdesk/schemas/category.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Category(BaseModel):
    id: int
    name: str
    created_at: datetime

    model_config = ConfigDict(extra="allow")


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    project_id: int


class CategoryUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryWithCount(Category):
    product_count: int = 0
