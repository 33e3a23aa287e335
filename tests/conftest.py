# tests/conftest.py
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import os

import httpx
import pytest
import pytest_asyncio

os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""

from stockdesk.api.deps import get_client
from stockdesk.main import app
from stockdesk.testing import MockSupabaseClient

CREATED_AT = "2024-01-01T09:00:00+00:00"


def product_row(**overrides):
    row = {
        "id": 1,
        "name": "Basmati rice",
        "code": "DRY-001",
        "category_id": 1,
        "price": 3.5,
        "unit_price": 3.0,
        "stock_quantity": 40,
        "min_stock_level": 10,
        "expiry_date": None,
        "created_at": CREATED_AT,
        "project_id": 1,
        "categories": {"id": 1, "name": "Dry goods"},
    }
    row.update(overrides)
    return row


def category_row(**overrides):
    row = {"id": 1, "name": "Dry goods", "created_at": CREATED_AT, "project_id": 1}
    row.update(overrides)
    return row


def movement_row(**overrides):
    row = {
        "id": 1,
        "product_id": 1,
        "type": "out",
        "quantity": 5,
        "date": "2024-02-01T12:00:00+00:00",
        "user_id": "user-1",
        "notes": "Wedding dinner",
        "is_bulk": True,
        "bulk_id": "7",
        "project_id": 1,
    }
    row.update(overrides)
    return row


# ---------- Fixtures ----------
@pytest.fixture(scope="function")
def product_rows():
    return [
        product_row(),
        product_row(
            id=2,
            name="Red lentils",
            code="DRY-002",
            category_id=None,
            unit_price=None,
            stock_quantity=4,
            expiry_date="2025-06-01",
            categories=None,
        ),
    ]


@pytest.fixture(scope="function")
def mock_client(product_rows) -> MockSupabaseClient:
    """Double preloaded with a small project catalogue."""
    return MockSupabaseClient(
        {
            "products": product_rows,
            "categories": [category_row(), category_row(id=2, name="Dairy")],
            "stock_movements": [movement_row()],
        }
    )


@pytest_asyncio.fixture(scope="function")
async def api_client(mock_client):
    """AsyncClient bound to the app with the double injected as data client."""
    app.dependency_overrides[get_client] = lambda: mock_client
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
