"""Seed script for populating development categories and products."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass
from datetime import date
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from stockdesk.client import create_client
from stockdesk.client.protocol import DataClient
from stockdesk.core.logging import setup_logging
from stockdesk.schemas.category import CategoryCreate
from stockdesk.schemas.product import ProductCreate
from stockdesk.services import category_service, product_service

logger = logging.getLogger("scripts.seed_dev_products")


@dataclass(frozen=True, slots=True)
class ProductSeed:
    name: str
    code: str
    category_key: str
    price: float
    stock_quantity: int
    min_stock_level: int = 10
    unit: str = "kg"
    expiry_date: date | None = None


CATEGORIES: dict[str, str] = {
    "dry": "Dry goods",
    "dairy": "Dairy",
    "beverages": "Beverages",
}

PRODUCTS: tuple[ProductSeed, ...] = (
    ProductSeed(name="Basmati rice", code="DRY-001", category_key="dry", price=3.2, stock_quantity=40),
    ProductSeed(name="Red lentils", code="DRY-002", category_key="dry", price=2.6, stock_quantity=6),
    ProductSeed(
        name="Whole milk",
        code="DAI-001",
        category_key="dairy",
        price=1.1,
        stock_quantity=24,
        unit="l",
        expiry_date=date(2026, 12, 1),
    ),
    ProductSeed(name="Sparkling water", code="BEV-001", category_key="beverages", price=0.8, stock_quantity=0, unit="l"),
)


async def _ensure_category(client: DataClient, name: str, project_id: int) -> int:
    existing = [c for c in await category_service.list_categories(client, project_id) if c.name == name]
    if existing:
        return existing[0].id
    category = await category_service.create_category(client, CategoryCreate(name=name, project_id=project_id))
    return category.id


async def seed_dev_products(project_id: int, client: DataClient | None = None) -> int:
    """Create missing categories and products; return how many products were created."""
    owns_client = client is None
    client = client or create_client()
    created = 0
    try:
        category_ids = {
            key: await _ensure_category(client, name, project_id) for key, name in CATEGORIES.items()
        }
        for seed in PRODUCTS:
            if await product_service.code_exists(client, seed.code, project_id):
                logger.info("Skipping %s, code already present", seed.code)
                continue
            await product_service.create_product(
                client,
                ProductCreate(
                    name=seed.name,
                    code=seed.code,
                    category_id=category_ids[seed.category_key],
                    price=seed.price,
                    unit_price=seed.price,
                    stock_quantity=seed.stock_quantity,
                    min_stock_level=seed.min_stock_level,
                    unit=seed.unit,
                    expiry_date=seed.expiry_date,
                    project_id=project_id,
                ),
            )
            created += 1
    finally:
        if owns_client:
            await client.aclose()
    logger.info("Seeded %d products into project %s", created, project_id)
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--project-id", type=int, required=True)
    args = parser.parse_args()
    setup_logging()
    asyncio.run(seed_dev_products(args.project_id))


if __name__ == "__main__":
    main()
