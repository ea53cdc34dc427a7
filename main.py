#!/usr/bin/env python3
"""
Seed the catalog database and run sample catalog queries.

This script shows how to:
1. Load products (with variants) from a JSON file into the database
2. Browse the catalog with filters and sorting
3. Run a relevance-ranked search

Usage: python main.py [catalog.json] [search term]
"""

import asyncio
import json
import sys
from pathlib import Path

from storefront.catalog import CatalogEngine, QuerySpec, TTLCache
from storefront.catalog.models import ProductCreate
from storefront.catalog.store import ProductStore
from storefront.config import catalog_config
from storefront.database import get_engine, init_db

SAMPLE_PRODUCTS = [
    {
        "name": "Arduino Uno R3",
        "description": "ATmega328P microcontroller board",
        "category": "Microcontrollers",
        "brand": "Arduino",
        "sku": "ARD-UNO-R3",
        "price": 24.5,
        "rating": 4.8,
        "reviews": 312,
        "stock_quantity": 40,
    },
    {
        "name": "Sensor Kit",
        "description": "37 sensors, works great with arduino uno boards",
        "category": "Sensors",
        "brand": "Elegoo",
        "price": 39.0,
        "rating": 4.4,
        "reviews": 85,
        "variants": [
            {"sku": "DHT22-KIT", "model": "Temperature pack",
             "primary_values": [{"attribute": "Sensor", "value": "DHT22", "quantity": 5}]},
        ],
    },
    {
        "name": "Raspberry Pi 5",
        "description": "Quad-core single board computer",
        "category": "Single Board Computers",
        "brand": "Raspberry Pi",
        "price": 80.0,
        "rating": 4.9,
        "reviews": 1204,
        "stock_quantity": 0,
    },
]


async def seed(store: ProductStore, path: Path) -> int:
    """Insert products from a JSON file, or the built-in samples."""
    if path.exists():
        with open(path, encoding="utf-8") as f:
            items = json.load(f)
    else:
        print(f"{path} not found, using built-in sample products")
        items = SAMPLE_PRODUCTS

    for item in items:
        await store.save_product(ProductCreate(**item))
    return len(items)


def show_page(title: str, payload: dict):
    """Print one catalog page."""
    print(f"\n{'='*50}")
    print(title)
    print("=" * 50)

    pagination = payload["pagination"]
    print(f"Returned {pagination['returned']} of {pagination['total']} "
          f"(page {pagination['currentPage']}/{pagination['totalPages']})")
    for product in payload["products"]:
        stock = "in stock" if product["inStock"] else "out of stock"
        print(f"- {product['name'][:60]}  ${product['price']:.2f}  ({stock})")


async def main():
    """Main entry point."""
    catalog_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("data/catalog.json")
    term = sys.argv[2] if len(sys.argv) > 2 else "arduino uno"

    engine = get_engine()
    await init_db(engine)
    store = ProductStore(engine)

    count = await seed(store, catalog_path)
    print(f"Seeded {count} products into {catalog_config.database_path}")

    catalog = CatalogEngine(store, TTLCache(max_size=catalog_config.cache_max_entries))

    result = await catalog.query(QuerySpec.from_params(sort_by="price", sort_order="asc", limit="10"))
    show_page("Cheapest first", result.payload)

    result = await catalog.query(QuerySpec.from_params(in_stock="true", min_price="10", max_price="50"))
    show_page("In stock, $10-$50", result.payload)

    result = await catalog.query(QuerySpec.from_params(search=term, limit="5"))
    show_page(f"Search: {term}", result.payload)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
