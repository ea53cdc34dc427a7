"""Tests for database configuration."""

import pytest

from sqlalchemy import text, select, func

from storefront.database import get_engine, init_db, get_session
from storefront.catalog.models import ProductORM, VariantORM, ProductCreate, VariantCreate
from storefront.catalog.store import ProductStore


@pytest.fixture
def test_db_path(tmp_path):
    """Use temporary database for tests."""
    return tmp_path / "test.db"


@pytest.mark.asyncio
async def test_init_db_creates_tables(test_db_path):
    """Test that init_db creates all tables."""
    engine = get_engine(str(test_db_path))
    await init_db(engine)

    # Check database file exists
    assert test_db_path.exists()

    async with get_session(engine) as session:
        result = await session.execute(
            text("SELECT name FROM sqlite_master WHERE type='table'")
        )
        tables = {row[0] for row in result}

    assert {"products", "product_variants"} <= tables


@pytest.mark.asyncio
async def test_get_session_works(test_db_path):
    """Test that get_session returns working session."""
    engine = get_engine(str(test_db_path))
    await init_db(engine)

    async with get_session(engine) as session:
        result = await session.execute(text("SELECT 1"))
        assert result is not None


@pytest.mark.asyncio
async def test_variants_deleted_with_product(test_db_path):
    """Deleting a product removes its variants."""
    engine = get_engine(str(test_db_path))
    await init_db(engine)
    store = ProductStore(engine)

    product_id = await store.save_product(ProductCreate(
        name="Relay Module",
        price=4.0,
        variants=[VariantCreate(sku="RLY-1"), VariantCreate(sku="RLY-2")],
    ))

    async with get_session(engine) as session:
        product = await session.get(ProductORM, product_id)
        await session.delete(product)

    async with get_session(engine) as session:
        result = await session.execute(select(func.count()).select_from(VariantORM))
        assert result.scalar() == 0
