import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["DB_SNAPSHOT_ISOLATION_LEVEL"] = "SERIALIZABLE"
os.environ.setdefault("ORDER_FETCH_STRATEGY", "narrowed")

from datetime import datetime
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from main import app
from app.core.database import get_async_session
from app.db.base import Base
from app.models import (
    Component, ComponentCategory, ConfigurableAttribute, ConfigurableAttributeOption, Discount,
    Order, OrderItem, Product, ProductCategory, ProductConfigurableAttribute, Recipe, Require,
    TvaCategory, UnitOfMeasureDesc, User, UserRights,
)

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

MERCHANT_ID = "M1"
OTHER_MERCHANT_ID = "M2"
RECEPTION_TOKEN = "token-reception-m1"
DRIVER_USER_ID = 2


class Seeder:
    """Factories for legacy rows; defaults describe merchant M1."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, *rows) -> None:
        self.session.add_all(rows)
        await self.session.commit()

    def order(self, order_id: int, **fields) -> Order:
        values = dict(
            order_id=order_id,
            merchant_id=MERCHANT_ID,
            order_num=f"N{order_id}",
            order_type="ON_SITE",
            state="OPEN",
            brand_status=None,
            price=20.0,
            is_paid=False,
            is_distributed=False,
            responsible=0,
            creation_date=datetime(2024, 5, 10, 12, 0, 0),
        )
        values.update(fields)
        return Order(**values)

    def item(self, order_item_id: int, order_id: int, product_id: int = 10, **fields) -> OrderItem:
        values = dict(
            order_item_id=order_item_id,
            order_id=order_id,
            merchant_id=MERCHANT_ID,
            product_id=product_id,
            quantity=1,
            price=12.0,
            ordered_on=datetime(2024, 5, 10, 12, 1, 0),
        )
        values.update(fields)
        return OrderItem(**values)

    async def baseline(self) -> SimpleNamespace:
        """Catalog, staff and tokens shared by most tests."""
        await self.add(
            TvaCategory(tva_id=1, tva_rate=10.0),
            TvaCategory(tva_id=2, tva_rate=5.5),
            Discount(discount_id=1, discount_name="Happy hour"),
            ProductCategory(merchant_categ_id=1, merchant_id=MERCHANT_ID, categ_name="Burgers", categ_order=1),
            ProductCategory(merchant_categ_id=2, merchant_id=MERCHANT_ID, categ_name="Sides", categ_order=2),
            Product(
                product_id=10, merchant_id=MERCHANT_ID, category=1, name="Burger", price=12.0,
                price_take_away=11.0, price_delivery=13.0, tva_in_id=1, tva_delivery_id=2, tva_take_away_id=2,
                img="burger.png",
            ),
            Product(
                product_id=11, merchant_id=MERCHANT_ID, category=2, name="Fries", price=4.0,
                price_take_away=4.0, price_delivery=4.5, tva_in_id=1, tva_delivery_id=2, tva_take_away_id=2,
            ),
            ComponentCategory(merchant_categ_id=1, merchant_id=MERCHANT_ID, name="Dairy", categ_order=1),
            ComponentCategory(merchant_categ_id=2, merchant_id=MERCHANT_ID, name="Vegetables", categ_order=2),
            Component(component_id=100, merchant_id=MERCHANT_ID, category_id=1, name="Cheese", component_price=1.0),
            Component(component_id=101, merchant_id=MERCHANT_ID, category_id=2, name="Onion", component_price=0.5),
            UnitOfMeasureDesc(id=1, lang="FR", uom_desc="pièce"),
            Recipe(recipe_id=1, product_id=10),
            Require(id=1, recipe_id=1, component_id=100, quantity=1.0, unit_of_measure=1, enabled=True),
            Require(id=2, recipe_id=1, component_id=101, quantity=2.0, unit_of_measure=1, enabled=True),
            ConfigurableAttribute(id=1, title="Cooking", attribute_type="SINGLE", min_options=1, max_options=1),
            ConfigurableAttributeOption(id=1, configurable_attribute_id=1, title="Rare", extra_price=0, max_quantity=1),
            ConfigurableAttributeOption(id=2, configurable_attribute_id=1, title="Well done", extra_price=0, max_quantity=1),
            ProductConfigurableAttribute(id=1, product_id=10, configurable_attribute_id=1, num_order=1),
            UserRights(id=1, merchant_id=MERCHANT_ID, token=RECEPTION_TOKEN, access_wrreception=True),
            User(
                user_id=1, merchant_id=MERCHANT_ID, access_id=1, user_name="alice",
                first_name="Alice", last_name="Martin", enabled=True,
            ),
            UserRights(id=2, merchant_id=MERCHANT_ID, token="token-driver-m1", access_wrdelivery=True),
            User(
                user_id=DRIVER_USER_ID, merchant_id=MERCHANT_ID, access_id=2, user_name="dan",
                first_name="Dan", last_name="Driver", tel="0600000000", lat=48.85, lng=2.35,
                planning_color="#ff0000", enabled=True,
            ),
        )
        return SimpleNamespace(
            merchant_id=MERCHANT_ID,
            token=RECEPTION_TOKEN,
            burger_id=10,
            fries_id=11,
            driver_id=DRIVER_USER_ID,
        )


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def seed(db_session) -> Seeder:
    return Seeder(db_session)


@pytest_asyncio.fixture
async def baseline(seed) -> SimpleNamespace:
    return await seed.baseline()


@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Create test client"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    return {"Authorization": f"Bearer {RECEPTION_TOKEN}"}

