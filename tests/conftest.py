"""
Test Suite Configuration

Builds a throwaway SQLite marketplace and seeds it with a fixed set of
stores, products and orders. Timestamps are relative to ``NOW``; pass
``now=NOW`` to the assemblers so windows are deterministic.

Seeded marketplace (amounts in dollars):

    seller-a owns store-a1 (verified, Austin TX) and store-a2 (pending, Denver CO)
    seller-b owns store-b1 (verified, Seattle WA)
    seller-c owns nothing

    ord-shared       buyer-1  80.00 completed   NOW-2d     a1 30x1 + b1 50x1
    ord-pure-a       buyer-1  50.00 completed   NOW-1d     a2 25x2
    ord-pending-a    buyer-2  10.00 pending     NOW-3h     a3 10x1
    ord-processing   buyer-2  62.00 processing  NOW-5h     a4 12x1 + b1 50x1
    ord-cancelled-a  buyer-1  24.00 cancelled   NOW-2d-1h  a4 12x2
    ord-old-a        buyer-1  30.00 completed   NOW-10d    a1 30x1
    ord-prev-a       buyer-2 100.00 completed   NOW-40d    a2 25x4
    ord-b-only       buyer-2  50.00 completed   NOW-1d     b1 50x1
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from marketplace_analytics.config import Settings
from marketplace_analytics.config.settings import AnalyticsSettings
from marketplace_analytics.database.models import Base, Order, OrderItem, Product, Store, User
from marketplace_analytics.domain.records import OrderItemRecord, OrderRecord, OrderStatus, ProductRecord
from marketplace_analytics.errors import DataStoreError
from marketplace_analytics.repository.sql_store import SqlDataStore

NOW = datetime(2026, 10, 19, 12, 0, 0)


def _order(order_id: str, buyer_id: str, total: str, status: str, age: timedelta) -> Order:
    return Order(
        id=order_id,
        buyer_id=buyer_id,
        total_amount=Decimal(total),
        status=status,
        created_at=NOW - age,
        updated_at=NOW - age,
    )


def _item(order_id: str, product_id: str, price: str, quantity: int) -> OrderItem:
    return OrderItem(
        id=f"{order_id}:{product_id}",
        order_id=order_id,
        product_id=product_id,
        price=Decimal(price),
        quantity=quantity,
    )


def marketplace_rows() -> Iterable[Any]:
    yield from [
        User(id="seller-a", name="Alice Seller", email="alice@example.com", role="seller"),
        User(id="seller-b", name="Bob Seller", email="bob@example.com", role="seller"),
        User(id="seller-c", name="Carol Seller", email="carol@example.com", role="seller"),
        User(id="buyer-1", name="Ada Buyer", email="ada@example.com", role="buyer"),
        User(id="buyer-2", name="Ben Buyer", email="ben@example.com", role="buyer"),
        User(id="admin-1", name="Root", email="root@example.com", role="admin"),
    ]
    yield from [
        Store(id="store-a1", owner_id="seller-a", name="Alpha Home", city="Austin", state="TX",
              verification_status="verified"),
        Store(id="store-a2", owner_id="seller-a", name="Alpha Paper", city="Denver", state="CO",
              verification_status="pending"),
        Store(id="store-b1", owner_id="seller-b", name="Beta Audio", city="Seattle", state="WA",
              verification_status="verified"),
    ]
    yield from [
        Product(id="prod-a1", store_id="store-a1", name="Desk Lamp", category="Home", stock=0,
                price=Decimal("30.00")),
        Product(id="prod-a2", store_id="store-a1", name="Notebook", category="Stationery", stock=3,
                price=Decimal("25.00")),
        Product(id="prod-a3", store_id="store-a2", name="Pen Set", category=None, stock=9,
                price=Decimal("10.00")),
        Product(id="prod-a4", store_id="store-a1", name="Mug", category="Home", stock=50,
                price=Decimal("12.00")),
        Product(id="prod-b1", store_id="store-b1", name="Headphones", category="Electronics", stock=40,
                price=Decimal("50.00")),
    ]
    yield from [
        _order("ord-shared", "buyer-1", "80.00", "completed", timedelta(days=2)),
        _order("ord-pure-a", "buyer-1", "50.00", "completed", timedelta(days=1)),
        _order("ord-pending-a", "buyer-2", "10.00", "pending", timedelta(hours=3)),
        _order("ord-processing", "buyer-2", "62.00", "processing", timedelta(hours=5)),
        _order("ord-cancelled-a", "buyer-1", "24.00", "cancelled", timedelta(days=2, hours=1)),
        _order("ord-old-a", "buyer-1", "30.00", "completed", timedelta(days=10)),
        _order("ord-prev-a", "buyer-2", "100.00", "completed", timedelta(days=40)),
        _order("ord-b-only", "buyer-2", "50.00", "completed", timedelta(days=1)),
    ]
    yield from [
        _item("ord-shared", "prod-a1", "30.00", 1),
        _item("ord-shared", "prod-b1", "50.00", 1),
        _item("ord-pure-a", "prod-a2", "25.00", 2),
        _item("ord-pending-a", "prod-a3", "10.00", 1),
        _item("ord-processing", "prod-a4", "12.00", 1),
        _item("ord-processing", "prod-b1", "50.00", 1),
        _item("ord-cancelled-a", "prod-a4", "12.00", 2),
        _item("ord-old-a", "prod-a1", "30.00", 1),
        _item("ord-prev-a", "prod-a2", "25.00", 4),
        _item("ord-b-only", "prod-b1", "50.00", 1),
    ]


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings()


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite engine; every session gets its own connection"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'marketplace.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def empty_store(session_factory) -> SqlDataStore:
    """Data store over an empty schema"""
    return SqlDataStore(session_factory, max_ids_per_query=500)


@pytest.fixture
async def seeded_store(session_factory) -> SqlDataStore:
    """Data store over the seeded marketplace; chunk size 2 exercises chunking"""
    async with session_factory() as session:
        rows = list(marketplace_rows())
        for model in (User, Store, Product, Order, OrderItem):
            session.add_all([row for row in rows if isinstance(row, model)])
            await session.flush()
        await session.commit()
    return SqlDataStore(session_factory, max_ids_per_query=2)


class FailingDataStore:
    """
    Wraps a data store and raises DataStoreError from the named methods.

    With no names given every method fails.
    """

    def __init__(self, inner: Any = None, failing: Iterable[str] = ()):
        self._inner = inner
        self._failing = set(failing)
        self.calls = []

    def __getattr__(self, name: str):
        if name.startswith("_"):
            raise AttributeError(name)

        async def call(*args: Any, **kwargs: Any):
            self.calls.append(name)
            if self._inner is None or not self._failing or name in self._failing:
                raise DataStoreError(name, RuntimeError("connection refused"))
            return await getattr(self._inner, name)(*args, **kwargs)

        return call


@pytest.fixture
def failing_store() -> FailingDataStore:
    return FailingDataStore()


# =============================================================================
# RECORD BUILDERS
# =============================================================================

def make_order(
    order_id: str,
    total_amount: int,
    status: OrderStatus = OrderStatus.COMPLETED,
    created_at: datetime = NOW,
    buyer_id: str = "buyer-1",
) -> OrderRecord:
    return OrderRecord(
        id=order_id,
        buyer_id=buyer_id,
        total_amount=total_amount,
        status=status,
        created_at=created_at,
    )


def make_item(order_id: str, product_id: str, unit_price: int, quantity: int = 1) -> OrderItemRecord:
    return OrderItemRecord(order_id=order_id, product_id=product_id, unit_price=unit_price, quantity=quantity)


def make_product(
    product_id: str,
    store_id: str = "store-1",
    name: str = "",
    category: str = None,
    stock: int = 10,
    price: int = 0,
) -> ProductRecord:
    return ProductRecord(
        id=product_id,
        store_id=store_id,
        name=name or product_id,
        category=category,
        stock=stock,
        price=price,
    )
