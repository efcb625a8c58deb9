"""
SQLAlchemy Data Store

Async implementation of the DataStore contract over the marketplace tables.

Id-list lookups are split into chunks of ``max_ids_per_query`` so no single
IN clause grows unbounded; chunk results are merged, re-sorted and re-limited
here. Each call opens its own session from the factory.
"""

from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncGenerator, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

import structlog
from sqlalchemy import Select, and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace_analytics.config import get_settings
from marketplace_analytics.database.models import Order, OrderItem, Product, Store, User
from marketplace_analytics.domain.money import to_cents
from marketplace_analytics.domain.records import (
    OrderFilter,
    OrderItemRecord,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    StoreRecord,
    UserRecord,
    UserRole,
    VerificationStatus,
)
from marketplace_analytics.errors import DataStoreError, InvalidFilterError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_COUNT_MODELS = {
    "orders": Order,
    "products": Product,
    "stores": Store,
    "users": User,
}


def chunked(values: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield successive ``size``-long chunks of ``values``."""
    for start in range(0, len(values), size):
        yield list(values[start:start + size])


def _unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(v for v in values if v is not None))


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def _order_sort_key(newest_first: bool) -> Callable[[OrderRecord], Any]:
    if newest_first:
        return lambda o: (-o.created_at.timestamp(), o.id)
    return lambda o: (o.created_at, o.id)


# =============================================================================
# ROW MAPPING
# =============================================================================

def _store_record(row: Store) -> StoreRecord:
    return StoreRecord(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        city=row.city,
        state=row.state,
        verification_status=VerificationStatus(row.verification_status),
    )


def _product_record(row: Product) -> ProductRecord:
    return ProductRecord(
        id=row.id,
        store_id=row.store_id,
        name=row.name,
        category=row.category,
        stock=max(int(row.stock or 0), 0),
        price=to_cents(row.price),
    )


def _order_record(row: Order) -> Optional[OrderRecord]:
    try:
        status = OrderStatus(row.status)
    except ValueError:
        logger.warning("Skipping order with unknown status", order_id=row.id, status=row.status)
        return None
    return OrderRecord(
        id=row.id,
        buyer_id=row.buyer_id,
        total_amount=to_cents(row.total_amount),
        status=status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _item_record(row: OrderItem) -> OrderItemRecord:
    return OrderItemRecord(
        order_id=row.order_id,
        product_id=row.product_id,
        unit_price=to_cents(row.price),
        quantity=int(row.quantity),
    )


def _user_record(row: User) -> UserRecord:
    try:
        role = UserRole(row.role)
    except ValueError:
        role = UserRole.BUYER
    return UserRecord(id=row.id, name=row.name, email=row.email, role=role)


class SqlDataStore:
    """
    DataStore backed by SQLAlchemy async sessions.

    Example:
        store = SqlDataStore(get_session_factory())
        store_ids = await store.list_owned_stores(seller_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        max_ids_per_query: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self.max_ids_per_query = max_ids_per_query or get_settings().analytics.max_ids_per_query

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error("Data store query failed", operation=operation, error=str(e), error_type=type(e).__name__)
            raise DataStoreError(operation, e) from e
        finally:
            await session.close()

    async def _scalars(self, operation: str, statements: Sequence[Select]) -> List[Any]:
        rows: List[Any] = []
        async with self._session(operation) as session:
            for statement in statements:
                result = await session.execute(statement)
                rows.extend(result.scalars().all())
        return rows

    # -------------------------------------------------------------------------
    # Stores
    # -------------------------------------------------------------------------

    async def list_owned_stores(self, seller_id: str) -> List[str]:
        if not seller_id:
            return []
        statement = select(Store.id).where(Store.owner_id == seller_id).order_by(Store.created_at, Store.id)
        return list(await self._scalars("list_owned_stores", [statement]))

    async def get_store(self, store_id: str) -> Optional[StoreRecord]:
        rows = await self._scalars("get_store", [select(Store).where(Store.id == store_id)])
        return _store_record(rows[0]) if rows else None

    async def list_stores(
        self, verification_status: Optional[VerificationStatus] = None
    ) -> List[StoreRecord]:
        statement = select(Store).order_by(Store.name, Store.id)
        if verification_status is not None:
            statement = statement.where(Store.verification_status == _plain(verification_status))
        rows = await self._scalars("list_stores", [statement])
        return [_store_record(row) for row in rows]

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    async def list_products(
        self, store_ids: Sequence[str], category: Optional[str] = None
    ) -> List[ProductRecord]:
        store_ids = _unique(store_ids)
        if not store_ids:
            return []
        statements = []
        for chunk in chunked(store_ids, self.max_ids_per_query):
            statement = select(Product).where(Product.store_id.in_(chunk))
            if category is not None:
                statement = statement.where(Product.category == category)
            statements.append(statement.order_by(Product.name, Product.id))
        rows = await self._scalars("list_products", statements)
        return [_product_record(row) for row in rows]

    async def products_by_id(self, product_ids: Sequence[str]) -> List[ProductRecord]:
        product_ids = _unique(product_ids)
        if not product_ids:
            return []
        statements = [
            select(Product).where(Product.id.in_(chunk))
            for chunk in chunked(product_ids, self.max_ids_per_query)
        ]
        rows = await self._scalars("products_by_id", statements)
        return [_product_record(row) for row in rows]

    async def list_low_stock(
        self, store_ids: Sequence[str], threshold: int = 10, limit: int = 20
    ) -> List[ProductRecord]:
        store_ids = _unique(store_ids)
        if not store_ids or limit <= 0:
            return []
        statements = [
            select(Product)
            .where(and_(Product.store_id.in_(chunk), Product.stock < threshold))
            .order_by(Product.stock.asc(), Product.name, Product.id)
            .limit(limit)
            for chunk in chunked(store_ids, self.max_ids_per_query)
        ]
        rows = await self._scalars("list_low_stock", statements)
        products = sorted((_product_record(row) for row in rows), key=lambda p: (p.stock, p.name, p.id))
        return products[:limit]

    # -------------------------------------------------------------------------
    # Order items
    # -------------------------------------------------------------------------

    async def items_for_products(self, product_ids: Sequence[str]) -> List[OrderItemRecord]:
        product_ids = _unique(product_ids)
        if not product_ids:
            return []
        statements = [
            select(OrderItem)
            .where(OrderItem.product_id.in_(chunk))
            .order_by(OrderItem.order_id, OrderItem.id)
            for chunk in chunked(product_ids, self.max_ids_per_query)
        ]
        rows = await self._scalars("items_for_products", statements)
        return [_item_record(row) for row in rows]

    async def items_for_orders(self, order_ids: Sequence[str]) -> List[OrderItemRecord]:
        order_ids = _unique(order_ids)
        if not order_ids:
            return []
        statements = [
            select(OrderItem)
            .where(OrderItem.order_id.in_(chunk))
            .order_by(OrderItem.order_id, OrderItem.id)
            for chunk in chunked(order_ids, self.max_ids_per_query)
        ]
        rows = await self._scalars("items_for_orders", statements)
        return [_item_record(row) for row in rows]

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    @staticmethod
    def _apply_order_filter(statement: Select, order_filter: OrderFilter) -> Select:
        conditions = []
        if order_filter.statuses:
            conditions.append(Order.status.in_([_plain(s) for s in order_filter.statuses]))
        if order_filter.date_from is not None:
            conditions.append(Order.created_at >= order_filter.date_from)
        if order_filter.date_to is not None:
            conditions.append(Order.created_at < order_filter.date_to)
        if conditions:
            statement = statement.where(and_(*conditions))
        if order_filter.newest_first:
            statement = statement.order_by(Order.created_at.desc(), Order.id)
        else:
            statement = statement.order_by(Order.created_at.asc(), Order.id)
        if order_filter.limit is not None:
            statement = statement.limit(order_filter.limit)
        return statement

    def _collect_orders(self, rows: Sequence[Order], order_filter: OrderFilter) -> List[OrderRecord]:
        orders = [record for record in (_order_record(row) for row in rows) if record is not None]
        orders.sort(key=_order_sort_key(order_filter.newest_first))
        if order_filter.limit is not None:
            orders = orders[:order_filter.limit]
        return orders

    async def orders_by_id(
        self, order_ids: Sequence[str], order_filter: Optional[OrderFilter] = None
    ) -> List[OrderRecord]:
        order_ids = _unique(order_ids)
        order_filter = order_filter or OrderFilter()
        if not order_ids or (order_filter.limit is not None and order_filter.limit <= 0):
            return []
        statements = [
            self._apply_order_filter(select(Order).where(Order.id.in_(chunk)), order_filter)
            for chunk in chunked(order_ids, self.max_ids_per_query)
        ]
        rows = await self._scalars("orders_by_id", statements)
        return self._collect_orders(rows, order_filter)

    async def list_orders(self, order_filter: Optional[OrderFilter] = None) -> List[OrderRecord]:
        order_filter = order_filter or OrderFilter()
        rows = await self._scalars("list_orders", [self._apply_order_filter(select(Order), order_filter)])
        return self._collect_orders(rows, order_filter)

    async def orders_for_buyer(
        self, buyer_id: str, order_filter: Optional[OrderFilter] = None
    ) -> List[OrderRecord]:
        if not buyer_id:
            return []
        order_filter = order_filter or OrderFilter()
        statement = self._apply_order_filter(select(Order).where(Order.buyer_id == buyer_id), order_filter)
        rows = await self._scalars("orders_for_buyer", [statement])
        return self._collect_orders(rows, order_filter)

    # -------------------------------------------------------------------------
    # Users and counts
    # -------------------------------------------------------------------------

    async def users_by_id(self, user_ids: Sequence[str]) -> List[UserRecord]:
        user_ids = _unique(user_ids)
        if not user_ids:
            return []
        statements = [
            select(User).where(User.id.in_(chunk))
            for chunk in chunked(user_ids, self.max_ids_per_query)
        ]
        rows = await self._scalars("users_by_id", statements)
        return [_user_record(row) for row in rows]

    async def count_where(self, entity: str, **criteria: Any) -> int:
        model = _COUNT_MODELS.get(entity)
        if model is None:
            raise InvalidFilterError(
                f"Cannot count unknown entity '{entity}'",
                {"allowed": sorted(_COUNT_MODELS)},
            )

        columns = model.__table__.columns
        scalar_conditions = []
        list_criteria: Dict[str, List[Any]] = {}
        for name, value in criteria.items():
            if name not in columns:
                raise InvalidFilterError(f"Unknown column '{name}' for entity '{entity}'")
            if isinstance(value, (list, tuple, set, frozenset)):
                values = _unique([_plain(v) for v in value])
                if not values:
                    return 0
                list_criteria[name] = values
            else:
                scalar_conditions.append(columns[name] == _plain(value))

        # Only one list criterion may be chunked; the rest are applied whole
        chunk_column = next(iter(list_criteria), None)
        chunk_values = list_criteria.pop(chunk_column) if chunk_column else [None]
        base_conditions = scalar_conditions + [columns[name].in_(values) for name, values in list_criteria.items()]

        total = 0
        async with self._session("count_where") as session:
            for chunk in chunked(chunk_values, self.max_ids_per_query):
                conditions = list(base_conditions)
                if chunk_column:
                    conditions.append(columns[chunk_column].in_(chunk))
                statement = select(func.count()).select_from(model)
                if conditions:
                    statement = statement.where(and_(*conditions))
                result = await session.execute(statement)
                total += int(result.scalar_one() or 0)
        return total
