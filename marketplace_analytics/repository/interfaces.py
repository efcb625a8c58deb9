"""
Data Store Interface

Set-based, read-only queries the analytics engine consumes. Implementations
must return an empty result for an empty id list instead of scanning
unscoped data.
"""

from typing import Any, List, Optional, Protocol, Sequence, runtime_checkable

from marketplace_analytics.domain.records import (
    OrderFilter,
    OrderItemRecord,
    OrderRecord,
    ProductRecord,
    StoreRecord,
    UserRecord,
    VerificationStatus,
)


COUNTABLE_ENTITIES = ("orders", "products", "stores", "users")


@runtime_checkable
class DataStore(Protocol):
    """Contract between the engine and whatever persistence layer backs it."""

    async def list_owned_stores(self, seller_id: str) -> List[str]:
        """Store ids owned by the seller, possibly empty."""
        ...

    async def get_store(self, store_id: str) -> Optional[StoreRecord]:
        ...

    async def list_stores(
        self, verification_status: Optional[VerificationStatus] = None
    ) -> List[StoreRecord]:
        ...

    async def list_products(
        self, store_ids: Sequence[str], category: Optional[str] = None
    ) -> List[ProductRecord]:
        ...

    async def products_by_id(self, product_ids: Sequence[str]) -> List[ProductRecord]:
        ...

    async def list_low_stock(
        self, store_ids: Sequence[str], threshold: int = 10, limit: int = 20
    ) -> List[ProductRecord]:
        """Products with ``stock < threshold`` ordered by stock ascending."""
        ...

    async def items_for_products(self, product_ids: Sequence[str]) -> List[OrderItemRecord]:
        ...

    async def items_for_orders(self, order_ids: Sequence[str]) -> List[OrderItemRecord]:
        ...

    async def orders_by_id(
        self, order_ids: Sequence[str], order_filter: Optional[OrderFilter] = None
    ) -> List[OrderRecord]:
        ...

    async def list_orders(self, order_filter: Optional[OrderFilter] = None) -> List[OrderRecord]:
        """Platform-wide order fetch, filter pushed down."""
        ...

    async def orders_for_buyer(
        self, buyer_id: str, order_filter: Optional[OrderFilter] = None
    ) -> List[OrderRecord]:
        ...

    async def users_by_id(self, user_ids: Sequence[str]) -> List[UserRecord]:
        ...

    async def count_where(self, entity: str, **criteria: Any) -> int:
        """
        Count rows of ``entity`` matching ``criteria``.

        Scalar values compare by equality, lists and tuples by membership.
        An empty list matches nothing.
        """
        ...
