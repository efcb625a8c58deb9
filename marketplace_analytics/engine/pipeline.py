"""
Fetch / Join Orchestration

Sequential staged joins that fuel the attribution engine:

    seller -> store ids -> products -> order items -> distinct order ids -> orders

There is no seller -> order foreign key; "orders touching my products" is
derived from the order-item join. Every stage short-circuits on an empty
input so an empty scope never turns into an unscoped query.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import structlog

from marketplace_analytics.domain.records import (
    OrderFilter,
    OrderItemRecord,
    OrderRecord,
    ProductRecord,
)
from marketplace_analytics.engine.attribution import (
    AttributionResult,
    attribute_orders,
    unknown_product_anomalies,
)
from marketplace_analytics.errors import ScopeAccessError
from marketplace_analytics.repository.interfaces import DataStore

logger = structlog.get_logger(__name__)


def distinct_order_ids(items: Iterable[OrderItemRecord]) -> List[str]:
    """Unique order ids in first-seen order."""
    return list(dict.fromkeys(item.order_id for item in items))


@dataclass(frozen=True)
class SellerScope:
    """Explicit set of stores bounding a seller's view"""
    seller_id: str
    store_ids: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.store_ids

    @property
    def label(self) -> str:
        return f"seller:{self.seller_id}"


@dataclass
class SellerSnapshot:
    """Products and order items of one seller scope"""
    scope: SellerScope
    products: List[ProductRecord] = field(default_factory=list)
    items: List[OrderItemRecord] = field(default_factory=list)

    @property
    def product_index(self) -> Dict[str, ProductRecord]:
        return {product.id: product for product in self.products}

    @property
    def order_ids(self) -> List[str]:
        return distinct_order_ids(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass
class PlatformSnapshot:
    """Orders in a window with their items and referenced products"""
    orders: List[OrderRecord] = field(default_factory=list)
    items: List[OrderItemRecord] = field(default_factory=list)
    products: Dict[str, ProductRecord] = field(default_factory=dict)


async def resolve_scope(store: DataStore, seller_id: str, store_id: Optional[str] = None) -> SellerScope:
    """
    Resolve the stores a seller's request covers.

    Args:
        store: Data store
        seller_id: Requesting seller
        store_id: Narrow the scope to one owned store

    Raises:
        ScopeAccessError: If ``store_id`` is not owned by the seller
    """
    owned = await store.list_owned_stores(seller_id)
    if store_id is not None:
        if store_id not in owned:
            raise ScopeAccessError(
                "Store not found or access denied",
                {"seller_id": seller_id, "store_id": store_id},
            )
        return SellerScope(seller_id=seller_id, store_ids=[store_id])
    if not owned:
        logger.debug("Seller owns no stores", seller_id=seller_id)
    return SellerScope(seller_id=seller_id, store_ids=list(owned))


async def load_seller_items(store: DataStore, scope: SellerScope) -> SellerSnapshot:
    """Products of the scope and every order item referencing them."""
    snapshot = SellerSnapshot(scope=scope)
    if scope.is_empty:
        return snapshot

    snapshot.products = await store.list_products(scope.store_ids)
    if not snapshot.products:
        return snapshot

    snapshot.items = await store.items_for_products([product.id for product in snapshot.products])
    logger.debug(
        "Seller items loaded",
        scope=scope.label,
        stores=len(scope.store_ids),
        products=len(snapshot.products),
        items=len(snapshot.items),
    )
    return snapshot


async def fetch_attributed_orders(
    store: DataStore,
    snapshot: SellerSnapshot,
    order_filter: Optional[OrderFilter] = None,
) -> AttributionResult:
    """Fetch the snapshot's orders with the filter pushed down, then attribute them."""
    order_ids = snapshot.order_ids
    if not order_ids:
        return AttributionResult()
    orders = await store.orders_by_id(order_ids, order_filter)
    return attribute_orders(snapshot.items, orders, scope=snapshot.scope.label)


async def load_platform_window(store: DataStore, order_filter: OrderFilter) -> PlatformSnapshot:
    """Platform-wide orders for a filter, joined to their items and products."""
    snapshot = PlatformSnapshot()
    snapshot.orders = await store.list_orders(order_filter)
    if not snapshot.orders:
        return snapshot

    snapshot.items = await store.items_for_orders([order.id for order in snapshot.orders])
    if not snapshot.items:
        return snapshot

    products = await store.products_by_id(list(dict.fromkeys(item.product_id for item in snapshot.items)))
    snapshot.products = {product.id: product for product in products}
    unknown_product_anomalies(snapshot.items, set(snapshot.products))
    return snapshot
