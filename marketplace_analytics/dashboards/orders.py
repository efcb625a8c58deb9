"""
Seller Order List

Every order touching a seller's products, partial ones included. Each order
carries only the seller's own lines and the seller's share of the total;
other sellers' items on a shared order are never disclosed.
"""

from typing import Dict, List, Optional, Sequence

import structlog

from marketplace_analytics.domain.read_models import SellerOrder, SellerOrderLine
from marketplace_analytics.domain.records import OrderFilter, OrderItemRecord, OrderStatus, ProductRecord
from marketplace_analytics.engine.aggregators import UNKNOWN_PRODUCT_NAME
from marketplace_analytics.engine.attribution import AttributedOrder, attribute_orders
from marketplace_analytics.engine.pipeline import SellerSnapshot, load_seller_items, resolve_scope
from marketplace_analytics.dashboards.sections import assemble
from marketplace_analytics.errors import InvalidFilterError, NotFoundError
from marketplace_analytics.repository.interfaces import DataStore

logger = structlog.get_logger(__name__)

ALL_STATUSES = "all"


def parse_status_filter(status: Optional[str]) -> Optional[OrderStatus]:
    """
    Validate an order status filter; ``all`` or nothing means no filter.

    Raises:
        InvalidFilterError: If the status is unknown
    """
    if status is None or status == ALL_STATUSES:
        return None
    try:
        return OrderStatus(status)
    except ValueError:
        raise InvalidFilterError(
            f"Unsupported order status '{status}'",
            {"allowed": [ALL_STATUSES] + [s.value for s in OrderStatus]},
        ) from None


def order_lines(items: Sequence[OrderItemRecord], products: Dict[str, ProductRecord]) -> List[SellerOrderLine]:
    lines = []
    for item in items:
        product = products.get(item.product_id)
        lines.append(
            SellerOrderLine(
                id=f"{item.order_id}-{item.product_id}",
                product_id=item.product_id,
                product_name=product.name if product else UNKNOWN_PRODUCT_NAME,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=item.line_revenue,
            )
        )
    return lines


async def to_seller_orders(
    store: DataStore,
    snapshot: SellerSnapshot,
    attributed: Sequence[AttributedOrder],
) -> List[SellerOrder]:
    """Join attributed orders with the seller's lines and buyer details."""
    if not attributed:
        return []

    buyer_ids = list(dict.fromkeys(a.order.buyer_id for a in attributed))
    buyers = {user.id: user for user in await store.users_by_id(buyer_ids)}

    items_by_order: Dict[str, List[OrderItemRecord]] = {}
    for item in snapshot.items:
        items_by_order.setdefault(item.order_id, []).append(item)
    products = snapshot.product_index

    orders = []
    for entry in attributed:
        order = entry.order
        buyer = buyers.get(order.buyer_id)
        orders.append(
            SellerOrder(
                id=order.id,
                buyer_id=order.buyer_id,
                buyer_name=buyer.name if buyer else None,
                buyer_email=buyer.email if buyer else None,
                total_amount=order.total_amount,
                seller_amount=entry.seller_revenue,
                status=order.status.value,
                is_partial=entry.is_partial,
                created_at=order.created_at,
                updated_at=order.updated_at,
                items=order_lines(items_by_order.get(order.id, []), products),
            )
        )
    orders.sort(key=lambda o: o.created_at, reverse=True)
    return orders


async def list_seller_orders(
    store: DataStore,
    seller_id: str,
    status: Optional[str] = ALL_STATUSES,
    store_id: Optional[str] = None,
) -> List[SellerOrder]:
    """
    Orders touching the seller, newest first.

    Raises:
        InvalidFilterError: If ``status`` is unknown
        ScopeAccessError: If ``store_id`` is not owned by the seller
    """
    selected = parse_status_filter(status)

    async def build() -> List[SellerOrder]:
        scope = await resolve_scope(store, seller_id, store_id)
        snapshot = await load_seller_items(store, scope)
        if snapshot.is_empty:
            return []
        order_filter = OrderFilter.of([selected] if selected else (), newest_first=True)
        orders = await store.orders_by_id(snapshot.order_ids, order_filter)
        attribution = attribute_orders(snapshot.items, orders, scope=scope.label)
        result = await to_seller_orders(store, snapshot, attribution.orders)
        logger.info(
            "Seller orders listed",
            seller_id=seller_id,
            store_id=store_id,
            status=status,
            orders=len(result),
            partial=sum(1 for o in result if o.is_partial),
        )
        return result

    return await assemble("seller_orders", build, list)


async def get_seller_order(
    store: DataStore,
    seller_id: str,
    order_id: str,
    store_id: Optional[str] = None,
) -> SellerOrder:
    """
    One order touching the seller, with the seller's lines only.

    Raises:
        NotFoundError: If the order does not exist or has none of the seller's items
        ScopeAccessError: If ``store_id`` is not owned by the seller
    """
    scope = await resolve_scope(store, seller_id, store_id)
    snapshot = await load_seller_items(store, scope)
    items = [item for item in snapshot.items if item.order_id == order_id]
    orders = await store.orders_by_id([order_id]) if items else []
    attribution = attribute_orders(items, orders, scope=scope.label)
    if not attribution.orders:
        raise NotFoundError("Order not found", {"order_id": order_id, "seller_id": seller_id})

    narrowed = SellerSnapshot(scope=scope, products=snapshot.products, items=items)
    [order] = await to_seller_orders(store, narrowed, attribution.orders)
    return order
