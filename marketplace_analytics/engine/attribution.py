"""
Attribution Engine

Decides, for one seller scope, how much of each order's revenue belongs to
the seller and whether the order is *pure* (entirely the seller's) or
*partial* (shared with other sellers).

Two views come out of one attribution:

- ``orders``: every order touching the seller, partial ones flagged. Used by
  operational views (pending orders, order list, the 7-day revenue card),
  which disclose only the seller's own share.
- ``pure_orders``: orders fully attributable to the seller. Used by analytics
  (overview, trend, category, status, top products) so a shared order is
  never counted against several sellers' charts.

Amounts are integer cents, so purity is exact equality. Purity is recomputed
on every call and never stored.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

import structlog

from marketplace_analytics.domain.records import OrderItemRecord, OrderRecord

logger = structlog.get_logger(__name__)


class AnomalyKind(str, Enum):
    """Data integrity faults surfaced during attribution"""
    NO_SELLER_ITEMS = "no_seller_items"
    EXCEEDS_TOTAL = "exceeds_total"
    UNKNOWN_PRODUCT = "unknown_product"


@dataclass(frozen=True)
class AttributionAnomaly:
    kind: AnomalyKind
    order_id: str
    seller_revenue: int = 0
    total_amount: int = 0
    product_id: Optional[str] = None


@dataclass(frozen=True)
class AttributedOrder:
    """An order together with the scoped seller's share of it"""
    order: OrderRecord
    seller_revenue: int

    @property
    def is_pure(self) -> bool:
        return self.seller_revenue == self.order.total_amount

    @property
    def is_partial(self) -> bool:
        return not self.is_pure


@dataclass
class AttributionResult:
    orders: List[AttributedOrder] = field(default_factory=list)
    anomalies: List[AttributionAnomaly] = field(default_factory=list)

    @property
    def pure_orders(self) -> List[AttributedOrder]:
        return [attributed for attributed in self.orders if attributed.is_pure]

    @property
    def pure_order_ids(self) -> Set[str]:
        return {attributed.order.id for attributed in self.orders if attributed.is_pure}

    def pure_items(self, items: Iterable[OrderItemRecord]) -> List[OrderItemRecord]:
        """Seller items that belong to pure orders, input order preserved."""
        pure_ids = self.pure_order_ids
        return [item for item in items if item.order_id in pure_ids]


def seller_revenue_by_order(items: Iterable[OrderItemRecord]) -> Dict[str, int]:
    """Sum line revenue per order id, keeping first-seen order."""
    revenue: Dict[str, int] = OrderedDict()
    for item in items:
        revenue[item.order_id] = revenue.get(item.order_id, 0) + item.line_revenue
    return revenue


def attribute_orders(
    items: Iterable[OrderItemRecord],
    orders: Iterable[OrderRecord],
    scope: Optional[str] = None,
) -> AttributionResult:
    """
    Attribute fetched orders to the seller owning ``items``.

    Args:
        items: The seller's order items (only items of the seller's products)
        orders: Order headers fetched for those items' order ids
        scope: Label used in diagnostics (seller or store id)

    Returns:
        AttributionResult with all attributed orders and any anomalies
    """
    revenue = seller_revenue_by_order(items)
    result = AttributionResult()

    for order in orders:
        seller_revenue = revenue.get(order.id, 0)

        if seller_revenue == 0:
            # The item join should never yield such an order
            anomaly = AttributionAnomaly(
                kind=AnomalyKind.NO_SELLER_ITEMS,
                order_id=order.id,
                total_amount=order.total_amount,
            )
            result.anomalies.append(anomaly)
            logger.warning(
                "Order has no revenue for seller scope, excluded",
                scope=scope,
                order_id=order.id,
                total_amount=order.total_amount,
            )
            continue

        if seller_revenue > order.total_amount:
            result.anomalies.append(
                AttributionAnomaly(
                    kind=AnomalyKind.EXCEEDS_TOTAL,
                    order_id=order.id,
                    seller_revenue=seller_revenue,
                    total_amount=order.total_amount,
                )
            )
            logger.warning(
                "Seller revenue exceeds order total, treated as partial",
                scope=scope,
                order_id=order.id,
                seller_revenue=seller_revenue,
                total_amount=order.total_amount,
            )

        result.orders.append(AttributedOrder(order=order, seller_revenue=seller_revenue))

    logger.debug(
        "Orders attributed",
        scope=scope,
        orders=len(result.orders),
        pure=len(result.pure_order_ids),
        anomalies=len(result.anomalies),
    )
    return result


def unknown_product_anomalies(
    items: Iterable[OrderItemRecord],
    known_product_ids: Set[str],
) -> List[AttributionAnomaly]:
    """Flag items whose product is missing from the product index."""
    anomalies = []
    for item in items:
        if item.product_id not in known_product_ids:
            anomalies.append(
                AttributionAnomaly(
                    kind=AnomalyKind.UNKNOWN_PRODUCT,
                    order_id=item.order_id,
                    product_id=item.product_id,
                )
            )
    if anomalies:
        logger.warning(
            "Order items reference unknown products",
            count=len(anomalies),
            product_ids=sorted({a.product_id for a in anomalies if a.product_id}),
        )
    return anomalies
