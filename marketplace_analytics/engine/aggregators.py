"""
Aggregators

Pure reducers over already-attributed data. None of them perform I/O and
none keep state between calls, so identical inputs give identical outputs.

Rankings and category revenue are reduced with polars; group order follows
first appearance and sorts are stable, so ties keep input order.
"""

import bisect
from collections import Counter
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import polars as pl

from marketplace_analytics.domain.money import divide_cents
from marketplace_analytics.domain.read_models import (
    CategoryDistributionEntry,
    LowStockAlert,
    OrderStatusEntry,
    PendingOrderSummary,
    RevenueOverview,
    RevenueTrendPoint,
    TopEntity,
)
from marketplace_analytics.domain.records import (
    DEFAULT_CATEGORY,
    OPEN_ORDER_STATUSES,
    OrderItemRecord,
    OrderStatus,
    ProductRecord,
)
from marketplace_analytics.engine.attribution import AttributedOrder
from marketplace_analytics.engine.periods import Bucket

UNKNOWN_PRODUCT_NAME = "Unknown Product"
UNKNOWN_STORE_NAME = "Unknown Store"
LOW_STOCK_CATEGORY = "Uncategorized"

STATUS_LABELS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.COMPLETED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
    OrderStatus.REFUNDED: "Refunded",
}


# =============================================================================
# GROWTH AND OVERVIEW
# =============================================================================

def growth_percentage(current: int, previous: int) -> float:
    """
    Percentage change from ``previous`` to ``current``.

    A zero previous value yields 100 when there is current revenue and 0
    otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)


def revenue_overview(
    orders: Sequence[AttributedOrder],
    previous_revenue: int,
    period: str,
) -> RevenueOverview:
    """Totals over pure orders in the current window."""
    total_revenue = sum(attributed.seller_revenue for attributed in orders)
    total_orders = len(orders)
    return RevenueOverview(
        total_revenue=total_revenue,
        total_orders=total_orders,
        average_order_value=divide_cents(total_revenue, total_orders),
        growth_percentage=growth_percentage(total_revenue, previous_revenue),
        period=period,
    )


# =============================================================================
# TREND
# =============================================================================

def revenue_trend(
    points: Iterable[Tuple[datetime, int]],
    buckets: Sequence[Bucket],
) -> List[RevenueTrendPoint]:
    """
    Sum ``(created_at, revenue)`` pairs into buckets.

    Always returns one point per bucket in chronological order; points
    outside every bucket are ignored.
    """
    totals = [0] * len(buckets)
    starts = [bucket.start for bucket in buckets]
    for created_at, revenue in points:
        index = bisect.bisect_right(starts, created_at) - 1
        if index >= 0 and buckets[index].contains(created_at):
            totals[index] += revenue
    return [
        RevenueTrendPoint(bucket=bucket.key, label=bucket.label, revenue=total)
        for bucket, total in zip(buckets, totals)
    ]


# =============================================================================
# DISTRIBUTIONS
# =============================================================================

def category_product_counts(
    products: Iterable[ProductRecord],
    cap: int = 10,
) -> List[CategoryDistributionEntry]:
    """Products per category, largest first, capped."""
    counts = Counter(product.category_or_default for product in products)
    return [
        CategoryDistributionEntry(name=name, value=count)
        for name, count in counts.most_common(cap)
    ]


def category_revenue(
    items: Iterable[OrderItemRecord],
    products: Mapping[str, ProductRecord],
    cap: int = 10,
) -> List[CategoryDistributionEntry]:
    """
    Revenue and distinct order count per category.

    Items whose product is not in ``products`` are bucketed under "Other".
    """
    rows = [
        (
            products[item.product_id].category_or_default if item.product_id in products else DEFAULT_CATEGORY,
            item.order_id,
            item.line_revenue,
        )
        for item in items
    ]
    if not rows:
        return []

    frame = pl.DataFrame(
        rows,
        schema={"category": pl.Utf8, "order_id": pl.Utf8, "revenue": pl.Int64},
        orient="row",
    )
    grouped = (
        frame.group_by("category", maintain_order=True)
        .agg(
            pl.col("revenue").sum().alias("revenue"),
            pl.col("order_id").n_unique().alias("orders"),
        )
        .sort("revenue", descending=True, maintain_order=True)
        .head(cap)
    )
    return [
        CategoryDistributionEntry(name=row["category"], value=int(row["revenue"]), order_count=int(row["orders"]))
        for row in grouped.iter_rows(named=True)
    ]


def order_status_counts(counts: Mapping[OrderStatus, int]) -> List[OrderStatusEntry]:
    """
    Pre-computed per-status counts as display entries, largest first.

    Statuses with no orders are left out; ties keep the mapping's order.
    """
    entries = [
        OrderStatusEntry(status=STATUS_LABELS[OrderStatus(status)], count=count)
        for status, count in counts.items()
        if count > 0
    ]
    return sorted(entries, key=lambda entry: entry.count, reverse=True)


def order_status_distribution(statuses: Iterable[OrderStatus]) -> List[OrderStatusEntry]:
    """Order counts per display label, largest first."""
    return order_status_counts(Counter(OrderStatus(status) for status in statuses))


# =============================================================================
# RANKINGS
# =============================================================================

def rank_entities(
    rows: Iterable[Tuple[str, str, int, int]],
    names: Mapping[str, str],
    limit: int = 10,
    default_name: str = UNKNOWN_PRODUCT_NAME,
    previous_revenue: Optional[Mapping[str, int]] = None,
) -> List[TopEntity]:
    """
    Rank entities by revenue.

    Args:
        rows: ``(entity_id, order_id, quantity, revenue)`` tuples
        names: Display name per entity id
        limit: Number of entities kept
        default_name: Name used for ids missing from ``names``
        previous_revenue: Revenue per entity in the preceding window; when
            given, each entity carries a growth percentage

    Returns:
        Entities sorted by revenue descending, ties in first-seen order
    """
    rows = list(rows)
    if not rows or limit <= 0:
        return []

    frame = pl.DataFrame(
        rows,
        schema={"entity_id": pl.Utf8, "order_id": pl.Utf8, "quantity": pl.Int64, "revenue": pl.Int64},
        orient="row",
    )
    ranked = (
        frame.group_by("entity_id", maintain_order=True)
        .agg(
            pl.col("revenue").sum().alias("revenue"),
            pl.col("quantity").sum().alias("quantity"),
            pl.col("order_id").n_unique().alias("orders"),
        )
        .sort("revenue", descending=True, maintain_order=True)
        .head(limit)
    )

    entities = []
    for row in ranked.iter_rows(named=True):
        entity_id = row["entity_id"]
        revenue = int(row["revenue"])
        growth = None
        if previous_revenue is not None:
            growth = growth_percentage(revenue, previous_revenue.get(entity_id, 0))
        entities.append(
            TopEntity(
                id=entity_id,
                name=names.get(entity_id, default_name),
                revenue=revenue,
                orders=int(row["orders"]),
                quantity=int(row["quantity"]),
                growth=growth,
            )
        )
    return entities


def top_products(
    items: Iterable[OrderItemRecord],
    products: Mapping[str, ProductRecord],
    limit: int = 10,
) -> List[TopEntity]:
    """Seller products ranked by revenue from pure-order items."""
    rows = [(item.product_id, item.order_id, item.quantity, item.line_revenue) for item in items]
    names = {product_id: product.name for product_id, product in products.items()}
    return rank_entities(rows, names, limit=limit, default_name=UNKNOWN_PRODUCT_NAME)


def store_revenue_rows(
    items: Iterable[OrderItemRecord],
    products: Mapping[str, ProductRecord],
) -> List[Tuple[str, str, int, int]]:
    """Map items to ``(store_id, order_id, quantity, revenue)``, skipping unknown products."""
    return [
        (products[item.product_id].store_id, item.order_id, item.quantity, item.line_revenue)
        for item in items
        if item.product_id in products
    ]


def revenue_by_entity(rows: Iterable[Tuple[str, str, int, int]]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for entity_id, _order_id, _quantity, revenue in rows:
        totals[entity_id] = totals.get(entity_id, 0) + revenue
    return totals


def top_stores(
    items: Iterable[OrderItemRecord],
    products: Mapping[str, ProductRecord],
    store_names: Mapping[str, str],
    limit: int = 10,
    previous_items: Optional[Iterable[OrderItemRecord]] = None,
    previous_products: Optional[Mapping[str, ProductRecord]] = None,
) -> List[TopEntity]:
    """
    Platform-wide store ranking from order items.

    When the previous window's items are supplied, growth is computed the
    same way as seller revenue growth.
    """
    rows = store_revenue_rows(items, products)
    previous = None
    if previous_items is not None:
        previous = revenue_by_entity(store_revenue_rows(previous_items, previous_products or products))
    return rank_entities(rows, store_names, limit=limit, default_name=UNKNOWN_STORE_NAME, previous_revenue=previous)


# =============================================================================
# ALERTS
# =============================================================================

def stock_severity(stock: int) -> str:
    if stock <= 0:
        return "Out of Stock"
    if stock < 3:
        return "Critical"
    if stock < 5:
        return "Low"
    return "Running Low"


def low_stock_alerts(products: Iterable[ProductRecord]) -> List[LowStockAlert]:
    """Project low-stock products into alerts, preserving fetch order."""
    return [
        LowStockAlert(
            product_id=product.id,
            name=product.name,
            stock=product.stock,
            category=product.category or LOW_STOCK_CATEGORY,
            severity=stock_severity(product.stock),
        )
        for product in products
    ]


def pending_order_summaries(
    orders: Iterable[AttributedOrder],
    limit: int = 10,
) -> List[PendingOrderSummary]:
    """Open orders newest first; partial orders disclose only the seller's share."""
    open_orders = [attributed for attributed in orders if attributed.order.status in OPEN_ORDER_STATUSES]
    open_orders.sort(key=lambda attributed: attributed.order.created_at, reverse=True)
    return [
        PendingOrderSummary(
            id=attributed.order.id,
            status=attributed.order.status.value,
            amount=attributed.order.total_amount,
            seller_amount=attributed.seller_revenue,
            is_partial=attributed.is_partial,
            created_at=attributed.order.created_at,
        )
        for attributed in open_orders[:limit]
    ]


# =============================================================================
# SUMMARY CARD HELPERS
# =============================================================================

def change_label(current: int, previous: int) -> str:
    """``+12.5%`` style label; ``+100%`` or ``0%`` when there is no baseline."""
    if previous == 0:
        return "+100%" if current > 0 else "0%"
    change = (current - previous) / previous * 100
    return f"{'+' if change >= 0 else ''}{change:.1f}%"


def trend_of(current: int, previous: int) -> str:
    return "up" if current >= previous else "down"
