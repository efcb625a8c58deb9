"""
Seller Dashboard Assembler

Headline cards, low stock alerts and open orders for everything a seller
owns. The 7-day revenue card and the pending order list are operational
views: they use the seller's own share of partial orders. Cancelled and
refunded orders do not count as revenue.
"""

from datetime import datetime
from typing import List, Optional, Tuple

import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.config.settings import AnalyticsSettings
from marketplace_analytics.domain.money import format_currency
from marketplace_analytics.domain.read_models import (
    LowStockAlert,
    PendingOrderSummary,
    SellerDashboard,
    SummaryCard,
)
from marketplace_analytics.domain.records import (
    OPEN_ORDER_STATUSES,
    OrderFilter,
    OrderStatus,
)
from marketplace_analytics.engine import aggregators
from marketplace_analytics.engine.periods import preceding_days, trailing_days
from marketplace_analytics.engine.pipeline import (
    SellerScope,
    SellerSnapshot,
    fetch_attributed_orders,
    load_seller_items,
    resolve_scope,
)
from marketplace_analytics.dashboards.sections import Section, SharedFetch, assemble, gather_sections
from marketplace_analytics.repository.interfaces import DataStore

logger = structlog.get_logger(__name__)

REVENUE_STATUSES = (OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.COMPLETED)


async def seller_revenue_window(
    store: DataStore,
    snapshot: SellerSnapshot,
    days: int,
    now: Optional[datetime] = None,
) -> Tuple[int, int]:
    """
    Seller share of revenue over the last ``days`` days and the ``days``
    before that, partial orders included.
    """
    if snapshot.is_empty:
        return 0, 0
    current = trailing_days(days, now)
    previous = preceding_days(current, days)
    attribution = await fetch_attributed_orders(
        store,
        snapshot,
        OrderFilter.of(REVENUE_STATUSES, date_from=previous.start, date_to=current.end),
    )
    current_revenue = 0
    previous_revenue = 0
    for attributed in attribution.orders:
        if current.contains(attributed.order.created_at):
            current_revenue += attributed.seller_revenue
        elif previous.contains(attributed.order.created_at):
            previous_revenue += attributed.seller_revenue
    return current_revenue, previous_revenue


async def seller_orders_fulfilled(store: DataStore, snapshot: SellerSnapshot) -> int:
    """Distinct completed orders containing at least one of the seller's products."""
    order_ids = snapshot.order_ids
    if not order_ids:
        return 0
    return await store.count_where("orders", id=order_ids, status=OrderStatus.COMPLETED)


async def seller_products_count(store: DataStore, scope: SellerScope) -> int:
    if scope.is_empty:
        return 0
    return await store.count_where("products", store_id=scope.store_ids)


async def seller_low_stock(
    store: DataStore,
    scope: SellerScope,
    analytics: AnalyticsSettings,
) -> List[LowStockAlert]:
    if scope.is_empty:
        return []
    products = await store.list_low_stock(
        scope.store_ids,
        threshold=analytics.low_stock_threshold,
        limit=analytics.low_stock_limit,
    )
    return aggregators.low_stock_alerts(products)


async def seller_pending_orders(
    store: DataStore,
    snapshot: SellerSnapshot,
    limit: int,
) -> List[PendingOrderSummary]:
    if snapshot.is_empty:
        return []
    attribution = await fetch_attributed_orders(
        store,
        snapshot,
        OrderFilter.of(OPEN_ORDER_STATUSES, limit=limit, newest_first=True),
    )
    return aggregators.pending_order_summaries(attribution.orders, limit=limit)


def build_seller_cards(
    revenue: Tuple[int, int],
    orders_fulfilled: int,
    products_count: int,
    low_stock: List[LowStockAlert],
    window_days: int,
    currency_symbol: str = "$",
) -> List[SummaryCard]:
    current_revenue, previous_revenue = revenue
    return [
        SummaryCard(
            id=f"revenue-{window_days}d",
            title=f"Revenue ({window_days} days)",
            value=format_currency(current_revenue, currency_symbol),
            change_label=aggregators.change_label(current_revenue, previous_revenue),
            trend=aggregators.trend_of(current_revenue, previous_revenue),
            helper_text=f"vs previous {window_days} days",
        ),
        SummaryCard(
            id="orders-fulfilled",
            title="Orders fulfilled",
            value=str(orders_fulfilled),
            change_label="",
            trend="up",
        ),
        SummaryCard(
            id="products-listed",
            title="Products listed",
            value=str(products_count),
            change_label="",
            trend="up",
        ),
        SummaryCard(
            id="low-stock-alerts",
            title="Low stock alerts",
            value=str(len(low_stock)),
            change_label=f"{len(low_stock)} products" if low_stock else "",
            trend="down" if low_stock else "up",
        ),
    ]


def empty_seller_dashboard(window_days: int = 7, currency_symbol: str = "$") -> SellerDashboard:
    return SellerDashboard(
        summary_cards=build_seller_cards((0, 0), 0, 0, [], window_days, currency_symbol),
        low_stock_products=[],
        pending_orders=[],
    )


async def build_seller_dashboard(
    store: DataStore,
    seller_id: str,
    now: Optional[datetime] = None,
    analytics: Optional[AnalyticsSettings] = None,
) -> SellerDashboard:
    """
    Assemble the seller dashboard.

    Sections run concurrently once the seller's stores are resolved; each
    one degrades to its zero value on failure. If the stores cannot be
    resolved the whole dashboard is zero-valued.
    """
    analytics = analytics or get_settings().analytics
    window_days = analytics.seller_revenue_window_days
    symbol = analytics.currency_symbol

    async def build() -> SellerDashboard:
        scope = await resolve_scope(store, seller_id)
        if scope.is_empty:
            return empty_seller_dashboard(window_days, symbol)

        snapshot = SharedFetch(lambda: load_seller_items(store, scope))

        async def revenue() -> Tuple[int, int]:
            return await seller_revenue_window(store, await snapshot, window_days, now)

        async def fulfilled() -> int:
            return await seller_orders_fulfilled(store, await snapshot)

        async def pending() -> List[PendingOrderSummary]:
            return await seller_pending_orders(store, await snapshot, analytics.pending_orders_limit)

        revenue_pair, orders_fulfilled, products_count, low_stock, pending_orders = await gather_sections(
            "seller",
            [
                Section("revenue", revenue, lambda: (0, 0)),
                Section("orders_fulfilled", fulfilled, lambda: 0),
                Section("products_count", lambda: seller_products_count(store, scope), lambda: 0),
                Section("low_stock", lambda: seller_low_stock(store, scope, analytics), list),
                Section("pending_orders", pending, list),
            ],
            shared=[snapshot],
        )

        logger.info(
            "Seller dashboard assembled",
            seller_id=seller_id,
            stores=len(scope.store_ids),
            low_stock=len(low_stock),
            pending_orders=len(pending_orders),
        )
        return SellerDashboard(
            summary_cards=build_seller_cards(
                revenue_pair, orders_fulfilled, products_count, low_stock, window_days, symbol
            ),
            low_stock_products=low_stock,
            pending_orders=pending_orders,
        )

    return await assemble("seller", build, lambda: empty_seller_dashboard(window_days, symbol))
