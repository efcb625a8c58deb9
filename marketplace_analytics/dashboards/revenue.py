"""
Seller Revenue Report

Analytics over a revenue period for one seller, optionally narrowed to a
single owned store. Everything here is computed from pure orders only: an
order shared with another seller never shows up in this seller's charts.
Revenue figures count completed orders; the status breakdown counts pure
orders of any status created in the window.
"""

from datetime import datetime
from typing import List, Optional, Tuple, Union

import structlog

from marketplace_analytics.config import get_settings
from marketplace_analytics.config.settings import AnalyticsSettings
from marketplace_analytics.domain.read_models import (
    CategoryDistributionEntry,
    OrderStatusEntry,
    RevenueOverview,
    RevenueTrendPoint,
    SellerRevenueReport,
    TopEntity,
)
from marketplace_analytics.domain.records import OrderFilter, OrderStatus
from marketplace_analytics.engine import aggregators
from marketplace_analytics.engine.attribution import AttributionResult
from marketplace_analytics.engine.periods import (
    RevenuePeriod,
    TimeWindow,
    parse_period,
    period_buckets,
    previous_window,
    window_of,
)
from marketplace_analytics.engine.pipeline import (
    SellerSnapshot,
    fetch_attributed_orders,
    load_seller_items,
    resolve_scope,
)
from marketplace_analytics.dashboards.sections import Section, SharedFetch, assemble, gather_sections
from marketplace_analytics.repository.interfaces import DataStore

logger = structlog.get_logger(__name__)


async def completed_attribution(
    store: DataStore,
    snapshot: SellerSnapshot,
    previous: TimeWindow,
    current: TimeWindow,
) -> AttributionResult:
    """Completed orders across the previous and current windows in one fetch."""
    if snapshot.is_empty:
        return AttributionResult()
    return await fetch_attributed_orders(
        store,
        snapshot,
        OrderFilter.of([OrderStatus.COMPLETED], date_from=previous.start, date_to=current.end),
    )


async def window_attribution(store: DataStore, snapshot: SellerSnapshot, current: TimeWindow) -> AttributionResult:
    """Orders of any status created in the current window."""
    if snapshot.is_empty:
        return AttributionResult()
    return await fetch_attributed_orders(
        store,
        snapshot,
        OrderFilter.of(date_from=current.start, date_to=current.end),
    )


def overview_of(
    attribution: AttributionResult,
    current: TimeWindow,
    previous: TimeWindow,
    period: RevenuePeriod,
) -> RevenueOverview:
    pure = attribution.pure_orders
    in_current = [attributed for attributed in pure if current.contains(attributed.order.created_at)]
    previous_revenue = sum(
        attributed.seller_revenue for attributed in pure if previous.contains(attributed.order.created_at)
    )
    return aggregators.revenue_overview(in_current, previous_revenue, period.value)


def pure_items_in(
    attribution: AttributionResult,
    snapshot: SellerSnapshot,
    window: TimeWindow,
):
    """Seller items of pure orders created inside ``window``."""
    order_ids = {
        attributed.order.id
        for attributed in attribution.pure_orders
        if window.contains(attributed.order.created_at)
    }
    return [item for item in snapshot.items if item.order_id in order_ids]


async def build_seller_revenue_report(
    store: DataStore,
    seller_id: str,
    period: Union[str, RevenuePeriod] = RevenuePeriod.LAST_30_DAYS,
    store_id: Optional[str] = None,
    now: Optional[datetime] = None,
    analytics: Optional[AnalyticsSettings] = None,
) -> SellerRevenueReport:
    """
    Build the revenue report for a period.

    Args:
        store: Data store
        seller_id: Requesting seller
        period: One of ``7d``, ``30d``, ``90d``, ``1y``
        store_id: Narrow the report to one store owned by the seller
        now: Reference time, defaults to the current UTC time
        analytics: Analytics settings override

    Raises:
        InvalidFilterError: If the period is not supported
        ScopeAccessError: If ``store_id`` is not owned by the seller
    """
    selected = parse_period(period)
    analytics = analytics or get_settings().analytics
    buckets = period_buckets(selected, now)
    current = window_of(buckets)
    previous = previous_window(selected, now)

    def empty() -> SellerRevenueReport:
        return SellerRevenueReport(
            overview=RevenueOverview(period=selected.value),
            trend=aggregators.revenue_trend([], buckets),
        )

    async def build() -> SellerRevenueReport:
        scope = await resolve_scope(store, seller_id, store_id)
        if scope.is_empty:
            return empty()

        snapshot = SharedFetch(lambda: load_seller_items(store, scope))

        async def completed() -> Tuple[SellerSnapshot, AttributionResult]:
            loaded = await snapshot
            return loaded, await completed_attribution(store, loaded, previous, current)

        completed_orders = SharedFetch(completed)

        async def overview() -> RevenueOverview:
            _, attribution = await completed_orders
            return overview_of(attribution, current, previous, selected)

        async def trend() -> List[RevenueTrendPoint]:
            _, attribution = await completed_orders
            points = ((attributed.order.created_at, attributed.seller_revenue) for attributed in attribution.pure_orders)
            return aggregators.revenue_trend(points, buckets)

        async def by_category() -> List[CategoryDistributionEntry]:
            loaded, attribution = await completed_orders
            return aggregators.category_revenue(
                pure_items_in(attribution, loaded, current),
                loaded.product_index,
                cap=analytics.category_cap,
            )

        async def top_products() -> List[TopEntity]:
            loaded, attribution = await completed_orders
            return aggregators.top_products(
                pure_items_in(attribution, loaded, current),
                loaded.product_index,
                limit=analytics.top_n,
            )

        async def status_breakdown() -> List[OrderStatusEntry]:
            attribution = await window_attribution(store, await snapshot, current)
            return aggregators.order_status_distribution(
                attributed.order.status for attributed in attribution.pure_orders
            )

        overview_model, trend_points, categories, products, statuses = await gather_sections(
            "seller_revenue",
            [
                Section("overview", overview, lambda: RevenueOverview(period=selected.value)),
                Section("trend", trend, lambda: aggregators.revenue_trend([], buckets)),
                Section("by_category", by_category, list),
                Section("top_products", top_products, list),
                Section("status_breakdown", status_breakdown, list),
            ],
            shared=[snapshot, completed_orders],
        )

        logger.info(
            "Seller revenue report assembled",
            seller_id=seller_id,
            store_id=store_id,
            period=selected.value,
            total_revenue=overview_model.total_revenue,
            total_orders=overview_model.total_orders,
        )
        return SellerRevenueReport(
            overview=overview_model,
            trend=trend_points,
            by_category=categories,
            top_products=products,
            status_breakdown=statuses,
        )

    return await assemble("seller_revenue", build, empty)
